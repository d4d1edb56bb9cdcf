from fastapi import APIRouter, Depends

from neuronorm.core.metrics import inc_counter
from neuronorm.engine.scoring import ScoringEngine, get_engine
from neuronorm.schemas.score import ScoreRequest, ScoreResponse
from neuronorm.services.scoring import score_request

router = APIRouter(prefix="/score", tags=["score"])


@router.post("/{instrument_code}", response_model=ScoreResponse)
def score_instrument(
    instrument_code: str,
    payload: ScoreRequest,
    engine: ScoringEngine = Depends(get_engine),
) -> ScoreResponse:
    inc_counter("http.score.requests")
    return score_request(engine, instrument_code, payload)
