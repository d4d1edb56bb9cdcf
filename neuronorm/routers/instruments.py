from fastapi import APIRouter, Depends

from neuronorm.engine.scoring import ScoringEngine, get_engine
from neuronorm.schemas.score import InstrumentList, InstrumentSummary
from neuronorm.services.scoring import describe_instrument, list_instruments, list_instruments_for_age

router = APIRouter(prefix="/instruments", tags=["instruments"])


@router.get("", response_model=InstrumentList)
def get_instruments(engine: ScoringEngine = Depends(get_engine)) -> InstrumentList:
    return list_instruments(engine)


# Registered before "/{code}" so "for-age" is not taken as an instrument code.
@router.get("/for-age/{age}", response_model=InstrumentList)
def get_instruments_for_age(age: int, engine: ScoringEngine = Depends(get_engine)) -> InstrumentList:
    return list_instruments_for_age(engine, age)


@router.get("/{code}", response_model=InstrumentSummary)
def get_instrument(code: str, engine: ScoringEngine = Depends(get_engine)) -> InstrumentSummary:
    return describe_instrument(engine, code)
