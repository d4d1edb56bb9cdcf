from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, Response

from neuronorm import __version__
from neuronorm.core.config import settings
from neuronorm.core.logging import configure_logging, correlation_context, get_logger
from neuronorm.core.metrics import metrics_registry
from neuronorm.core.numeric import safe_round
from neuronorm.engine.registry import InstrumentRegistry, get_registry
from neuronorm.routers.exceptions import register_exception_handlers
from neuronorm.routers.instruments import router as instruments_router
from neuronorm.routers.score import router as score_router


configure_logging(level=settings.log_level, environment=settings.environment, service=settings.app_name)
logger = get_logger("neuronorm.main", component="app")

_app_start_time = datetime.now(timezone.utc)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the instrument registry before serving.

    A catalog that fails integrity checks raises here and the app never
    starts serving requests.
    """
    registry = get_registry()
    logger.info(
        "startup_registry_ready",
        extra={
            "structured_data": {
                "catalog_version": registry.catalog_version,
                "instruments": len(registry),
                "environment": settings.environment,
            }
        },
    )
    yield


# Interactive docs are not served in production.
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    debug=settings.debug,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan,
)
register_exception_handlers(app)

app.include_router(score_router)
app.include_router(instruments_router)


@app.middleware("http")
async def bind_correlation_id(request: Request, call_next):
    with correlation_context(request.headers.get(REQUEST_ID_HEADER)) as correlation_id:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response


@app.get("/health")
def health(registry: InstrumentRegistry = Depends(get_registry)):
    """Application status: uptime, loaded catalog and a metrics summary.

    The registry is a dependency, so a broken catalog surfaces as a
    configuration error here instead of a healthy status.
    """
    now = datetime.now(timezone.utc)
    uptime = (now - _app_start_time).total_seconds()
    total_requests = metrics_registry.total("http.")
    return {
        "status": "healthy",
        "version": __version__,
        "started_at": _app_start_time.isoformat(),
        "uptime_seconds": safe_round(uptime, 2),
        "environment": settings.environment,
        "total_requests": int(total_requests),
        "catalog": {
            "version": registry.catalog_version,
            "instruments": len(registry),
            "tables": len(registry.store),
        },
        "metrics_summary": metrics_registry.summary(),
    }


@app.get("/", include_in_schema=False)
def root():
    """Lightweight index to avoid 404s and point to docs."""
    return {
        "name": settings.app_name,
        "status": "ok",
        "docs": app.docs_url,
        "health": "/health",
        "instruments": "/instruments",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)
