from __future__ import annotations

import math
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from neuronorm.core.errors import DomainError
from neuronorm.core.logging import get_correlation_id, get_logger

logger = get_logger("neuronorm.routers.exceptions", component="http")


def _json_safe(value: Any) -> Any:
    # Starlette renders with allow_nan=False; a rejected NaN or inf must still serialize.
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


def _error_body(exc: DomainError) -> Dict[str, Any]:
    """``{"error": tag, "detail": {...}}``; scoring errors put ``field`` and ``value`` in detail."""

    detail: Dict[str, Any] = {"message": exc.message}
    if isinstance(exc.detail, dict):
        detail.update({key: _json_safe(value) for key, value in exc.detail.items() if key != "message"})
    elif exc.detail is not None:
        detail["extra"] = _json_safe(exc.detail)
    body: Dict[str, Any] = {"error": exc.error_code, "detail": detail}
    correlation_id = get_correlation_id()
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def _handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        if exc.status_code >= 500:
            # Catalog and derivation faults are ours, not the caller's.
            logger.error(
                "server_side_domain_error",
                extra={"structured_data": {"error": exc.error_code, "path": request.url.path, "message": exc.message}},
            )
        else:
            logger.info(
                "request_rejected",
                extra={"structured_data": {"error": exc.error_code, "path": request.url.path}},
            )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))
