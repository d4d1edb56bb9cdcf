from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional
from uuid import uuid4


_CORRELATION_ID: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_CONFIGURED_FLAG = "_neuronorm_json_logging"


def _encode(value: Any) -> Any:
    # Scoring results carry read-only mappings and the NOT_AVAILABLE sentinel.
    if isinstance(value, MappingProxyType):
        return dict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    ``static_fields`` (service name, environment) are written on every line;
    a record's ``structured_data`` is merged last and wins on key clashes.
    """

    def __init__(self, static_fields: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__()
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.static_fields,
        }
        correlation_id = _CORRELATION_ID.get()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        structured = getattr(record, "structured_data", None)
        if isinstance(structured, Mapping):
            payload.update(structured)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Portuguese labels stay readable in the log stream.
        return json.dumps(payload, ensure_ascii=False, default=_encode)


class StructuredAdapter(logging.LoggerAdapter):
    """Merges the adapter's bound fields under each call's ``structured_data``."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}
        call_fields = extra.get("structured_data")
        fields = {**(self.extra or {}), **(call_fields if isinstance(call_fields, Mapping) else {})}
        kwargs["extra"] = {**extra, "structured_data": fields}
        return msg, kwargs

    def bind(self, **fields: Any) -> "StructuredAdapter":
        return StructuredAdapter(self.logger, {**(self.extra or {}), **fields})


def configure_logging(
    *,
    level: int | str = logging.INFO,
    environment: str = "dev",
    service: str = "neuronorm",
) -> None:
    """Route the root logger through :class:`JsonFormatter`; later calls are no-ops.

    ``dev`` and ``test`` turn an INFO level into DEBUG so per-lookup events
    show up locally; ``prod`` never logs below INFO.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG, False):
        return

    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        resolved = logging.INFO
    if environment in ("dev", "test") and resolved == logging.INFO:
        resolved = logging.DEBUG
    elif environment == "prod":
        resolved = max(resolved, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter({"service": service, "environment": environment}))
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved)
    setattr(root, _CONFIGURED_FLAG, True)


def get_logger(name: str, **defaults: Any) -> StructuredAdapter:
    return StructuredAdapter(logging.getLogger(name), defaults)


def get_correlation_id() -> Optional[str]:
    return _CORRELATION_ID.get()


@contextmanager
def correlation_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind ``correlation_id`` (or a fresh uuid4) to every record logged in the block."""

    bound = correlation_id or str(uuid4())
    token = _CORRELATION_ID.set(bound)
    try:
        yield bound
    finally:
        _CORRELATION_ID.reset(token)


__all__ = [
    "JsonFormatter",
    "StructuredAdapter",
    "configure_logging",
    "correlation_context",
    "get_correlation_id",
    "get_logger",
]
