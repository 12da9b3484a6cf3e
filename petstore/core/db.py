import logging
import time
from typing import Any, Dict, Optional

from flask import g, has_request_context
from sqlalchemy import event
from sqlalchemy.engine import Engine

from petstore.core.config import get_slow_query_threshold_ms, slow_query_alerts_enabled

logger = logging.getLogger("sql.alerts")

_SENSITIVE_KEYS = ("password", "token", "secret", "email", "phone")


def _safe_truncate(value: Any, limit: int = 500) -> str:
    text = str(value)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _mask_params(params: Any) -> Any:
    if isinstance(params, dict):
        masked: Dict[str, Any] = {}
        for key, value in params.items():
            if any(marker in str(key).lower() for marker in _SENSITIVE_KEYS):
                masked[key] = "***"
            else:
                masked[key] = _mask_params(value)
        return masked
    if isinstance(params, (list, tuple)):
        return [_mask_params(item) for item in params]
    if isinstance(params, bytes):
        return "<binary>"
    return _safe_truncate(params, 200)


def _gather_request_context(db_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    context: Dict[str, Any] = {}
    if has_request_context():
        request_id = getattr(g, "request_id", None)
        if request_id:
            context["request_id"] = request_id
        route = getattr(g, "route", None)
        if route:
            context["route"] = route
    for key, value in (db_info or {}).items():
        if value:
            context[key] = value
    return context


def register_query_timing(engine: Engine, db_info: Optional[Dict[str, Any]] = None) -> None:
    """Register slow query alert listeners for the provided engine."""

    if getattr(engine, "_slow_query_alerts_registered", False):
        return

    resolved_db_info = dict(db_info or {})
    if not resolved_db_info:
        resolved_db_info = {
            "db_host": getattr(engine.url, "host", None),
            "db_name": getattr(engine.url, "database", None),
        }

    @event.listens_for(engine, "before_cursor_execute")
    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        context._slow_query_start_time = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not slow_query_alerts_enabled():
            return
        start = getattr(context, "_slow_query_start_time", None)
        if start is None:
            return
        duration_ms = (time.perf_counter() - start) * 1000.0
        if duration_ms < get_slow_query_threshold_ms():
            return
        logger.warning(
            "Slow query detected",
            extra={
                "context": {
                    "alert_type": "slow_query",
                    "duration_ms": round(duration_ms, 2),
                    "statement": _safe_truncate(statement or ""),
                    "params": _mask_params(parameters),
                    **_gather_request_context(resolved_db_info),
                }
            },
        )

    setattr(engine, "_slow_query_alerts_registered", True)
