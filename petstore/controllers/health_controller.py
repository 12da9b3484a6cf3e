"""
Health controller - liveness and database check for monitoring.
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("", methods=["GET"])
def health_check():
    """
    Report whether the service can reach its store.

    Status codes:
        200: Store reachable
        503: Store unreachable

    Note:
        - No rate limit (monitoring endpoint)
    """
    started = time.perf_counter()
    db = current_app.config["SESSION_FACTORY"]()
    try:
        db.execute(text("SELECT 1"))
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        return jsonify({"status": "healthy", "database": "ok", "latency_ms": latency_ms}), 200
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"endpoint": "/health", "error": str(e)}},
        )
        return jsonify({"status": "unhealthy", "database": "unreachable"}), 503
    finally:
        db.close()
