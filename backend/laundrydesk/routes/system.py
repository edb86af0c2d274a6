# Overview: System health endpoint.

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..responses import failure, success
from ..time_utils import to_utc_z, utcnow


system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """Round-trip a trivial query and report latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "latency_ms": round((time.time() - start_time) * 1000, 2)}
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    if database["status"] != "healthy":
        return failure(503, "SERVICE_UNAVAILABLE", "Database unavailable", {"database": database})
    return success({
        "status": "healthy",
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    })
