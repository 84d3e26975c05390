# Overview: Flask API routes for service health; reports database reachability and namespace.

# backend/stockledger/routes/system.py
"""
System health endpoint.

Used by deployment checks; no auth.
"""

import time
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..context import current_context
from ..extensions import db

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Round-trip a trivial query and time it."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    ctx = current_context()
    status = 200 if database["status"] == "healthy" else 503
    return jsonify({
        "status": database["status"],
        "namespace": ctx.namespace,
        "timezone": ctx.timezone,
        "database": database,
    }), status
