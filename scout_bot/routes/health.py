# scout_bot/routes/health.py
"""Simple readiness/liveness probe."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify

from . import get_assistant

bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check() -> tuple[Dict[str, Any], int]:
    """Health check endpoint for ALB routing (with /rs prefix from blueprint)."""
    assistant = get_assistant()
    return jsonify({
        "status": "healthy",
        "service": "nyc-scout",
        "sessions": len(assistant.store),
    }), 200
