# scout_bot/routes/profile.py
"""
Taste profile endpoints.

GET  /profile/<session_id>  -> full profile + sidebar summary
POST /feedback              -> card save / reject buttons
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, jsonify, request

from ..enums import FeedbackType
from ..errors import TurnInProgressError
from ..profile_engine import summarize_profile
from . import get_assistant

log = logging.getLogger(__name__)
bp = Blueprint("profile", __name__)


@bp.get("/profile/<session_id>")
def get_profile(session_id: str) -> tuple[Dict[str, Any], int]:
    profile = get_assistant().get_profile(session_id)
    if profile is None:
        return jsonify({"error": "Unknown session", "session_id": session_id}), 404
    return jsonify({
        "session_id": session_id,
        "profile": profile.to_dict(),
        "summary": summarize_profile(profile),
    }), 200


@bp.post("/feedback")
def feedback() -> tuple[Dict[str, Any], int]:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    session_id = str(data.get("session_id") or "").strip()
    restaurant = str(data.get("restaurant") or "").strip()
    raw_type = str(data.get("feedback_type") or "").strip().lower()

    if not session_id or not restaurant:
        return jsonify({"error": "Missing required fields: session_id, restaurant"}), 400
    try:
        feedback_type = FeedbackType(raw_type)
    except ValueError:
        allowed = ", ".join(f.value for f in FeedbackType)
        return jsonify({"error": f"feedback_type must be one of: {allowed}"}), 400

    try:
        profile = get_assistant().apply_feedback(session_id, restaurant, feedback_type)
    except TurnInProgressError as exc:
        log.warning(f"FEEDBACK_REJECTED | session={session_id} | reason=turn_in_progress")
        return jsonify({"error": str(exc), "status": "already_processing"}), 409

    return jsonify({
        "session_id": session_id,
        "profile_updated": True,
        "summary": summarize_profile(profile),
    }), 200
