# scout_bot/routes/reset.py
"""
/reset endpoint – drops a session (profile and conversation) and hands back
a fresh session id, so you can start over without restarting the backend.

POST body:
{
  "session_id": "SCOUT_NYC_abc123"
}
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, jsonify, request

from . import get_assistant

log = logging.getLogger(__name__)
bp = Blueprint("reset", __name__)


@bp.post("/reset")
def reset_session() -> tuple[Dict[str, Any], int]:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    session_id = str(data.get("session_id") or "").strip()
    if not session_id:
        return jsonify({"error": "Missing session_id"}), 400

    assistant = get_assistant()
    removed = assistant.reset(session_id)
    next_id = assistant.new_session_id()
    log.info(f"RESET | session={session_id} | existed={removed} | next_session={next_id}")
    return jsonify({
        "message": "Session reset successfully",
        "existed": removed,
        "new_session_id": next_id,
    }), 200
