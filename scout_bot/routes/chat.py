# scout_bot/routes/chat.py
"""
Chat endpoints
==============

POST /chat          {session_id, message, image?}
POST /itinerary     {session_id, type}
POST /weekly-picks  {session_id}

All three run one assistant turn and answer with the FE envelope from
fe_payload.build_envelope.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Awaitable, Callable, Dict

from flask import Blueprint, Response, jsonify, request

from ..assistant import AssistantReply
from ..errors import ImageInputError, TurnInProgressError
from ..fe_payload import build_envelope
from ..utils.smart_logger import get_smart_logger
from . import get_assistant

log = logging.getLogger(__name__)
smart_log = get_smart_logger("chat")
bp = Blueprint("chat", __name__)


def _log_final_payload(tag: str, payload: Any, *, session_id: str) -> None:
    """Single-line compact JSON of what /chat returned."""
    compact = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    if len(compact) > 2000:
        compact = compact[:2000] + "...(truncated)"
    log.debug(f"{tag} | session={session_id} | payload={compact}")


def _read_session_id(data: Dict[str, Any]) -> str:
    return str(data.get("session_id") or "").strip()


async def _run_turn(session_id: str, run: Callable[[], Awaitable[AssistantReply]]) -> Response:
    started = time.time()
    try:
        reply = await run()
    except TurnInProgressError as exc:
        log.warning(f"CHAT_REJECTED | session={session_id} | reason=turn_in_progress")
        return jsonify({"error": str(exc), "status": "already_processing"}), 409
    except ImageInputError as exc:
        log.warning(f"CHAT_BAD_IMAGE | session={session_id} | error={exc}")
        return jsonify({"error": f"Invalid image: {exc}"}), 400

    elapsed = time.time() - started
    smart_log.performance_metric(session_id, "chat_turn", int(elapsed * 1000))
    envelope = build_envelope(reply, elapsed_time_seconds=elapsed)
    _log_final_payload("📦 CHAT_RESPONSE", envelope, session_id=session_id)
    log.info(
        f"CHAT_DONE | session={session_id} | response_type={envelope['response_type']} | "
        f"profile_updated={envelope['profile_updated']} | rounds={reply.turn.rounds}"
    )
    return jsonify(envelope), 200


@bp.post("/chat")
async def chat() -> Response:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    session_id = _read_session_id(data)
    message = str(data.get("message") or "").strip()
    image = data.get("image") or None

    if not session_id:
        return jsonify({"error": "Missing required fields: session_id"}), 400
    if not message and not image:
        log.warning(f"CHAT_EMPTY_MESSAGE | session={session_id}")
        return jsonify({"error": "Message cannot be empty"}), 400
    if image is not None and not isinstance(image, str):
        return jsonify({"error": "Invalid image: expected a base64 string or data URL"}), 400

    log.info(f"CHAT_REQUEST | session={session_id} | message='{message[:50]}' | image={bool(image)}")
    assistant = get_assistant()
    return await _run_turn(session_id, lambda: assistant.handle_turn(session_id, message, image))


@bp.post("/itinerary")
async def itinerary() -> Response:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    session_id = _read_session_id(data)
    kind = str(data.get("type") or "").strip()
    if not session_id or not kind:
        return jsonify({"error": "Missing required fields: session_id, type"}), 400

    log.info(f"ITINERARY_REQUEST | session={session_id} | type={kind}")
    assistant = get_assistant()
    return await _run_turn(session_id, lambda: assistant.plan_itinerary(session_id, kind))


@bp.post("/weekly-picks")
async def weekly_picks() -> Response:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    session_id = _read_session_id(data)
    if not session_id:
        return jsonify({"error": "Missing required fields: session_id"}), 400

    log.info(f"WEEKLY_PICKS_REQUEST | session={session_id}")
    assistant = get_assistant()
    return await _run_turn(session_id, lambda: assistant.weekly_picks(session_id))
