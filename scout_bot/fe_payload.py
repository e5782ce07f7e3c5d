from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from .assistant import AssistantReply
from .enums import ResponseType
from .profile_engine import summarize_profile


def _to_json_safe(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_json_safe(asdict(obj))
    if isinstance(obj, dict):
        return {k: _to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_to_json_safe(v) for v in obj]
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


def map_fe_response_type(reply: AssistantReply) -> ResponseType:
    """
    Transport failures are errors; a classified payload maps one-to-one;
    everything else is casual prose (including round-capped turns).
    """
    if reply.turn.failed:
        return ResponseType.ERROR
    structured = reply.classified.structured
    if structured is not None:
        return ResponseType(structured.type.value)
    return ResponseType.CASUAL


def build_envelope(reply: AssistantReply, *, elapsed_time_seconds: float,
                   timestamp: str | None = None) -> Dict[str, Any]:
    """Build the FE envelope for one assistant turn."""
    structured = reply.classified.structured
    content = {
        "display_text": reply.classified.display_text,
        "structured": structured.to_dict() if structured is not None else None,
    }
    meta = {
        "elapsed_time": f"{elapsed_time_seconds:.3f}s",
        "tool_rounds": reply.turn.rounds,
        "degraded": reply.turn.degraded or None,
        "timestamp": timestamp or datetime.now().isoformat(),
        "profile_summary": summarize_profile(reply.profile),
    }
    envelope = {
        "response_type": map_fe_response_type(reply),
        "session_id": reply.session_id,
        "content": content,
        "profile_updated": reply.turn.profile_updated,
        "meta": {k: v for k, v in meta.items() if v is not None},
    }
    return _to_json_safe(envelope)
