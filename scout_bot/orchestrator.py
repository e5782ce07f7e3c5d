# scout_bot/orchestrator.py
"""
Tool-call orchestration for one user turn.

SENDING -> (tool calls?) -> EXECUTING_TOOLS -> RESUBMITTING -> SENDING ... -> DONE

Every call of a round is executed before any result is resubmitted. The
working profile is threaded through the rounds and only handed back once the
turn is over; the caller decides when to publish it.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from .enums import ToolName, TurnState
from .llm_service import ModelReply, ToolCall
from .models import TasteProfile
from .profile_engine import apply_args
from .prompts import IMAGE_ONLY_PROMPT, PROFILE_CONTEXT_CLOSE, PROFILE_CONTEXT_OPEN
from .retrieval import RestaurantRetriever
from .session import ChatSession
from .utils.smart_logger import get_smart_logger
from .vision import ImageInput

log = logging.getLogger(__name__)
smart_log = get_smart_logger("orchestrator")

DEFAULT_MAX_TOOL_ROUNDS = 8

TRANSPORT_APOLOGY = "Sorry, I had trouble connecting to the NYC grid. Please try again."
ROUND_CAP_NOTICE = (
    "I got a little lost pulling that together. Could you ask again, maybe a bit more specifically?"
)

PROFILE_UPDATED_RESPONSE = {"result": "Profile Updated Successfully", "updated_snapshot": "Profile updated."}
SEARCH_FAILED_RESPONSE = {"error": "Search failed due to database connection."}
UNKNOWN_TOOL_RESPONSE = {"result": "Success"}


@dataclass(frozen=True)
class ToolResponse:
    name: str
    call_id: str
    response: Dict[str, Any]

    def to_block(self) -> Dict[str, Any]:
        return {
            "type": "tool_result",
            "tool_use_id": self.call_id,
            "content": json.dumps(
                {"name": self.name, "call_id": self.call_id, "response": self.response},
                ensure_ascii=False,
            ),
        }


@dataclass(frozen=True)
class TurnResult:
    """
    ``profile`` is None unless update_taste_profile ran during the turn.
    ``degraded`` marks a turn cut off by the round cap; ``failed`` a turn
    aborted by a transport error.
    """
    text: str
    profile: Optional[TasteProfile] = None
    rounds: int = 0
    degraded: bool = False
    failed: bool = False

    @property
    def profile_updated(self) -> bool:
        return self.profile is not None


def build_user_content(text: str, profile: TasteProfile,
                       image: Optional[ImageInput] = None) -> List[Dict[str, Any]]:
    """Image block (if any) followed by the profile context and the user's text."""
    if not (text or "").strip() and image is not None:
        text = IMAGE_ONLY_PROMPT
    context = f"\n\n{PROFILE_CONTEXT_OPEN}\n{profile.to_context_json()}\n{PROFILE_CONTEXT_CLOSE}\n"
    content: List[Dict[str, Any]] = []
    if image is not None:
        content.append(image.to_block())
    content.append({"type": "text", "text": context + (text or "")})
    return content


class ToolCallOrchestrator:
    def __init__(self, retriever: RestaurantRetriever,
                 max_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
                 clock: Optional[Callable[[], datetime]] = None):
        self.retriever = retriever
        self.max_rounds = max(1, int(max_rounds))
        self.clock = clock

    def _now(self) -> Optional[datetime]:
        return self.clock() if self.clock else None

    async def _execute(self, session_id: str, call: ToolCall,
                       working: TasteProfile) -> Tuple[Dict[str, Any], Optional[TasteProfile]]:
        """Run one tool call. Returns (response, new working profile or None)."""
        if call.name == ToolName.UPDATE_TASTE_PROFILE.value:
            updated = apply_args(working, call.args, now=self._now())
            smart_log.profile_updated(session_id, updated.profile_metadata.total_interactions,
                                      call.args.get("update_type") if isinstance(call.args, dict) else None)
            return PROFILE_UPDATED_RESPONSE, updated

        if call.name == ToolName.SEARCH_RESTAURANTS.value:
            try:
                results = await self.retriever.search(working, call.args)
            except Exception as exc:
                smart_log.error_occurred(session_id, type(exc).__name__, "search_restaurants", str(exc))
                return SEARCH_FAILED_RESPONSE, None
            smart_log.tool_result(session_id, call.name, "ok", f"{len(results)} results")
            return {"results": [r.to_dict() for r in results]}, None

        smart_log.warning(session_id, "UNKNOWN_TOOL", call.name)
        return UNKNOWN_TOOL_RESPONSE, None

    async def send_turn(self, session: ChatSession, user_text: str, profile: TasteProfile,
                        image: Optional[ImageInput] = None) -> TurnResult:
        """Run one full turn. Only model transport errors end it early."""
        sid = session.session_id
        started = time.time()
        smart_log.turn_start(sid, user_text or "", image is not None)

        turn_mark = session.mark()
        working = profile
        updated: Optional[TasteProfile] = None
        rounds = 0

        session.append("user", build_user_content(user_text, profile, image))
        try:
            log.debug(f"TURN_STATE | session={sid} | state={TurnState.SENDING.value}")
            reply: ModelReply = await session.model.send(session.history)

            while reply.tool_calls:
                if rounds >= self.max_rounds:
                    log.warning(f"TOOL_ROUND_CAP | session={sid} | rounds={rounds} | max={self.max_rounds}")
                    session.rollback(turn_mark)
                    smart_log.turn_complete(sid, rounds, updated is not None, degraded=True,
                                            elapsed_time=time.time() - started)
                    return TurnResult(
                        text=reply.text.strip() or ROUND_CAP_NOTICE,
                        profile=updated,
                        rounds=rounds,
                        degraded=True,
                    )

                rounds += 1
                smart_log.tool_round(sid, rounds, [c.name for c in reply.tool_calls])
                session.append("assistant", reply.content)

                log.debug(f"TURN_STATE | session={sid} | state={TurnState.EXECUTING_TOOLS.value}")
                responses: List[ToolResponse] = []
                for call in reply.tool_calls:
                    response, new_profile = await self._execute(sid, call, working)
                    if new_profile is not None:
                        working = new_profile
                        updated = new_profile
                    responses.append(ToolResponse(name=call.name, call_id=call.id, response=response))

                log.debug(f"TURN_STATE | session={sid} | state={TurnState.RESUBMITTING.value}")
                session.append("user", [r.to_block() for r in responses])

                log.debug(f"TURN_STATE | session={sid} | state={TurnState.SENDING.value}")
                reply = await session.model.send(session.history)

        except Exception as exc:
            smart_log.error_occurred(sid, type(exc).__name__, "model_transport", str(exc))
            session.rollback(turn_mark)
            return TurnResult(text=TRANSPORT_APOLOGY, profile=None, rounds=rounds, failed=True)

        log.debug(f"TURN_STATE | session={sid} | state={TurnState.DONE.value}")
        if reply.content:
            session.append("assistant", reply.content)
        smart_log.turn_complete(sid, rounds, updated is not None, elapsed_time=time.time() - started)
        return TurnResult(text=reply.text, profile=updated, rounds=rounds)
