# scout_bot/assistant.py
"""
ScoutAssistant: the facade the HTTP layer talks to.

A chat turn runs the orchestrator, classifies the final text and, only once
the turn is over, publishes the new profile snapshot to the session store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .classifier import ClassifiedResponse, classify_response
from .enums import FeedbackType, UpdateType
from .llm_service import ChatModel
from .models import TasteProfile
from .orchestrator import ToolCallOrchestrator, TurnResult
from .profile_engine import SignalBundle, apply_update
from .profile_store import initial_profile, new_session_id
from .prompts import WEEKLY_PICKS_PROMPT, itinerary_prompt
from .session import ChatSession
from .session_store import SessionState, SessionStore
from .utils.smart_logger import get_smart_logger
from .vision import normalize_image

log = logging.getLogger(__name__)
smart_log = get_smart_logger("assistant")


@dataclass(frozen=True)
class AssistantReply:
    session_id: str
    classified: ClassifiedResponse
    turn: TurnResult
    profile: TasteProfile


class ScoutAssistant:
    def __init__(self, orchestrator: ToolCallOrchestrator,
                 model_factory: Callable[[], ChatModel],
                 store: Optional[SessionStore] = None,
                 session_prefix: str = "SCOUT_NYC"):
        self.orchestrator = orchestrator
        self.model_factory = model_factory
        self.store = store or SessionStore()
        self.session_prefix = session_prefix

    def new_session_id(self) -> str:
        return new_session_id(self.session_prefix)

    def _new_state(self, session_id: str) -> SessionState:
        return SessionState(
            chat=ChatSession.create(self.model_factory(), session_id=session_id),
            profile=initial_profile(session_id),
        )

    def session(self, session_id: str) -> SessionState:
        return self.store.get_or_create(session_id, self._new_state)

    def get_profile(self, session_id: str) -> Optional[TasteProfile]:
        state = self.store.get(session_id)
        return state.profile if state else None

    def reset(self, session_id: str) -> bool:
        return self.store.drop(session_id)

    # ────────────────────────────────────────────────────────
    # Turns
    # ────────────────────────────────────────────────────────
    async def handle_turn(self, session_id: str, text: str,
                          image_input: Optional[str] = None) -> AssistantReply:
        """
        Run one chat turn. Raises ImageInputError for a bad image and
        TurnInProgressError when the session already has a turn running.
        """
        image = normalize_image(image_input) if image_input else None
        state = self.session(session_id)
        self.store.begin_turn(session_id)
        try:
            turn = await self.orchestrator.send_turn(state.chat, text, state.profile, image)
            if turn.profile is not None:
                self.store.publish(session_id, turn.profile)
        finally:
            self.store.end_turn(session_id)

        classified = classify_response(turn.text)
        smart_log.classification(
            session_id, classified.structured.type.value if classified.structured else None
        )
        return AssistantReply(
            session_id=session_id,
            classified=classified,
            turn=turn,
            profile=state.profile,
        )

    async def plan_itinerary(self, session_id: str, kind: str) -> AssistantReply:
        return await self.handle_turn(session_id, itinerary_prompt(kind))

    async def weekly_picks(self, session_id: str) -> AssistantReply:
        return await self.handle_turn(session_id, WEEKLY_PICKS_PROMPT)

    # ────────────────────────────────────────────────────────
    # Card feedback (save / reject buttons)
    # ────────────────────────────────────────────────────────
    def apply_feedback(self, session_id: str, restaurant: str,
                       feedback_type: FeedbackType) -> TasteProfile:
        state = self.session(session_id)
        self.store.begin_turn(session_id)
        try:
            updated = apply_update(
                state.profile,
                SignalBundle(
                    update_type=UpdateType.RECOMMENDATION_FEEDBACK,
                    feedback_restaurant=restaurant,
                    feedback_type=feedback_type,
                ),
            )
            self.store.publish(session_id, updated)
        finally:
            self.store.end_turn(session_id)
        log.info(f"FEEDBACK_APPLIED | session={session_id} | restaurant={restaurant} | type={feedback_type.value}")
        return updated
