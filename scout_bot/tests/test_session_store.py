from __future__ import annotations

import pytest

from scout_bot.assistant import ScoutAssistant
from scout_bot.enums import FeedbackType
from scout_bot.errors import TurnInProgressError
from scout_bot.fe_payload import build_envelope
from scout_bot.llm_service import ToolCall
from scout_bot.orchestrator import ToolCallOrchestrator
from scout_bot.session import ChatSession
from scout_bot.session_store import SessionState, SessionStore

from .conftest import LoopingModel, ScriptedModel, StubRetriever, text_reply, tool_reply


def _state(session_id, profile):
    return SessionState(chat=ChatSession.create(ScriptedModel([]), session_id=session_id), profile=profile)


def test_get_or_create_is_idempotent(profile):
    store = SessionStore()
    first = store.get_or_create("a", lambda sid: _state(sid, profile))
    second = store.get_or_create("a", lambda sid: pytest.fail("factory called twice"))
    assert first is second
    assert len(store) == 1


def test_in_flight_guard(profile):
    store = SessionStore()
    store.get_or_create("a", lambda sid: _state(sid, profile))

    store.begin_turn("a")
    with pytest.raises(TurnInProgressError):
        store.begin_turn("a")
    store.end_turn("a")
    store.begin_turn("a")

    with pytest.raises(KeyError):
        store.begin_turn("missing")


def test_drop(profile):
    store = SessionStore()
    store.get_or_create("a", lambda sid: _state(sid, profile))
    assert store.drop("a") is True
    assert store.drop("a") is False
    assert store.get("a") is None


@pytest.mark.asyncio
async def test_turn_publishes_profile_only_after_success():
    models = [ScriptedModel([
        tool_reply(ToolCall("c", "update_taste_profile", {"update_type": "text_query", "vibe_signals": ["cozy"]})),
        text_reply("Cozy it is."),
    ])]
    assistant = ScoutAssistant(ToolCallOrchestrator(StubRetriever()), model_factory=lambda: models.pop(0))

    reply = await assistant.handle_turn("s", "somewhere cozy")

    assert reply.turn.profile_updated
    assert assistant.get_profile("s").vibe_preferences.favorite_vibes == {"cozy": 8}
    assert reply.profile is assistant.get_profile("s")
    assert assistant.store.get("s").in_flight is False


@pytest.mark.asyncio
async def test_degraded_turn_envelope():
    assistant = ScoutAssistant(ToolCallOrchestrator(StubRetriever(), max_rounds=2),
                               model_factory=LoopingModel)

    reply = await assistant.handle_turn("loop", "thai")
    envelope = build_envelope(reply, elapsed_time_seconds=0.5, timestamp="2025-03-01T18:30:00")

    assert envelope["response_type"] == "casual"
    assert envelope["meta"]["degraded"] is True
    assert envelope["meta"]["tool_rounds"] == 2
    assert envelope["meta"]["elapsed_time"] == "0.500s"
    assert envelope["meta"]["timestamp"] == "2025-03-01T18:30:00"


def test_feedback_respects_in_flight_guard():
    assistant = ScoutAssistant(ToolCallOrchestrator(StubRetriever()), model_factory=lambda: ScriptedModel([]))
    assistant.session("s")
    assistant.store.begin_turn("s")

    with pytest.raises(TurnInProgressError):
        assistant.apply_feedback("s", "Kiki's", FeedbackType.REJECTED)

    assistant.store.end_turn("s")
    profile = assistant.apply_feedback("s", "Kiki's", FeedbackType.REJECTED)
    assert profile.interaction_history.restaurants_rejected == ("Kiki's",)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_idle_sessions_are_evicted(profile):
    clock = FakeClock()
    store = SessionStore(idle_ttl_seconds=60, clock=clock)
    store.get_or_create("old", lambda sid: _state(sid, profile))
    store.get_or_create("busy", lambda sid: _state(sid, profile))
    store.begin_turn("busy")

    clock.now += 30
    store.get_or_create("fresh", lambda sid: _state(sid, profile))
    clock.now += 45

    assert store.get("old") is None
    assert store.get("fresh") is not None
    # a session mid-turn is kept
    assert store.get("busy") is not None
    assert len(store) == 2


def test_touching_a_session_keeps_it_alive(profile):
    clock = FakeClock()
    store = SessionStore(idle_ttl_seconds=60, clock=clock)
    store.get_or_create("a", lambda sid: _state(sid, profile))
    for _ in range(3):
        clock.now += 50
        store.get_or_create("a", lambda sid: pytest.fail("session was evicted"))
    assert len(store) == 1


def test_new_session_id_uses_configured_prefix():
    assistant = ScoutAssistant(ToolCallOrchestrator(StubRetriever()), model_factory=lambda: ScriptedModel([]),
                               session_prefix="SCOUT_TEST")
    assert assistant.new_session_id().startswith("SCOUT_TEST_")
