from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from scout_bot.llm_service import ModelReply, ToolCall
from scout_bot.profile_store import initial_profile

FIXED_NOW = datetime(2025, 3, 1, 18, 30, tzinfo=timezone.utc)


def text_reply(text: str) -> ModelReply:
    return ModelReply(text=text, content=[{"type": "text", "text": text}], stop_reason="end_turn")


def tool_reply(*calls: ToolCall, text: str = "") -> ModelReply:
    content: List[Dict[str, Any]] = []
    if text:
        content.append({"type": "text", "text": text})
    for c in calls:
        content.append({"type": "tool_use", "id": c.id, "name": c.name, "input": c.args})
    return ModelReply(text=text, tool_calls=list(calls), content=content, stop_reason="tool_use")


class ScriptedModel:
    """Replays a fixed list of replies (or exceptions) and records what it was sent."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.sent: List[List[Dict[str, Any]]] = []

    async def send(self, messages):
        self.sent.append(copy.deepcopy(messages))
        if not self.replies:
            raise AssertionError("model called more times than scripted")
        nxt = self.replies.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class LoopingModel:
    """Asks for a tool on every call."""

    def __init__(self, name: str = "search_restaurants"):
        self.name = name
        self.calls = 0

    async def send(self, messages):
        self.calls += 1
        return tool_reply(ToolCall(id=f"call_{self.calls}", name=self.name, args={"cuisine": "Thai"}))


class StubRetriever:
    def __init__(self, results=None, error: Exception = None):
        self.results = results or []
        self.error = error
        self.seen = []

    async def search(self, profile, criteria):
        self.seen.append((profile, criteria))
        if self.error:
            raise self.error
        return list(self.results)


@pytest.fixture()
def profile():
    return initial_profile("SCOUT_NYC_test", now=FIXED_NOW)
