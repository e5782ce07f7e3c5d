# scout_bot/session.py
"""Per-session conversation state for the model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .llm_service import ChatModel
from .profile_store import new_session_id


@dataclass
class ChatSession:
    """
    Owned by the caller; there is no module-level session. ``history`` is the
    running Anthropic message list (user and assistant turns, including
    tool_use / tool_result blocks).
    """
    session_id: str
    model: ChatModel
    history: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def create(cls, model: ChatModel, session_id: Optional[str] = None,
               prefix: str = "SCOUT_NYC") -> "ChatSession":
        return cls(session_id=session_id or new_session_id(prefix), model=model)

    def append(self, role: str, content: Any) -> None:
        self.history.append({"role": role, "content": content})

    def mark(self) -> int:
        return len(self.history)

    def rollback(self, mark: int) -> None:
        """Drop everything appended since ``mark``."""
        del self.history[mark:]
