# scout_bot/llm_service.py
"""
LLM transport for the scout assistant
─────────────────────────────────────
Thin wrapper around the Anthropic Messages API. One call = one model reply;
the multi-round tool loop lives in orchestrator.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import anthropic

from .errors import ModelTransportError
from .prompts import SYSTEM_PROMPT
from .tools import SCOUT_TOOLS
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("llm_service")


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelReply:
    """
    ``content`` holds the assistant content blocks as plain dicts, ready to be
    appended to the message history unchanged.
    """
    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    content: List[Dict[str, Any]] = field(default_factory=list)
    stop_reason: Optional[str] = None


class ChatModel(Protocol):
    async def send(self, messages: List[Dict[str, Any]]) -> ModelReply: ...


def _block_to_dict(block: Any) -> Optional[Dict[str, Any]]:
    kind = getattr(block, "type", None)
    if kind == "text":
        return {"type": "text", "text": getattr(block, "text", "") or ""}
    if kind == "tool_use":
        raw_input = getattr(block, "input", None)
        return {
            "type": "tool_use",
            "id": getattr(block, "id", ""),
            "name": getattr(block, "name", ""),
            "input": raw_input if isinstance(raw_input, dict) else {},
        }
    return None


def reply_from_response(resp: Any) -> ModelReply:
    """Flatten an Anthropic Message into a ModelReply."""
    content: List[Dict[str, Any]] = []
    texts: List[str] = []
    calls: List[ToolCall] = []
    for block in getattr(resp, "content", None) or []:
        item = _block_to_dict(block)
        if item is None:
            continue
        content.append(item)
        if item["type"] == "text":
            texts.append(item["text"])
        else:
            calls.append(ToolCall(id=item["id"], name=item["name"], args=item["input"]))
    return ModelReply(
        text="".join(texts),
        tool_calls=calls,
        content=content,
        stop_reason=getattr(resp, "stop_reason", None),
    )


class AnthropicChatModel:
    """Service class for scout model calls."""

    def __init__(self, api_key: str, model: str, *, temperature: float = 0.7,
                 max_tokens: int = 4096, system_prompt: str = SYSTEM_PROMPT,
                 tools: Optional[List[Dict[str, Any]]] = None) -> None:
        self.api_key = api_key or ""
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.tools = tools if tools is not None else SCOUT_TOOLS
        self._client: Optional[anthropic.AsyncAnthropic] = None

    @classmethod
    def from_config(cls, cfg) -> "AnthropicChatModel":
        return cls(
            cfg.ANTHROPIC_API_KEY,
            cfg.LLM_MODEL,
            temperature=cfg.LLM_TEMPERATURE,
            max_tokens=cfg.LLM_MAX_TOKENS,
        )

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self.api_key:
                raise ModelTransportError("Missing ANTHROPIC_API_KEY. Set it in environment or .env file.")
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def send(self, messages: List[Dict[str, Any]]) -> ModelReply:
        smart_log.api_call("anthropic", "messages.create")
        try:
            resp = await self.client.messages.create(
                model=self.model,
                system=self.system_prompt,
                messages=messages,
                tools=self.tools,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except anthropic.APIError as exc:
            smart_log.api_call("anthropic", "messages.create", "failed")
            raise ModelTransportError(f"{type(exc).__name__}: {exc}") from exc

        reply = reply_from_response(resp)
        smart_log.api_call("anthropic", "messages.create", "success")
        log.debug(
            f"LLM_REPLY | stop_reason={reply.stop_reason} | text_len={len(reply.text)} | "
            f"tools={[c.name for c in reply.tool_calls]}"
        )
        return reply
