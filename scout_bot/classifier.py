# scout_bot/classifier.py
"""
Response Classification
───────────────────────
Looks for the first ```json fenced block in a model reply and sniffs its
shape into one of the structured payloads the UI renders as cards.
There is no type tag on the wire; field presence is the discriminator, so
these checks must stay in lockstep with the output formats in prompts.py.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from .enums import StructuredType
from .models import Itinerary, Restaurant, StructuredPayload, WeeklyPicks

log = logging.getLogger(__name__)

JSON_BLOCK_RE = re.compile(r"```json\n(.*?)\n```", re.DOTALL)


@dataclass(frozen=True)
class ClassifiedResponse:
    display_text: str
    structured: Optional[StructuredPayload] = None

    @property
    def is_structured(self) -> bool:
        return self.structured is not None


def _sniff(parsed: Any) -> Optional[StructuredPayload]:
    if isinstance(parsed, list):
        if parsed and isinstance(parsed[0], dict) and parsed[0].get("name"):
            return StructuredPayload(
                type=StructuredType.RECOMMENDATIONS,
                data=[Restaurant.from_dict(item) for item in parsed],
            )
        return None

    if not isinstance(parsed, dict):
        return None
    if parsed.get("new_spots") and parsed.get("hidden_gem"):
        return StructuredPayload(type=StructuredType.WEEKLY_PICKS, data=WeeklyPicks.from_dict(parsed))
    if parsed.get("stops") and parsed.get("title"):
        return StructuredPayload(type=StructuredType.ITINERARY, data=Itinerary.from_dict(parsed))
    return None


def classify_response(raw_text: str) -> ClassifiedResponse:
    """
    Split a reply into display text and an optional structured payload.
    Never raises; anything unrecognised keeps the raw text visible.
    """
    raw_text = raw_text or ""
    match = JSON_BLOCK_RE.search(raw_text)
    if not match:
        return ClassifiedResponse(display_text=raw_text)

    try:
        parsed = json.loads(match.group(1))
    except (ValueError, RecursionError) as exc:
        log.warning(f"CLASSIFY_PARSE_FAILED | error={exc}")
        return ClassifiedResponse(display_text=raw_text)

    payload = _sniff(parsed)
    if payload is None:
        log.info(f"CLASSIFY_UNRECOGNISED | kind={type(parsed).__name__}")
        return ClassifiedResponse(display_text=raw_text)

    # Card UI replaces prose
    return ClassifiedResponse(display_text="", structured=payload)
