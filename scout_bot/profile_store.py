"""
Initial taste-profile snapshot for a new session.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from .models import CuisineIntelligence, ProfileMetadata, TasteProfile, WeeklyTracking

# Cuisines the user is assumed not to have tried yet; the first entry drives
# the "Try X food?" suggestion on the empty chat screen.
SEEDED_NEVER_TRIED = (
    "Ethiopian",
    "Georgian",
    "Peruvian",
    "Filipino",
    "Scandinavian",
    "Turkish",
    "Malaysian",
    "Burmese",
)


def utc_now_iso(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat()


def new_session_id(prefix: str = "SCOUT_NYC") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def initial_profile(session_id: Optional[str] = None, now: Optional[datetime] = None) -> TasteProfile:
    """Empty scores, seeded never_tried, zeroed counters."""
    stamp = utc_now_iso(now)
    return TasteProfile(
        profile_metadata=ProfileMetadata(
            session_id=session_id or new_session_id(),
            created_at=stamp,
            last_updated=stamp,
        ),
        cuisine_intelligence=CuisineIntelligence(never_tried=SEEDED_NEVER_TRIED),
        weekly_tracking=WeeklyTracking(current_week_start=stamp),
    )
