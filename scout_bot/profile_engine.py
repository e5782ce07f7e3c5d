"""
Taste-profile update engine.

apply_update() folds one SignalBundle into a TasteProfile and returns a new
snapshot. Scores are additive counters, list memberships are deduplicated,
and the engine never raises: anything it cannot read is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .enums import FeedbackType, PriceTier, UpdateType
from .models import ImageRecord, TasteProfile
from .profile_store import utc_now_iso
from .utils.helpers import append_unique, clean_str, parse_iso, remove_first

log = logging.getLogger(__name__)

# Image evidence is trusted more than inferred text; vibes are the noisiest.
IMAGE_CUISINE_WEIGHT = 20
IMAGE_DISH_WEIGHT = 20
IMAGE_VIBE_WEIGHT = 15
CUISINE_WEIGHT = 10
DISH_WEIGHT = 15
VIBE_WEIGHT = 8
PRICE_CONFIDENCE_STEP = 10

_SAVING_FEEDBACK = {FeedbackType.SAVED, FeedbackType.CLICKED}


def _enum_or_none(enum_cls, value: Any):
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class SignalBundle:
    """One update request. Every field is independent and optional."""
    update_type: Optional[UpdateType] = None
    cuisine: Optional[str] = None
    dish: Optional[str] = None
    vibes: Tuple[str, ...] = ()
    fashion: Optional[str] = None
    neighborhood: Optional[str] = None
    price: Optional[PriceTier] = None
    description: Optional[str] = None
    feedback_restaurant: Optional[str] = None
    feedback_type: Optional[FeedbackType] = None

    @classmethod
    def from_args(cls, args: Any) -> "SignalBundle":
        """
        Build from raw update_taste_profile arguments. Wrong types, blank
        strings and unknown enum values are dropped; unknown keys are ignored.
        """
        if not isinstance(args, Mapping):
            return cls()

        raw_vibes = args.get("vibe_signals")
        vibes: List[str] = []
        if isinstance(raw_vibes, (list, tuple)):
            for v in raw_vibes:
                v = clean_str(v)
                if v:
                    vibes.append(v)
        elif clean_str(raw_vibes):
            vibes.append(clean_str(raw_vibes))

        return cls(
            update_type=_enum_or_none(UpdateType, args.get("update_type")),
            cuisine=clean_str(args.get("cuisine_signal")),
            dish=clean_str(args.get("dish_signal")),
            vibes=tuple(vibes),
            fashion=clean_str(args.get("fashion_signal")),
            neighborhood=clean_str(args.get("neighborhood_signal")),
            price=_enum_or_none(PriceTier, args.get("price_signal")),
            description=clean_str(args.get("description")),
            feedback_restaurant=clean_str(args.get("feedback_restaurant")),
            feedback_type=_enum_or_none(FeedbackType, args.get("feedback_type")),
        )

    @property
    def has_feedback(self) -> bool:
        return bool(self.feedback_restaurant and self.feedback_type)


def _bump(scores: Dict[str, int], key: str, amount: int) -> None:
    scores[key] = scores.get(key, 0) + amount


def _as_utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _next_stamp(previous: str, now: Optional[datetime]) -> str:
    """ISO timestamp for this update; never earlier than the previous one."""
    stamp = utc_now_iso(now)
    prev_dt = parse_iso(previous)
    if prev_dt is not None and _as_utc(prev_dt) > _as_utc(parse_iso(stamp)):
        return previous
    return stamp


def _image_description(signals: SignalBundle) -> str:
    if signals.description:
        return signals.description
    if signals.cuisine:
        return "Analyzed food"
    if signals.fashion:
        return "Analyzed outfit"
    return "Analyzed image"


def _apply(profile: TasteProfile, signals: SignalBundle, now: Optional[datetime]) -> TasteProfile:
    meta = profile.profile_metadata
    cuisine_intel = profile.cuisine_intelligence
    vibe_prefs = profile.vibe_preferences
    practical = profile.practical_preferences
    history = profile.interaction_history
    weekly = profile.weekly_tracking

    stamp = _next_stamp(meta.last_updated, now)

    # Copies; the incoming snapshot is never touched
    favorites = dict(cuisine_intel.favorites)
    dishes = dict(cuisine_intel.dish_preferences)
    fav_vibes = dict(vibe_prefs.favorite_vibes)
    cuisine_history = cuisine_intel.cuisine_history
    never_tried = cuisine_intel.never_tried
    fashion = vibe_prefs.fashion_aesthetic
    images = history.images_uploaded

    total_interactions = meta.total_interactions + 1
    total_images = meta.total_images_analyzed
    total_recs = meta.total_recommendations_given

    if signals.update_type == UpdateType.IMAGE_UPLOAD:
        total_images += 1
        images = images + (ImageRecord(description=_image_description(signals), timestamp=stamp),)
        if signals.cuisine:
            _bump(favorites, signals.cuisine, IMAGE_CUISINE_WEIGHT)
        if signals.dish:
            _bump(dishes, signals.dish, IMAGE_DISH_WEIGHT)
        for vibe in signals.vibes:
            _bump(fav_vibes, vibe, IMAGE_VIBE_WEIGHT)
        if signals.fashion:
            fashion = append_unique(fashion, signals.fashion)

    if signals.cuisine:
        _bump(favorites, signals.cuisine, CUISINE_WEIGHT)
        cuisine_history = append_unique(cuisine_history, signals.cuisine)
        never_tried = remove_first(never_tried, signals.cuisine)

    if signals.dish:
        _bump(dishes, signals.dish, DISH_WEIGHT)

    for vibe in signals.vibes:
        _bump(fav_vibes, vibe, VIBE_WEIGHT)

    neighborhoods = practical.neighborhoods
    if signals.neighborhood:
        neighborhoods = replace(
            neighborhoods, frequented=append_unique(neighborhoods.frequented, signals.neighborhood)
        )

    budget = practical.budget
    if signals.price:
        budget = replace(
            budget,
            comfort_level=signals.price.value,
            confidence=budget.confidence + PRICE_CONFIDENCE_STEP,
        )

    saved = history.restaurants_saved
    rejected = history.restaurants_rejected
    suggested = weekly.suggested_this_week
    if signals.has_feedback:
        name = signals.feedback_restaurant
        total_recs += 1
        suggested = append_unique(suggested, name)
        if signals.feedback_type in _SAVING_FEEDBACK:
            saved = append_unique(saved, name)
        elif signals.feedback_type == FeedbackType.REJECTED:
            rejected = append_unique(rejected, name)

    return replace(
        profile,
        profile_metadata=replace(
            meta,
            last_updated=stamp,
            total_interactions=total_interactions,
            total_images_analyzed=total_images,
            total_recommendations_given=total_recs,
        ),
        cuisine_intelligence=replace(
            cuisine_intel,
            favorites=favorites,
            dish_preferences=dishes,
            cuisine_history=cuisine_history,
            never_tried=never_tried,
        ),
        vibe_preferences=replace(vibe_prefs, favorite_vibes=fav_vibes, fashion_aesthetic=fashion),
        practical_preferences=replace(practical, neighborhoods=neighborhoods, budget=budget),
        interaction_history=replace(
            history,
            images_uploaded=images,
            restaurants_saved=saved,
            restaurants_rejected=rejected,
        ),
        weekly_tracking=replace(weekly, suggested_this_week=suggested),
    )


def apply_update(profile: TasteProfile, signals: SignalBundle,
                 now: Optional[datetime] = None) -> TasteProfile:
    """Return a new snapshot with ``signals`` folded in. Never raises."""
    try:
        return _apply(profile, signals, now)
    except Exception as exc:
        # Profile corruption must never break the conversation
        log.error(f"PROFILE_UPDATE_FAILED | type={type(exc).__name__} | error={exc}")
        return profile


def apply_args(profile: TasteProfile, args: Any, now: Optional[datetime] = None) -> TasteProfile:
    """Tool-facing entry point: raw update_taste_profile arguments in, snapshot out."""
    signals = SignalBundle.from_args(args if isinstance(args, Mapping) else {})
    log.debug(
        f"PROFILE_SIGNALS | update_type={signals.update_type.value if signals.update_type else None} | "
        f"cuisine={signals.cuisine} | dish={signals.dish} | vibes={list(signals.vibes)} | "
        f"feedback={signals.feedback_type.value if signals.feedback_type else None}"
    )
    return apply_update(profile, signals, now)


def _top(scores: Mapping[str, int], limit: int) -> List[Dict[str, Any]]:
    # sorted() is stable, so equal scores keep insertion order
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    return [{"name": k, "score": v} for k, v in ranked[:limit]]


def summarize_profile(profile: TasteProfile, limit: int = 3) -> Dict[str, Any]:
    """Top cuisines, dishes and vibes plus counters for the sidebar."""
    meta = profile.profile_metadata
    never_tried = profile.cuisine_intelligence.never_tried
    return {
        "session_id": meta.session_id,
        "top_cuisines": _top(profile.cuisine_intelligence.favorites, limit),
        "top_dishes": _top(profile.cuisine_intelligence.dish_preferences, limit),
        "top_vibes": _top(profile.vibe_preferences.favorite_vibes, limit),
        "fashion_aesthetic": list(profile.vibe_preferences.fashion_aesthetic),
        "budget": profile.practical_preferences.budget.comfort_level,
        "suggested_cuisine": never_tried[0] if never_tried else None,
        "total_interactions": meta.total_interactions,
        "total_images_analyzed": meta.total_images_analyzed,
        "total_recommendations_given": meta.total_recommendations_given,
        "restaurants_saved": list(profile.interaction_history.restaurants_saved),
    }
