"""
Dataclass models for the NYC Scout assistant.

Restaurant / WeeklyPicks / Itinerary mirror the JSON the model emits inside a
fenced block. TasteProfile is the session snapshot; every section is frozen,
string lists are tuples and score maps are copied by the update engine, so a
snapshot handed to a reader never changes underneath it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from .enums import StructuredType


def _plain(obj: Any) -> Any:
    """Dataclasses/tuples -> dicts/lists for json.dumps."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _plain(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [_plain(v) for v in obj]
    if isinstance(obj, Mapping):
        return {k: _plain(v) for k, v in obj.items()}
    return obj


def _str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [v if isinstance(v, str) else str(v) for v in value if v is not None]


# ────────────────────────────────────────────────────────────
# Restaurant-facing payloads
# ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Coordinates"]:
        if not isinstance(data, Mapping):
            return None
        try:
            return cls(lat=float(data["lat"]), lng=float(data["lng"]))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class Restaurant:
    name: str
    neighborhood: str = ""
    cuisine: str = ""
    price: str = ""
    rating: Optional[float] = None
    vibe: List[str] = field(default_factory=list)
    is_viral: Optional[bool] = None
    is_adventure_pick: Optional[bool] = None
    signature_dish: Optional[str] = None
    why_for_you: Optional[str] = None
    pro_tip: Optional[str] = None
    wait_time: Optional[str] = None
    best_time: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Restaurant":
        """Lenient build from model/backend JSON. Never raises."""
        if not isinstance(data, Mapping):
            data = {}
        rating = data.get("rating")
        try:
            rating = float(rating) if rating is not None else None
        except (TypeError, ValueError):
            rating = None
        return cls(
            name=_str(data.get("name")),
            neighborhood=_str(data.get("neighborhood")),
            cuisine=_str(data.get("cuisine")),
            price=_str(data.get("price")),
            rating=rating,
            vibe=_str_list(data.get("vibe")),
            is_viral=data.get("is_viral") if isinstance(data.get("is_viral"), bool) else None,
            is_adventure_pick=(
                data.get("is_adventure_pick") if isinstance(data.get("is_adventure_pick"), bool) else None
            ),
            signature_dish=_opt_str(data.get("signature_dish")),
            why_for_you=_opt_str(data.get("why_for_you")),
            pro_tip=_opt_str(data.get("pro_tip")),
            wait_time=_opt_str(data.get("wait_time")),
            best_time=_opt_str(data.get("best_time")),
            coordinates=Coordinates.from_dict(data.get("coordinates")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "neighborhood": self.neighborhood,
            "cuisine": self.cuisine,
            "price": self.price,
            "vibe": list(self.vibe),
        }
        optional = {
            "rating": self.rating,
            "is_viral": self.is_viral,
            "is_adventure_pick": self.is_adventure_pick,
            "signature_dish": self.signature_dish,
            "why_for_you": self.why_for_you,
            "pro_tip": self.pro_tip,
            "wait_time": self.wait_time,
            "best_time": self.best_time,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        if self.coordinates:
            result["coordinates"] = {"lat": self.coordinates.lat, "lng": self.coordinates.lng}
        return result


@dataclass(frozen=True)
class WeeklyPicks:
    generated_date: str
    new_spots: List[Restaurant]
    hidden_gem: Restaurant
    dessert_of_week: Restaurant
    adventure: Restaurant

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeeklyPicks":
        spots = data.get("new_spots")
        return cls(
            generated_date=_str(data.get("generated_date")),
            new_spots=[Restaurant.from_dict(r) for r in spots] if isinstance(spots, list) else [],
            hidden_gem=Restaurant.from_dict(data.get("hidden_gem")),
            dessert_of_week=Restaurant.from_dict(data.get("dessert_of_week")),
            adventure=Restaurant.from_dict(data.get("adventure")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_date": self.generated_date,
            "new_spots": [r.to_dict() for r in self.new_spots],
            "hidden_gem": self.hidden_gem.to_dict(),
            "dessert_of_week": self.dessert_of_week.to_dict(),
            "adventure": self.adventure.to_dict(),
        }


@dataclass(frozen=True)
class ItineraryStop:
    """
    Either a visit or a walking transition. There is no type tag on the wire:
    a stop that carries ``walking_time`` is a transition.
    """
    stop_number: Optional[int] = None
    time: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    what_to_get: Optional[str] = None
    why_here: Optional[str] = None
    budget: Optional[str] = None
    duration: Optional[str] = None
    walking_time: Optional[str] = None
    walking_description: Optional[str] = None

    @property
    def is_transition(self) -> bool:
        return self.walking_time is not None

    @classmethod
    def from_dict(cls, data: Any) -> "ItineraryStop":
        if not isinstance(data, Mapping):
            data = {}
        number = data.get("stop_number")
        try:
            number = int(number) if number is not None else None
        except (TypeError, ValueError):
            number = None
        return cls(
            stop_number=number,
            time=_opt_str(data.get("time")),
            name=_opt_str(data.get("name")),
            type=_opt_str(data.get("type")),
            what_to_get=_opt_str(data.get("what_to_get")),
            why_here=_opt_str(data.get("why_here")),
            budget=_opt_str(data.get("budget")),
            duration=_opt_str(data.get("duration")),
            walking_time=_opt_str(data.get("walking_time")),
            walking_description=_opt_str(data.get("walking_description")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in _plain(self).items() if v is not None}


@dataclass(frozen=True)
class Itinerary:
    title: str
    duration: str = ""
    total_cost_estimate: str = ""
    neighborhoods: List[str] = field(default_factory=list)
    stops: List[ItineraryStop] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Itinerary":
        stops = data.get("stops")
        return cls(
            title=_str(data.get("title")),
            duration=_str(data.get("duration")),
            total_cost_estimate=_str(data.get("total_cost_estimate")),
            neighborhoods=_str_list(data.get("neighborhoods")),
            stops=[ItineraryStop.from_dict(s) for s in stops] if isinstance(stops, list) else [],
            tips=_str_list(data.get("tips")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "duration": self.duration,
            "total_cost_estimate": self.total_cost_estimate,
            "neighborhoods": list(self.neighborhoods),
            "stops": [s.to_dict() for s in self.stops],
            "tips": list(self.tips),
        }


StructuredData = Union[List[Restaurant], WeeklyPicks, Itinerary]


@dataclass(frozen=True)
class StructuredPayload:
    """Tagged variant produced once a reply has been shape-sniffed."""
    type: StructuredType
    data: StructuredData

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.data, list):
            data: Any = [r.to_dict() for r in self.data]
        else:
            data = self.data.to_dict()
        return {"type": self.type.value, "data": data}


# ────────────────────────────────────────────────────────────
# Taste profile
# ────────────────────────────────────────────────────────────
def _from_mapping(cls: type, data: Any):
    """
    Rebuild a frozen section from JSON. Shapes come from each field's default:
    nested sections recurse, tuples take lists, dicts take mappings, scalars
    keep their default when the incoming type does not match.
    """
    if not isinstance(data, Mapping):
        return cls()
    item_types: Mapping[str, type] = getattr(cls, "_item_types", {})
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        default = f.default_factory() if callable(f.default_factory) else f.default  # type: ignore[misc]
        raw = data[f.name]
        if is_dataclass(default):
            kwargs[f.name] = _from_mapping(type(default), raw)
        elif isinstance(default, tuple):
            if isinstance(raw, (list, tuple)):
                item_cls = item_types.get(f.name)
                kwargs[f.name] = tuple(_from_mapping(item_cls, v) if item_cls else v for v in raw)
        elif isinstance(default, dict):
            if isinstance(raw, Mapping):
                kwargs[f.name] = dict(raw)
        elif isinstance(default, bool):
            if isinstance(raw, bool):
                kwargs[f.name] = raw
        elif isinstance(default, int):
            if isinstance(raw, int) and not isinstance(raw, bool):
                kwargs[f.name] = raw
        elif isinstance(raw, str):
            kwargs[f.name] = raw
    return cls(**kwargs)


@dataclass(frozen=True)
class ProfileMetadata:
    session_id: str = ""
    created_at: str = ""
    last_updated: str = ""
    total_interactions: int = 0
    total_images_analyzed: int = 0
    total_recommendations_given: int = 0


@dataclass(frozen=True)
class CuisineIntelligence:
    favorites: Dict[str, int] = field(default_factory=dict)
    dish_preferences: Dict[str, int] = field(default_factory=dict)
    dislikes: Dict[str, int] = field(default_factory=dict)
    never_tried: Tuple[str, ...] = ()
    curious_about: Tuple[str, ...] = ()
    cuisine_history: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SpiceTolerance:
    level: str = "unknown"
    confidence: int = 0
    data_points: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FlavorAxis:
    preference: str = "unknown"
    confidence: int = 0
    data_points: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FlavorProfile:
    spice_tolerance: SpiceTolerance = field(default_factory=SpiceTolerance)
    sweetness: FlavorAxis = field(default_factory=FlavorAxis)
    savory_umami: FlavorAxis = field(default_factory=FlavorAxis)
    texture_preferences: Tuple[str, ...] = ()
    temperature_preferences: Tuple[str, ...] = ()
    cooking_style_preferences: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DietaryInformation:
    restrictions: Tuple[str, ...] = ()
    allergies: Tuple[str, ...] = ()
    avoidances: Tuple[str, ...] = ()
    preferences: Tuple[str, ...] = ()
    health_focus: str = "unknown"


@dataclass(frozen=True)
class ContextPreferences:
    date_night: Tuple[str, ...] = ()
    solo_dining: Tuple[str, ...] = ()
    group_outings: Tuple[str, ...] = ()
    work_lunch: Tuple[str, ...] = ()
    special_occasion: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AmbienceFactors:
    noise_preference: str = "unknown"
    lighting_preference: str = "unknown"
    seating_preference: Tuple[str, ...] = ()
    music_preference: str = "unknown"


@dataclass(frozen=True)
class VibePreferences:
    favorite_vibes: Dict[str, int] = field(default_factory=dict)
    disliked_vibes: Tuple[str, ...] = ()
    fashion_aesthetic: Tuple[str, ...] = ()
    context_preferences: ContextPreferences = field(default_factory=ContextPreferences)
    ambience_factors: AmbienceFactors = field(default_factory=AmbienceFactors)


@dataclass(frozen=True)
class Budget:
    comfort_level: str = "unknown"
    max_special_occasion: str = ""
    typical_meal: str = ""
    confidence: int = 0


@dataclass(frozen=True)
class WaitTolerance:
    level: str = "unknown"
    willing_to_reserve: str = "unknown"
    data_points: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Neighborhoods:
    favorites: Tuple[str, ...] = ()
    frequented: Tuple[str, ...] = ()
    avoided: Tuple[str, ...] = ()
    home_area: str = "unknown"
    exploration_interest: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Timing:
    typical_meal_times: Tuple[str, ...] = ()
    day_preferences: Tuple[str, ...] = ()
    advance_planning: str = "unknown"


@dataclass(frozen=True)
class Transportation:
    method: str = "unknown"
    max_travel_time: str = "unknown"


@dataclass(frozen=True)
class PracticalPreferences:
    budget: Budget = field(default_factory=Budget)
    wait_tolerance: WaitTolerance = field(default_factory=WaitTolerance)
    neighborhoods: Neighborhoods = field(default_factory=Neighborhoods)
    timing: Timing = field(default_factory=Timing)
    transportation: Transportation = field(default_factory=Transportation)


@dataclass(frozen=True)
class ImageRecord:
    description: str = ""
    timestamp: str = ""


@dataclass(frozen=True)
class InteractionHistory:
    _item_types: ClassVar[Dict[str, type]] = {"images_uploaded": ImageRecord}

    images_uploaded: Tuple[ImageRecord, ...] = ()
    text_queries: Tuple[Any, ...] = ()
    recommendations_given: Tuple[Any, ...] = ()
    restaurants_saved: Tuple[str, ...] = ()
    restaurants_rejected: Tuple[str, ...] = ()
    itineraries_generated: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class WeeklyTracking:
    current_week_start: str = ""
    suggested_this_week: Tuple[str, ...] = ()
    weekly_picks_generated: bool = False
    last_weekly_picks_date: str = ""


@dataclass(frozen=True)
class InferredPersona:
    foodie_level: str = "unknown"
    social_dining_style: str = "unknown"
    discovery_style: str = "unknown"
    primary_use_case: str = "unknown"


@dataclass(frozen=True)
class TasteProfile:
    profile_metadata: ProfileMetadata = field(default_factory=ProfileMetadata)
    cuisine_intelligence: CuisineIntelligence = field(default_factory=CuisineIntelligence)
    flavor_profile: FlavorProfile = field(default_factory=FlavorProfile)
    dietary_information: DietaryInformation = field(default_factory=DietaryInformation)
    vibe_preferences: VibePreferences = field(default_factory=VibePreferences)
    practical_preferences: PracticalPreferences = field(default_factory=PracticalPreferences)
    interaction_history: InteractionHistory = field(default_factory=InteractionHistory)
    weekly_tracking: WeeklyTracking = field(default_factory=WeeklyTracking)
    inferred_persona: InferredPersona = field(default_factory=InferredPersona)

    def to_dict(self) -> Dict[str, Any]:
        return _plain(self)

    @classmethod
    def from_dict(cls, data: Any) -> "TasteProfile":
        return _from_mapping(cls, data)

    def to_context_json(self) -> str:
        """The indented JSON injected into every user turn."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
