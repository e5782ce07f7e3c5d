# scout_bot/enums.py
from enum import Enum


class UpdateType(str, Enum):
    IMAGE_UPLOAD = "image_upload"
    TEXT_QUERY = "text_query"
    RECOMMENDATION_FEEDBACK = "recommendation_feedback"
    EXPLICIT_PREFERENCE = "explicit_preference"


class FeedbackType(str, Enum):
    CLICKED = "clicked"
    SAVED = "saved"
    IGNORED = "ignored"
    REJECTED = "rejected"


class PriceTier(str, Enum):
    ONE = "$"
    TWO = "$$"
    THREE = "$$$"
    FOUR = "$$$$"


class ToolName(str, Enum):
    """Tools declared to the model."""
    UPDATE_TASTE_PROFILE = "update_taste_profile"
    SEARCH_RESTAURANTS = "search_restaurants"


class TurnState(str, Enum):
    """Orchestrator states for a single turn."""
    SENDING = "sending"
    EXECUTING_TOOLS = "executing_tools"
    RESUBMITTING = "resubmitting"
    DONE = "done"


class StructuredType(str, Enum):
    """Structured UI payloads sniffed out of a model reply."""
    RECOMMENDATIONS = "recommendations"
    WEEKLY_PICKS = "weekly_picks"
    ITINERARY = "itinerary"


class ResponseType(str, Enum):
    """FE-facing response types for the chat envelope."""
    RECOMMENDATIONS = "recommendations"
    WEEKLY_PICKS = "weekly_picks"
    ITINERARY = "itinerary"
    CASUAL = "casual"
    ERROR = "error"
