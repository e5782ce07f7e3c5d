# scout_bot/tools.py
"""Tool declarations sent with every model call (Anthropic input_schema form)."""

from .enums import FeedbackType, PriceTier, ToolName, UpdateType

_PRICE_TIERS = [p.value for p in PriceTier]

UPDATE_TASTE_PROFILE_TOOL = {
    "name": ToolName.UPDATE_TASTE_PROFILE.value,
    "description": (
        "Updates the user's taste profile based on interaction signals. "
        "Call this when you detect new preferences."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "update_type": {
                "type": "string",
                "enum": [u.value for u in UpdateType],
            },
            "cuisine_signal": {
                "type": "string",
                "description": "Cuisine preference detected (e.g. Italian)",
            },
            "dish_signal": {
                "type": "string",
                "description": "Specific dish preference detected (e.g. Dosa, Ramen, Bagel)",
            },
            "vibe_signals": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Vibe keywords detected",
            },
            "fashion_signal": {
                "type": "string",
                "description": "Fashion aesthetic detected from image (e.g. 'streetwear', 'old_money')",
            },
            "neighborhood_signal": {
                "type": "string",
                "description": "Neighborhood preference detected",
            },
            "price_signal": {
                "type": "string",
                "enum": _PRICE_TIERS,
                "description": "Price preference detected",
            },
            "description": {
                "type": "string",
                "description": "Short description of an analyzed image (image_upload only)",
            },
            "feedback_restaurant": {
                "type": "string",
                "description": "Restaurant name if providing feedback",
            },
            "feedback_type": {
                "type": "string",
                "enum": [f.value for f in FeedbackType],
            },
        },
        "required": ["update_type"],
    },
}

SEARCH_RESTAURANTS_TOOL = {
    "name": ToolName.SEARCH_RESTAURANTS.value,
    "description": "Searches the internal database for restaurants matching criteria.",
    "input_schema": {
        "type": "object",
        "properties": {
            "cuisine": {
                "type": "string",
                "description": "Cuisine OR Specific Dish (e.g. 'Dosa')",
            },
            "neighborhood": {"type": "string"},
            "vibe": {"type": "array", "items": {"type": "string"}},
            "is_viral": {
                "type": "boolean",
                "description": "Filter for viral/trending spots",
            },
            "price_range": {
                "type": "string",
                "enum": _PRICE_TIERS + ["any"],
            },
        },
    },
}

SCOUT_TOOLS = [UPDATE_TASTE_PROFILE_TOOL, SEARCH_RESTAURANTS_TOOL]
