from __future__ import annotations

import json

import pytest

from scout_bot.classifier import classify_response
from scout_bot.enums import StructuredType
from scout_bot.models import Itinerary, Restaurant, WeeklyPicks

RECS = [
    {"name": "Win Son", "neighborhood": "East Williamsburg", "cuisine": "Taiwanese-American",
     "price": "$$", "rating": 4.5, "vibe": ["cool", "loud"], "is_adventure_pick": False},
    {"name": "Rubirosa", "neighborhood": "Nolita", "cuisine": "Italian/Pizza", "price": "$$"},
]


def fenced(obj) -> str:
    return f"```json\n{json.dumps(obj, indent=2)}\n```"


def test_recommendations_block():
    result = classify_response(fenced(RECS))

    assert result.display_text == ""
    assert result.structured.type is StructuredType.RECOMMENDATIONS
    restaurants = result.structured.data
    assert [r.name for r in restaurants] == ["Win Son", "Rubirosa"]
    assert isinstance(restaurants[0], Restaurant)
    assert restaurants[0].vibe == ["cool", "loud"]
    assert restaurants[0].is_adventure_pick is False
    assert restaurants[1].vibe == []


def test_same_array_without_fence_stays_prose():
    raw = "Here are some spots: " + json.dumps(RECS) + " enjoy!"
    result = classify_response(raw)
    assert result.structured is None
    assert result.display_text == raw


def test_prose_around_fence_is_hidden_when_classified():
    raw = "Try these!\n\n" + fenced(RECS) + "\n\nHave fun."
    result = classify_response(raw)
    assert result.is_structured
    assert result.display_text == ""


def test_weekly_picks_block():
    spot = {"name": "Kiki's", "neighborhood": "Dimes Square", "cuisine": "Greek", "price": "$$"}
    picks = {
        "generated_date": "2025-03-01",
        "new_spots": [spot, spot, spot],
        "hidden_gem": spot,
        "dessert_of_week": {"name": "Lady M"},
        "adventure": {"name": "Dhamaka"},
    }
    result = classify_response(fenced(picks))

    assert result.structured.type is StructuredType.WEEKLY_PICKS
    data = result.structured.data
    assert isinstance(data, WeeklyPicks)
    assert len(data.new_spots) == 3
    assert data.dessert_of_week.name == "Lady M"
    assert data.dessert_of_week.cuisine == ""
    assert result.display_text == ""


def test_itinerary_block_with_walking_stop():
    plan = {
        "title": "Date Night in West Village",
        "duration": "3-4 hours",
        "total_cost_estimate": "$80-120 pp",
        "neighborhoods": ["West Village"],
        "stops": [
            {"stop_number": 1, "time": "7:00 PM", "name": "Via Carota", "type": "dinner"},
            {"walking_time": "8 minutes", "walking_description": "Walk down Bleecker St"},
        ],
        "tips": ["Book ahead"],
    }
    result = classify_response(fenced(plan))

    assert result.structured.type is StructuredType.ITINERARY
    itinerary = result.structured.data
    assert isinstance(itinerary, Itinerary)
    assert [s.is_transition for s in itinerary.stops] == [False, True]
    assert result.structured.to_dict()["data"]["stops"][1] == {
        "walking_time": "8 minutes", "walking_description": "Walk down Bleecker St",
    }


def test_only_first_block_is_considered():
    raw = fenced({"note": "nothing here"}) + "\n\n" + fenced(RECS)
    result = classify_response(raw)
    assert result.structured is None
    assert result.display_text == raw


def test_malformed_json_keeps_raw_text(caplog):
    raw = "```json\n[{\"name\": \"Win Son\",]\n```"
    result = classify_response(raw)
    assert result.structured is None
    assert result.display_text == raw
    assert any("CLASSIFY_PARSE_FAILED" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        [{"title": "no name"}],
        [{"name": ""}],
        ["Win Son"],
        {"new_spots": [{"name": "x"}]},
        {"stops": [], "title": "Empty"},
        {"title": "No stops"},
        None,
        42,
    ],
)
def test_unrecognised_shapes_stay_prose(payload):
    raw = fenced(payload)
    result = classify_response(raw)
    assert result.structured is None
    assert result.display_text == raw


def test_fence_requires_newlines():
    raw = "```json " + json.dumps(RECS) + "```"
    assert classify_response(raw).structured is None


def test_empty_reply():
    result = classify_response("")
    assert result.display_text == ""
    assert result.structured is None


def test_deeply_nested_block_keeps_raw_text():
    raw = "```json\n" + "[" * 100000 + "]" * 100000 + "\n```"
    result = classify_response(raw)
    assert result.structured is None
    assert result.display_text == raw
