"""
Flask app factory + blueprints, wired to a scripted model and stub retriever.

Run:  pytest -q
"""

from __future__ import annotations

import base64
import json

import pytest

from scout_bot import create_app
from scout_bot.assistant import ScoutAssistant
from scout_bot.llm_service import ToolCall
from scout_bot.orchestrator import ToolCallOrchestrator

from .conftest import ScriptedModel, StubRetriever, text_reply, tool_reply

RECS_TEXT = "```json\n" + json.dumps([{"name": "Win Son", "neighborhood": "East Williamsburg",
                                        "cuisine": "Taiwanese-American", "price": "$$"}]) + "\n```"


class ModelQueue:
    """Hands each new session the next ScriptedModel."""

    def __init__(self, *scripts):
        self.models = [ScriptedModel(s) for s in scripts]

    def __call__(self):
        return self.models.pop(0) if self.models else ScriptedModel([])


def _client(*scripts):
    assistant = ScoutAssistant(ToolCallOrchestrator(StubRetriever()), model_factory=ModelQueue(*scripts))
    app = create_app(assistant=assistant)
    app.config.update(TESTING=True)
    return app.test_client(), assistant


def test_health():
    client, _ = _client()
    res = client.get("/rs/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "healthy"
    assert res.get_json()["sessions"] == 0


def test_unknown_route_is_json_404():
    client, _ = _client()
    res = client.get("/rs/nope")
    assert res.status_code == 404
    assert res.get_json()["error"] == "Endpoint not found"


def test_chat_recommendations_envelope():
    client, _ = _client([
        tool_reply(ToolCall("c1", "update_taste_profile",
                            {"update_type": "text_query", "cuisine_signal": "Taiwanese"})),
        text_reply(RECS_TEXT),
    ])
    res = client.post("/rs/chat", json={"session_id": "web1", "message": "something loud and fun"})

    assert res.status_code == 200
    data = res.get_json()
    assert data["response_type"] == "recommendations"
    assert data["session_id"] == "web1"
    assert data["profile_updated"] is True
    assert data["content"]["display_text"] == ""
    assert data["content"]["structured"]["type"] == "recommendations"
    assert data["content"]["structured"]["data"][0]["name"] == "Win Son"
    assert data["meta"]["profile_summary"]["top_cuisines"] == [{"name": "Taiwanese", "score": 10}]


def test_chat_casual_reply_and_profile_endpoint():
    client, _ = _client([text_reply("Hey there!")])
    res = client.post("/rs/chat", json={"session_id": "web2", "message": "hi"})
    data = res.get_json()
    assert data["response_type"] == "casual"
    assert data["profile_updated"] is False
    assert data["content"] == {"display_text": "Hey there!", "structured": None}

    profile = client.get("/rs/profile/web2").get_json()
    assert profile["profile"]["profile_metadata"]["session_id"] == "web2"
    assert profile["summary"]["suggested_cuisine"] == "Ethiopian"


def test_chat_transport_failure_is_error_envelope():
    from scout_bot.errors import ModelTransportError

    client, _ = _client([ModelTransportError("down")])
    data = client.post("/rs/chat", json={"session_id": "web3", "message": "hi"}).get_json()
    assert data["response_type"] == "error"
    assert data["content"]["display_text"] == "Sorry, I had trouble connecting to the NYC grid. Please try again."


@pytest.mark.parametrize(
    "body",
    [{}, {"session_id": "x"}, {"session_id": "x", "message": "   "}, {"message": "hi"}],
)
def test_chat_validation(body):
    client, _ = _client()
    assert client.post("/rs/chat", json=body).status_code == 400


def test_chat_bad_image_is_400():
    client, _ = _client([text_reply("unused")])
    res = client.post("/rs/chat", json={"session_id": "img", "message": "", "image": "data:image/png;base64"})
    assert res.status_code == 400


def test_chat_image_only_turn():
    png = base64.b64encode(b"\x89PNG\r\n\x1a\x0a" + bytes(8)).decode("ascii")
    client, assistant = _client([text_reply("Nice fit!")])
    res = client.post("/rs/chat", json={"session_id": "img2", "image": png})
    assert res.status_code == 200

    sent = assistant.store.get("img2").chat.model.sent[0][0]["content"]
    assert sent[0]["source"]["media_type"] == "image/png"
    assert sent[1]["text"].endswith("Analyze this image and recommend similar NYC spots.")


def test_chat_conflict_while_turn_in_flight():
    client, assistant = _client([text_reply("unused")])
    assistant.session("busy")
    assistant.store.begin_turn("busy")

    res = client.post("/rs/chat", json={"session_id": "busy", "message": "hello?"})
    assert res.status_code == 409
    assert res.get_json()["status"] == "already_processing"


def test_itinerary_uses_preset_prompt():
    client, assistant = _client([text_reply("Here's a plan.")])
    res = client.post("/rs/itinerary", json={"session_id": "it", "type": "dinner_dessert"})
    assert res.status_code == 200

    text = assistant.store.get("it").chat.model.sent[0][0]["content"][-1]["text"]
    assert text.endswith("Plan a dinner plus a dessert walk itinerary.")


def test_itinerary_free_form_type():
    client, assistant = _client([text_reply("ok")])
    client.post("/rs/itinerary", json={"session_id": "it2", "type": "rooftop"})
    text = assistant.store.get("it2").chat.model.sent[0][0]["content"][-1]["text"]
    assert text.endswith("Plan a rooftop itinerary.")


def test_weekly_picks_envelope():
    spot = {"name": "Kiki's"}
    picks = {"generated_date": "2025-03-01", "new_spots": [spot, spot, spot],
             "hidden_gem": spot, "dessert_of_week": spot, "adventure": spot}
    client, _ = _client([text_reply("```json\n" + json.dumps(picks) + "\n```")])

    data = client.post("/rs/weekly-picks", json={"session_id": "wk"}).get_json()
    assert data["response_type"] == "weekly_picks"
    assert len(data["content"]["structured"]["data"]["new_spots"]) == 3


def test_feedback_updates_profile():
    client, assistant = _client()
    res = client.post("/rs/feedback", json={"session_id": "fb", "restaurant": "Rubirosa", "feedback_type": "saved"})
    assert res.status_code == 200
    assert res.get_json()["summary"]["restaurants_saved"] == ["Rubirosa"]

    profile = assistant.get_profile("fb")
    assert profile.profile_metadata.total_recommendations_given == 1
    assert profile.weekly_tracking.suggested_this_week == ("Rubirosa",)


def test_feedback_rejects_unknown_type():
    client, _ = _client()
    res = client.post("/rs/feedback", json={"session_id": "fb", "restaurant": "X", "feedback_type": "loved"})
    assert res.status_code == 400


def test_profile_unknown_session_404():
    client, _ = _client()
    assert client.get("/rs/profile/ghost").status_code == 404


def test_reset_drops_session():
    client, assistant = _client()
    client.post("/rs/feedback", json={"session_id": "gone", "restaurant": "X", "feedback_type": "clicked"})
    res = client.post("/rs/reset", json={"session_id": "gone"})
    assert res.status_code == 200
    assert res.get_json()["existed"] is True
    assert res.get_json()["new_session_id"].startswith("SCOUT_NYC_")
    assert assistant.get_profile("gone") is None
    assert client.post("/rs/reset", json={}).status_code == 400


def test_entry_module_builds_app(monkeypatch):
    monkeypatch.delenv("COHERE_API_KEY", raising=False)
    import run

    app = run.create_application()
    res = app.test_client().get("/rs/health")
    assert res.status_code == 200
    assert res.get_json()["service"] == "nyc-scout"
