from __future__ import annotations

import pytest
import requests

from scout_bot.errors import RetrievalError
from scout_bot.fallback_data import FALLBACK_RESTAURANTS
from scout_bot.models import Coordinates
from scout_bot.retrieval import (
    CohereEmbedder,
    RestaurantRetriever,
    SearchCriteria,
    SupabaseMatcher,
    build_semantic_query,
    map_record,
)

FALLBACK_NAMES = ["L'Artusi", "Win Son", "Double Chicken Please", "Rubirosa", "Kiki's"]


class FakeEmbedder:
    def __init__(self, error: Exception = None):
        self.error = error
        self.queries = []

    def embed(self, text):
        self.queries.append(text)
        if self.error:
            raise self.error
        return [0.1, 0.2, 0.3]


class FakeMatcher:
    def __init__(self, rows=None, error: Exception = None):
        self.rows = rows or []
        self.error = error
        self.calls = []

    def match(self, embedding, threshold, count):
        self.calls.append((list(embedding), threshold, count))
        if self.error:
            raise self.error
        return self.rows


@pytest.mark.parametrize(
    "args,expected",
    [
        ({}, "best restaurants in NYC"),
        ({"cuisine": "Thai"}, "best Thai food"),
        ({"neighborhood": "SoHo"}, "in SoHo"),
        ({"vibe": ["cozy", "dim"]}, "with cozy dim vibe"),
        ({"is_viral": True}, "trending viral spot"),
        (
            {"cuisine": "Dosa", "neighborhood": "Jackson Heights", "vibe": ["casual"], "is_viral": True,
             "price_range": "$"},
            "best Dosa food in Jackson Heights with casual vibe trending viral spot",
        ),
        ({"cuisine": "  ", "vibe": [], "is_viral": "yes"}, "best restaurants in NYC"),
    ],
)
def test_build_semantic_query(args, expected):
    assert build_semantic_query(SearchCriteria.from_args(args)) == expected


def test_map_record_defaults():
    r = map_record({"name": "Mystery Spot", "rating": "not-a-number"})
    assert r.neighborhood == "NYC"
    assert r.cuisine == "Various"
    assert r.price == "$$"
    assert r.rating == 4.5
    assert r.vibe == ["Good Vibes"]
    assert r.is_viral is False
    assert r.why_for_you is None
    assert r.pro_tip == "Check recent reviews for wait times."
    assert r.wait_time == "Unknown"
    assert r.best_time == "Early evening"
    assert r.coordinates == Coordinates(lat=40.73, lng=-73.99)


def test_map_record_uses_backend_fields():
    r = map_record({
        "name": "Dhamaka", "neighborhood": "LES", "cuisine": "Indian", "price_tier": "$$$",
        "rating": "4.8", "vibes": [], "is_viral": True, "description": "Regional Indian done loud.",
        "signature_dish": "Goat Neck Biryani", "wait_time_typical": "60 min",
        "best_time_to_go": "Weeknights", "coordinates": {"lat": 40.72, "lng": -73.99},
    })
    assert r.price == "$$$"
    assert r.rating == 4.8
    assert r.vibe == ["Indian"]
    assert r.is_viral is True
    assert r.why_for_you == "Regional Indian done loud."
    assert r.wait_time == "60 min"
    assert r.best_time == "Weeknights"
    assert r.coordinates == Coordinates(lat=40.72, lng=-73.99)


@pytest.mark.asyncio
async def test_search_maps_matches(profile):
    matcher = FakeMatcher(rows=[{"name": "Dhamaka", "cuisine": "Indian", "vibes": ["loud"]}])
    embedder = FakeEmbedder()
    retriever = RestaurantRetriever(embedder, matcher)

    results = await retriever.search(profile, {"cuisine": "Indian"})

    assert [r.name for r in results] == ["Dhamaka"]
    assert results[0].vibe == ["loud"]
    assert embedder.queries == ["best Indian food"]
    assert matcher.calls == [([0.1, 0.2, 0.3], 0.2, 5)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "embedder,matcher",
    [
        (FakeEmbedder(error=RetrievalError("embed down")), FakeMatcher()),
        (FakeEmbedder(), FakeMatcher(error=RetrievalError("rpc down"))),
        (FakeEmbedder(), FakeMatcher(error=RuntimeError("anything at all"))),
        (FakeEmbedder(), FakeMatcher(rows=[])),
        (None, None),
    ],
)
async def test_search_falls_back(profile, embedder, matcher):
    results = await RestaurantRetriever(embedder, matcher).search(profile, SearchCriteria(cuisine="Thai"))
    assert [r.name for r in results] == FALLBACK_NAMES


@pytest.mark.asyncio
async def test_fallback_list_is_a_fresh_copy(profile):
    retriever = RestaurantRetriever(None, None)
    first = await retriever.search(profile, {})
    first.clear()
    second = await retriever.search(profile, {})
    assert len(second) == len(FALLBACK_RESTAURANTS)


class _FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


def test_cohere_embedder_reads_float_embeddings(monkeypatch):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return _FakeResponse({"embeddings": {"float": [[1, 2, 3]]}})

    monkeypatch.setattr(requests, "post", fake_post)
    vector = CohereEmbedder("key", "https://api.cohere.com/", model="embed-english-v3.0", timeout=3).embed("q")

    assert vector == [1.0, 2.0, 3.0]
    assert captured["url"] == "https://api.cohere.com/v2/embed"
    assert captured["headers"]["Authorization"] == "Bearer key"
    assert captured["json"]["input_type"] == "search_query"
    assert captured["timeout"] == 3


def test_cohere_embedder_wraps_http_errors(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **k: _FakeResponse({}, status=503))
    with pytest.raises(RetrievalError):
        CohereEmbedder("key").embed("q")


def test_supabase_matcher_posts_rpc(monkeypatch):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json)
        return _FakeResponse([{"name": "Kiki's"}, "junk"])

    monkeypatch.setattr(requests, "post", fake_post)
    rows = SupabaseMatcher("https://x.supabase.co", "anon").match([0.5], 0.2, 5)

    assert rows == [{"name": "Kiki's"}]
    assert captured["url"] == "https://x.supabase.co/rest/v1/rpc/match_restaurants"
    assert captured["headers"]["apikey"] == "anon"
    assert captured["json"] == {"query_embedding": [0.5], "match_threshold": 0.2, "match_count": 5}


def test_collaborators_require_credentials():
    with pytest.raises(RetrievalError):
        CohereEmbedder("")
    with pytest.raises(RetrievalError):
        SupabaseMatcher("", "anon")
