"""
Restaurant retrieval: semantic query -> embedding -> similarity match.

The embedding service (Cohere) and the similarity search (a Supabase RPC over
pgvector) are plain synchronous HTTP collaborators; RestaurantRetriever runs
them in the default executor and turns every failure or empty result into the
fixed fallback list. search() never raises.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import requests

from .errors import RetrievalError
from .fallback_data import fallback_restaurants
from .models import Coordinates, Restaurant, TasteProfile
from .utils.helpers import clean_str
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("retrieval")

DEFAULT_QUERY = "best restaurants in NYC"
DEFAULT_THRESHOLD = 0.2
DEFAULT_COUNT = 5
DEFAULT_TIMEOUT = 10

DEFAULT_COORDINATES = Coordinates(lat=40.73, lng=-73.99)
DEFAULT_RATING = 4.5
DEFAULT_PRO_TIP = "Check recent reviews for wait times."


# ────────────────────────────────────────────────────────────
# Criteria + query
# ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SearchCriteria:
    cuisine: Optional[str] = None
    neighborhood: Optional[str] = None
    vibe: Tuple[str, ...] = ()
    is_viral: bool = False
    price_range: Optional[str] = None

    @classmethod
    def from_args(cls, args: Any) -> "SearchCriteria":
        """Lenient build from raw search_restaurants arguments."""
        if not isinstance(args, Mapping):
            return cls()
        raw_vibe = args.get("vibe")
        if isinstance(raw_vibe, (list, tuple)):
            vibe = tuple(v for v in (clean_str(x) for x in raw_vibe) if v)
        else:
            vibe = tuple(v for v in [clean_str(raw_vibe)] if v)
        return cls(
            cuisine=clean_str(args.get("cuisine")),
            neighborhood=clean_str(args.get("neighborhood")),
            vibe=vibe,
            is_viral=args.get("is_viral") is True,
            price_range=clean_str(args.get("price_range")),
        )


def build_semantic_query(criteria: SearchCriteria) -> str:
    """Fixed-order phrase concatenation; generic query when nothing is set."""
    query = ""
    if criteria.cuisine:
        query += f"best {criteria.cuisine} food "
    if criteria.neighborhood:
        query += f"in {criteria.neighborhood} "
    if criteria.vibe:
        query += f"with {' '.join(criteria.vibe)} vibe "
    if criteria.is_viral:
        query += "trending viral spot "
    return query.strip() or DEFAULT_QUERY


# ────────────────────────────────────────────────────────────
# Collaborators
# ────────────────────────────────────────────────────────────
class Embedder(Protocol):
    def embed(self, text: str) -> List[float]: ...


class Matcher(Protocol):
    def match(self, embedding: Sequence[float], threshold: float, count: int) -> List[Dict[str, Any]]: ...


def _extract_embeddings(payload: Any) -> List[List[float]]:
    """Cohere returns either a bare list of vectors or {"float": [...]}."""
    if not isinstance(payload, Mapping):
        return []
    embeddings = payload.get("embeddings")
    if isinstance(embeddings, Mapping):
        embeddings = embeddings.get("float")
    if not isinstance(embeddings, list):
        return []
    out: List[List[float]] = []
    for row in embeddings:
        if isinstance(row, list):
            try:
                out.append([float(v) for v in row])
            except (TypeError, ValueError):
                continue
    return out


class CohereEmbedder:
    """POST /v2/embed for a single search query."""

    def __init__(self, api_key: str, base_url: str = "https://api.cohere.com",
                 model: str = "embed-english-v3.0", timeout: int = DEFAULT_TIMEOUT):
        if not api_key:
            raise RetrievalError("COHERE_API_KEY is required for embeddings")
        self.endpoint = f"{base_url.rstrip('/')}/v2/embed"
        self.model = model
        self.timeout = timeout
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def embed(self, text: str) -> List[float]:
        payload = {
            "model": self.model,
            "texts": [text],
            "input_type": "search_query",
            "embedding_types": ["float"],
        }
        smart_log.api_call("cohere", "embed")
        try:
            response = requests.post(self.endpoint, headers=self.headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            vectors = _extract_embeddings(response.json())
        except requests.exceptions.RequestException as exc:
            smart_log.api_call("cohere", "embed", "failed")
            raise RetrievalError(f"embedding request failed: {exc}") from exc
        except ValueError as exc:
            raise RetrievalError(f"embedding response was not JSON: {exc}") from exc
        if len(vectors) != 1:
            raise RetrievalError("embedding response shape mismatch")
        smart_log.api_call("cohere", "embed", "success")
        return vectors[0]


class SupabaseMatcher:
    """Calls the match_restaurants RPC (pgvector cosine match) via PostgREST."""

    def __init__(self, url: str, anon_key: str, function: str = "match_restaurants",
                 timeout: int = DEFAULT_TIMEOUT):
        if not url or not anon_key:
            raise RetrievalError("SUPABASE_URL and SUPABASE_ANON_KEY are required for similarity search")
        self.endpoint = f"{url.rstrip('/')}/rest/v1/rpc/{function}"
        self.timeout = timeout
        self.headers = {
            "Content-Type": "application/json",
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
        }

    def match(self, embedding: Sequence[float], threshold: float, count: int) -> List[Dict[str, Any]]:
        body = {
            "query_embedding": list(embedding),
            "match_threshold": threshold,
            "match_count": count,
        }
        smart_log.api_call("supabase", "match_restaurants")
        try:
            response = requests.post(self.endpoint, headers=self.headers, json=body, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.exceptions.RequestException as exc:
            smart_log.api_call("supabase", "match_restaurants", "failed")
            raise RetrievalError(f"similarity search failed: {exc}") from exc
        except ValueError as exc:
            raise RetrievalError(f"similarity search response was not JSON: {exc}") from exc
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise RetrievalError(f"unexpected similarity search payload: {type(rows).__name__}")
        smart_log.api_call("supabase", "match_restaurants", "success")
        return [r for r in rows if isinstance(r, Mapping)]


# ────────────────────────────────────────────────────────────
# Record mapping
# ────────────────────────────────────────────────────────────
def _rating(value: Any) -> float:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return DEFAULT_RATING
    if math.isnan(rating) or rating == 0:
        return DEFAULT_RATING
    return rating


def map_record(record: Mapping[str, Any]) -> Restaurant:
    """Backend row -> Restaurant, filling the display defaults."""
    cuisine = clean_str(record.get("cuisine"))
    vibes = record.get("vibes")
    if isinstance(vibes, list) and vibes:
        vibe = [str(v) for v in vibes if v is not None]
    elif cuisine:
        vibe = [cuisine]
    else:
        vibe = ["Good Vibes"]

    return Restaurant(
        name=str(record.get("name") or ""),
        neighborhood=clean_str(record.get("neighborhood")) or "NYC",
        cuisine=cuisine or "Various",
        price=clean_str(record.get("price_tier")) or "$$",
        rating=_rating(record.get("rating")),
        vibe=vibe,
        is_viral=bool(record.get("is_viral")),
        signature_dish=clean_str(record.get("signature_dish")),
        why_for_you=clean_str(record.get("description")),
        pro_tip=clean_str(record.get("pro_tip")) or DEFAULT_PRO_TIP,
        wait_time=clean_str(record.get("wait_time_typical")) or "Unknown",
        best_time=clean_str(record.get("best_time_to_go")) or "Early evening",
        coordinates=Coordinates.from_dict(record.get("coordinates")) or DEFAULT_COORDINATES,
    )


# ────────────────────────────────────────────────────────────
# Retriever
# ────────────────────────────────────────────────────────────
class RestaurantRetriever:
    def __init__(self, embedder: Optional[Embedder], matcher: Optional[Matcher],
                 threshold: float = DEFAULT_THRESHOLD, count: int = DEFAULT_COUNT):
        self.embedder = embedder
        self.matcher = matcher
        self.threshold = threshold
        self.count = count

    @classmethod
    def from_config(cls, cfg) -> "RestaurantRetriever":
        """Build the HTTP collaborators; without credentials every search serves the fallback list."""
        embedder = matcher = None
        if getattr(cfg, "ENABLE_VECTOR_SEARCH", True):
            try:
                embedder = CohereEmbedder(cfg.COHERE_API_KEY, cfg.COHERE_BASE_URL,
                                          cfg.EMBED_MODEL, cfg.HTTP_TIMEOUT_SECONDS)
                matcher = SupabaseMatcher(cfg.SUPABASE_URL, cfg.SUPABASE_ANON_KEY,
                                          timeout=cfg.HTTP_TIMEOUT_SECONDS)
            except RetrievalError as exc:
                log.warning(f"RETRIEVAL_DISABLED | reason={exc}")
                embedder = matcher = None
        return cls(embedder, matcher, threshold=cfg.MATCH_THRESHOLD, count=cfg.MATCH_COUNT)

    async def search(self, profile: TasteProfile, criteria: Any) -> List[Restaurant]:
        """
        Semantic search for restaurants. ``criteria`` may be a SearchCriteria
        or raw tool arguments. Errors and empty results yield the fallback list.
        """
        if not isinstance(criteria, SearchCriteria):
            criteria = SearchCriteria.from_args(criteria)
        query = build_semantic_query(criteria)
        log.info(f"RETRIEVAL_QUERY | session={profile.profile_metadata.session_id} | query='{query}'")

        if self.embedder is None or self.matcher is None:
            smart_log.retrieval(query, 0, "fallback:unconfigured")
            return fallback_restaurants()

        loop = asyncio.get_running_loop()
        try:
            embedding = await loop.run_in_executor(None, lambda: self.embedder.embed(query))
            rows = await loop.run_in_executor(
                None, lambda: self.matcher.match(embedding, self.threshold, self.count)
            )
            results = [map_record(r) for r in rows or []]
        except Exception as exc:
            log.warning(f"RETRIEVAL_FALLBACK | reason=error | type={type(exc).__name__} | error={exc}")
            smart_log.retrieval(query, 0, "fallback:error")
            return fallback_restaurants()

        if not results:
            log.info(f"RETRIEVAL_FALLBACK | reason=no_matches | query='{query}'")
            smart_log.retrieval(query, 0, "fallback:empty")
            return fallback_restaurants()

        smart_log.retrieval(query, len(results), "vector")
        return results
