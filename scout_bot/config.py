"""
Configuration for the scout assistant.
Values are read from the environment once, at import.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

log = logging.getLogger(__name__)


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    JSON_SORT_KEYS: bool = False

    # Anthropic - MUST be set via environment variable
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")

    # LLM
    LLM_MODEL: str = os.getenv("LLM_MODEL", "claude-3-5-sonnet-20241022")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "4096"))
    MAX_TOOL_ROUNDS: int = int(os.getenv("MAX_TOOL_ROUNDS", "8"))

    # Embeddings (Cohere)
    COHERE_API_KEY: str = os.getenv("COHERE_API_KEY", "")
    COHERE_BASE_URL: str = os.getenv("COHERE_BASE_URL", "https://api.cohere.com").rstrip("/")
    EMBED_MODEL: str = os.getenv("EMBED_MODEL", "embed-english-v3.0")

    # Similarity search (Supabase RPC)
    # Normalize leading '@' and whitespace the same way for pasted URLs
    _RAW_SUPABASE = os.getenv("SUPABASE_URL", "")
    SUPABASE_URL: str = _RAW_SUPABASE.strip().lstrip("@").strip().rstrip("/")
    SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
    MATCH_THRESHOLD: float = float(os.getenv("MATCH_THRESHOLD", "0.2"))
    MATCH_COUNT: int = int(os.getenv("MATCH_COUNT", "5"))

    HTTP_TIMEOUT_SECONDS: int = int(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    # Sessions
    DEFAULT_SESSION_PREFIX: str = os.getenv("DEFAULT_SESSION_PREFIX", "SCOUT_NYC")
    # Idle sessions are evicted after this many seconds (0 disables)
    SESSION_IDLE_TTL_SECONDS: int = int(os.getenv("SESSION_IDLE_TTL_SECONDS", "3600"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Retrieval is skipped entirely (fallback list only) when disabled
    ENABLE_VECTOR_SEARCH: bool = _flag("ENABLE_VECTOR_SEARCH", "true")

    @property
    def retrieval_configured(self) -> bool:
        return bool(self.COHERE_API_KEY and self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False


class TestingConfig(BaseConfig):
    TESTING: bool = True
    ANTHROPIC_API_KEY = "test-key"
    ENABLE_VECTOR_SEARCH: bool = False


def get_config() -> BaseConfig:
    """Get configuration instance directly - no complex manager."""
    env = os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development")).lower()
    mapping = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = mapping.get(env, DevelopmentConfig)
    cfg = config_class()

    if not hasattr(get_config, "_logged_startup"):
        log.info(f"⚙️ CONFIG_STARTUP | env={env} | config_class={config_class.__name__}")
        log.info(f"🤖 LLM_CONFIG | model={cfg.LLM_MODEL} | temp={cfg.LLM_TEMPERATURE} | "
                 f"max_tokens={cfg.LLM_MAX_TOKENS} | max_tool_rounds={cfg.MAX_TOOL_ROUNDS}")
        log.info(f"🔍 RETRIEVAL_CONFIG | enabled={cfg.ENABLE_VECTOR_SEARCH} | "
                 f"configured={cfg.retrieval_configured} | embed_model={cfg.EMBED_MODEL} | "
                 f"threshold={cfg.MATCH_THRESHOLD} | count={cfg.MATCH_COUNT} | timeout={cfg.HTTP_TIMEOUT_SECONDS}s")
        if not cfg.ANTHROPIC_API_KEY:
            log.warning("⚠️ CONFIG_MISSING | ANTHROPIC_API_KEY is not set; chat turns will fail")
        get_config._logged_startup = True

    return cfg
