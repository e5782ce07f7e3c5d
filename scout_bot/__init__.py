"""
NYC Scout Application Factory
=============================

- assistant.py (turn -> classify -> publish)
- orchestrator.py (multi-round tool calls against Anthropic)
- retrieval.py (Cohere embeddings + Supabase match, fixed fallback list)
- in-memory session store
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Optional

from flask import Flask
from flask_cors import CORS

from .assistant import ScoutAssistant
from .config import get_config
from .llm_service import AnthropicChatModel
from .orchestrator import ToolCallOrchestrator
from .retrieval import RestaurantRetriever
from .session_store import SessionStore

log = logging.getLogger(__name__)


def build_assistant(cfg) -> ScoutAssistant:
    retriever = RestaurantRetriever.from_config(cfg)
    orchestrator = ToolCallOrchestrator(retriever, max_rounds=cfg.MAX_TOOL_ROUNDS)
    return ScoutAssistant(
        orchestrator,
        model_factory=lambda: AnthropicChatModel.from_config(cfg),
        store=SessionStore(idle_ttl_seconds=cfg.SESSION_IDLE_TTL_SECONDS),
        session_prefix=cfg.DEFAULT_SESSION_PREFIX,
    )


def create_app(assistant: Optional[ScoutAssistant] = None) -> Flask:
    """
    App factory.

    INITIALIZATION ORDER:
    1. Config + CORS
    2. Assistant (retriever, orchestrator, session store)
    3. Register routes
    4. Error handlers

    Args:
        assistant: prebuilt assistant (tests pass one wired to fakes)
    """
    cfg = get_config()
    app = Flask(__name__)
    app.config['SECRET_KEY'] = cfg.SECRET_KEY
    app.config['JSON_SORT_KEYS'] = cfg.JSON_SORT_KEYS

    # Enable CORS for frontend origins on /rs/* routes
    cors_origins_env = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if cors_origins_env:
        allowed_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
    else:
        allowed_origins = ["*"]

    CORS(
        app,
        resources={r"/rs/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # STEP 1: Assistant
    # ────────────────────────────────────────────────────────
    log.info("INIT_ASSISTANT | building retriever, orchestrator and session store")
    app.extensions["assistant"] = assistant or build_assistant(cfg)

    # ────────────────────────────────────────────────────────
    # STEP 2: Register Routes
    # ────────────────────────────────────────────────────────
    from .routes import register_routes
    register_routes(app)

    # ────────────────────────────────────────────────────────
    # STEP 3: Error Handlers
    # ────────────────────────────────────────────────────────
    @app.errorhandler(500)
    def handle_internal_error(error):
        log.error(f"INTERNAL_ERROR | error={error}", exc_info=True)
        return {
            "error": "Internal server error",
            "timestamp": datetime.now().isoformat(),
            "details": str(error) if app.debug else "Contact support"
        }, 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return {
            "error": "Endpoint not found",
            "timestamp": datetime.now().isoformat()
        }, 404

    log.info(f"APP_INIT_COMPLETE | extensions={list(app.extensions.keys())}")
    app.version = "nyc-scout-v1.0.0"
    return app
