#!/usr/bin/env python3
"""
NYC Scout entry point: `python run.py` locally, `gunicorn run:app` in a pod.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from flask import request

# Load env before any other imports that might read it
load_dotenv()

from scout_bot import create_app
from scout_bot.logging_setup import setup_logging
from scout_bot.utils.smart_logger import LogLevel

log = logging.getLogger(__name__)

# Search degrades to the fallback list without these
RETRIEVAL_ENV = ("COHERE_API_KEY", "SUPABASE_URL", "SUPABASE_ANON_KEY")


def _bot_log_level() -> LogLevel:
    desired = os.getenv("BOT_LOG_LEVEL", "STANDARD").upper()
    return LogLevel[desired] if desired in LogLevel.__members__ else LogLevel.STANDARD


def _report_environment() -> None:
    if not os.getenv("ANTHROPIC_API_KEY"):
        log.warning("ENV_MISSING | ANTHROPIC_API_KEY | chat turns will return the connection apology")
    missing = [name for name in RETRIEVAL_ENV if not os.getenv(name)]
    if missing:
        log.warning(f"ENV_MISSING | {', '.join(missing)} | search serves the fallback list")


def create_application():
    setup_logging()
    _report_environment()

    app = create_app()
    # Flask's logger flows into the root handler
    app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(logging.DEBUG if _bot_log_level() == LogLevel.DEBUG else logging.INFO)

    @app.before_request
    def _log_request():
        app.logger.info("→ %s %s", request.method, request.path)

    return app


app = create_application()

if __name__ == "__main__":
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))
    debug = os.getenv("FLASK_DEBUG", "").lower() in ("1", "true", "yes", "on")
    print(f"NYC Scout on http://{host}:{port}  (health: /rs/health, env: {os.getenv('APP_ENV', 'development')})")
    # Reloader would build the app twice
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
