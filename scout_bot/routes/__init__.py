# scout_bot/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `scout_bot/routes/<name>.py` with the variable
name **bp** and it will be registered under the `/rs` prefix when
`register_routes(app)` is called.

The app factory stores the shared `assistant` in `app.extensions` so the
route modules can reach it via `from flask import current_app`.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType

from flask import Blueprint, Flask, current_app

log = logging.getLogger(__name__)

URL_PREFIX = "/rs"


def get_assistant():
    return current_app.extensions["assistant"]


def register_routes(app: Flask) -> None:
    for _finder, name, _ in pkgutil.iter_modules(__path__):
        module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        bp: Blueprint | None = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp, url_prefix=URL_PREFIX)
            log.info(f"REGISTER_ROUTES_SUCCESS | blueprint={name}")
