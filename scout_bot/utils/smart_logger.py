# scout_bot/utils/smart_logger.py
"""
Smart, modular logging for the scout assistant.
Provides clean, contextual logs with configurable verbosity levels.
"""

import logging
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    MINIMAL = 1      # Only turn start/end and errors
    STANDARD = 2     # Tool calls and profile updates
    DETAILED = 3     # Retrieval details and timing
    DEBUG = 4        # Everything including API calls


class SmartLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level
        self._turn_contexts: Dict[str, str] = {}

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    def _format_turn_id(self, session_id: str) -> str:
        timestamp = datetime.now().strftime('%H%M%S')
        return f"{session_id[-6:]}_{timestamp}"

    def _turn(self, session_id: str) -> str:
        return self._turn_contexts.get(session_id, "unknown")

    def _clean_log(self, level: str, emoji: str, category: str, message: str, **kwargs):
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items() if v is not None])
        if details:
            full_message = f"{emoji} {category} | {message} | {details}"
        else:
            full_message = f"{emoji} {category} | {message}"
        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # TURN LIFECYCLE
    # ═══════════════════════════════════════════════════════════

    def turn_start(self, session_id: str, text: str, has_image: bool):
        if not self._should_log(LogLevel.MINIMAL):
            return
        turn_id = self._format_turn_id(session_id)
        self._turn_contexts[session_id] = turn_id
        preview = text[:50] + "..." if len(text) > 50 else text
        self._clean_log("info", "🚀", "TURN_START", f"'{preview}'", turn=turn_id, image=has_image)

    def turn_complete(self, session_id: str, rounds: int, profile_updated: bool,
                      degraded: bool = False, elapsed_time: float = None):
        if not self._should_log(LogLevel.MINIMAL):
            return
        extras: Dict[str, Any] = {
            "turn": self._turn(session_id),
            "rounds": rounds,
            "profile_updated": profile_updated,
        }
        if degraded:
            extras["degraded"] = True
        if elapsed_time is not None:
            extras["time"] = f"{elapsed_time:.3f}s"
        self._clean_log("info", "✅", "TURN_DONE", "final text received", **extras)
        self._turn_contexts.pop(session_id, None)

    # ═══════════════════════════════════════════════════════════
    # TOOL ROUNDS
    # ═══════════════════════════════════════════════════════════

    def tool_round(self, session_id: str, round_no: int, tools: List[str]):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🛠️", "TOOL_ROUND", f"round {round_no}",
                        turn=self._turn(session_id), tools=tools)

    def tool_result(self, session_id: str, tool: str, status: str, detail: str = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🔧", "TOOL", tool, turn=self._turn(session_id),
                        status=status, detail=detail)

    def profile_updated(self, session_id: str, interactions: int, update_type: Optional[str]):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "💾", "PROFILE", "snapshot replaced", turn=self._turn(session_id),
                        interactions=interactions, update_type=update_type)

    def classification(self, session_id: str, structured_type: Optional[str]):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🧩", "CLASSIFY", structured_type or "prose",
                        turn=self._turn(session_id))

    # ═══════════════════════════════════════════════════════════
    # DETAILED EVENTS
    # ═══════════════════════════════════════════════════════════

    def retrieval(self, query: str, result_count: int, source: str):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("info", "🔍", "RETRIEVAL", f"'{query}'", results=result_count, source=source)

    def performance_metric(self, session_id: str, operation: str, duration_ms: int = None):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("debug", "⚡", "PERF", operation, turn=self._turn(session_id),
                        duration_ms=duration_ms)

    # ═══════════════════════════════════════════════════════════
    # ERRORS / WARNINGS
    # ═══════════════════════════════════════════════════════════

    def error_occurred(self, session_id: str, error_type: str, operation: str, error_msg: str = None):
        # Errors are always logged regardless of level
        self._clean_log("error", "❌", "ERROR", f"{error_type} in {operation}",
                        turn=self._turn(session_id), msg=error_msg)

    def warning(self, session_id: str, warning_type: str, details: str = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("warning", "⚠️", "WARNING", warning_type,
                        turn=self._turn(session_id), details=details)

    def api_call(self, service: str, operation: str, status: str = "started"):
        if not self._should_log(LogLevel.DEBUG):
            return
        emoji = "📡" if status == "started" else "✅" if status == "success" else "❌"
        self._clean_log("debug", emoji, "API", f"{service}.{operation}", status=status)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, SmartLogger] = {}


def get_smart_logger(module_name: str, level: LogLevel = None) -> SmartLogger:
    """Get or create a smart logger for a module"""
    if module_name not in _loggers:
        default_level = getattr(LogLevel, os.getenv('BOT_LOG_LEVEL', 'STANDARD').upper(), LogLevel.STANDARD)
        _loggers[module_name] = SmartLogger(module_name, level or default_level)
    if level:
        _loggers[module_name].set_level(level)
    return _loggers[module_name]


def configure_logging(level: LogLevel = LogLevel.STANDARD,
                      format_string: str = None,
                      silence_external: bool = True):
    """Configure the entire logging system"""
    if not format_string:
        format_string = '%(asctime)s | %(message)s'

    logging.basicConfig(
        level=logging.DEBUG if level == LogLevel.DEBUG else logging.INFO,
        format=format_string,
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if silence_external:
        logging.getLogger('httpcore').setLevel(logging.WARNING)
        logging.getLogger('httpx').setLevel(logging.WARNING)
        logging.getLogger('anthropic').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)

    for smart_logger in _loggers.values():
        smart_logger.set_level(level)
