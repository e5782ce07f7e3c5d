"""
Exception types raised inside the scout assistant.
"""


class ScoutError(Exception):
    """Base class for every error this package raises on purpose."""


class ModelTransportError(ScoutError):
    """The language-model call failed (network, auth, rate limit, bad response)."""


class RetrievalError(ScoutError):
    """Embedding or similarity search failed. Always absorbed by the retriever."""


class ImageInputError(ScoutError, ValueError):
    """The uploaded image could not be decoded or is not an accepted type."""


class TurnInProgressError(ScoutError):
    def __init__(self, session_id: str):
        super().__init__(f"a turn is already running for session {session_id}")
        self.session_id = session_id
