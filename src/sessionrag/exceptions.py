"""
Typed errors raised by the ingestion and query pipelines.

None of them is retried or recovered locally: they abort the enclosing
operation and reach the caller with a human-readable message.
"""

from pathlib import Path


class SessionRAGError(Exception):
    """Base class for sessionrag errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InputError(SessionRAGError):
    """Raised for a bad folder, a folder without documents or an unknown session id."""

    pass


class ServiceError(SessionRAGError):
    """Raised when the embedding or chat service fails or answers with an unexpected shape."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ExtractionError(SessionRAGError):
    """Raised when text cannot be extracted from a document."""

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = path
        super().__init__(message)


class IndexStoreError(SessionRAGError):
    """Raised when a persisted session index exists but cannot be read."""

    pass
