"""
Per-session index persistence.

Each session lives in its own directory under the storage root:

    <storage_dir>/<session_id>/index.json

The JSON record holds the session id and every chunk with its embedding.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from sessionrag.config import settings
from sessionrag.exceptions import IndexStoreError
from sessionrag.retrieval.chunker import Chunk, sanitize_path_component

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"


@dataclass
class SessionIndex:
    """A persisted collection of chunks for one session."""

    session_id: str
    """Storage key, immutable once created."""

    chunks: list[Chunk] = field(default_factory=list)
    """Chunks in ingestion order."""

    @property
    def size(self) -> int:
        """Number of chunks in the index."""
        return len(self.chunks)

    @property
    def dimension(self) -> int:
        """Embedding dimensionality shared by the chunks (0 when empty)."""
        for chunk in self.chunks:
            if chunk.embedding:
                return len(chunk.embedding)
        return 0

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "chunks": [
                {
                    "id": chunk.id,
                    "text": chunk.text,
                    "embedding": chunk.embedding,
                }
                for chunk in self.chunks
            ],
        }

    @classmethod
    def from_dict(cls, data: dict, session_id: str = "") -> "SessionIndex":
        """
        Build an index from its JSON record.

        Missing chunk fields default to empty values so that partially
        written or older records still load.

        Args:
            data: Decoded JSON record
            session_id: Id to use when the record lacks one

        Returns:
            SessionIndex
        """
        chunks = [
            Chunk(
                id=chunk_data.get("id", ""),
                text=chunk_data.get("text", ""),
                embedding=[float(v) for v in chunk_data.get("embedding") or []],
            )
            for chunk_data in data.get("chunks") or []
        ]
        return cls(session_id=data.get("session_id", session_id), chunks=chunks)


class IndexStore:
    """
    Filesystem store for session indexes.

    Example:
        >>> store = IndexStore("data/sessions")
        >>> store.save(index)
        >>> store.load(index.session_id) == index
        True
    """

    def __init__(self, base_dir: str | Path | None = None) -> None:
        """
        Initialize the store.

        Args:
            base_dir: Root directory for sessions (default from settings)
        """
        self.base_dir = Path(base_dir) if base_dir is not None else settings.storage_dir

    def session_dir(self, session_id: str) -> Path:
        """Directory holding the given session's files."""
        return self.base_dir / sanitize_path_component(session_id)

    def index_path(self, session_id: str) -> Path:
        return self.session_dir(session_id) / INDEX_FILENAME

    def exists(self, session_id: str) -> bool:
        """Check whether an index has been saved for the session."""
        return self.index_path(session_id).is_file()

    def save(self, index: SessionIndex) -> Path:
        """
        Write the full index, replacing any previous content for the session.

        The record is written to a temporary file next to the target and
        renamed into place, so readers see either the old or the new index.

        Args:
            index: Index to persist

        Returns:
            Path of the written index file
        """
        session_dir = self.session_dir(index.session_id)
        session_dir.mkdir(parents=True, exist_ok=True)
        target = session_dir / INDEX_FILENAME

        fd, tmp_name = tempfile.mkstemp(dir=session_dir, prefix=".index-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(index.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved session {index.session_id} ({index.size} chunks) to {target}")
        return target

    def load(self, session_id: str) -> SessionIndex | None:
        """
        Load a session index from disk.

        Args:
            session_id: Session to load

        Returns:
            The index, or None when the session has no saved index

        Raises:
            IndexStoreError: If the index file is unreadable or malformed
        """
        path = self.index_path(session_id)
        if not path.is_file():
            return None

        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("index record is not a JSON object")
            index = SessionIndex.from_dict(data, session_id=session_id)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            raise IndexStoreError(f"Corrupt index for session {session_id}: {e}") from e

        logger.debug(f"Loaded session {session_id} ({index.size} chunks)")
        return index

    def list_sessions(self) -> list[str]:
        """Sorted ids of all sessions with a saved index."""
        if not self.base_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.base_dir.iterdir()
            if (entry / INDEX_FILENAME).is_file()
        )
