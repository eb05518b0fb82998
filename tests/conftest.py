"""
Pytest configuration and shared fixtures.

Provides common fixtures for:
    - Configuration with test values
    - Sample chunks and session indexes with small embeddings
    - Fake embedding/chat collaborators
    - Temporary document folders and session stores
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def mock_settings(tmp_path: Path):
    """Provide test settings without requiring .env file."""
    with patch.dict(
        "os.environ",
        {
            "OLLAMA_URL": "http://ollama.test:11434/",
            "EMBEDDING_MODEL": "test-embed",
            "LLM_MODEL": "test-chat",
            "STORAGE_DIR": str(tmp_path / "sessions"),
            "CHUNK_SIZE": "256",
            "CHUNK_OVERLAP": "32",
            "LOG_LEVEL": "DEBUG",
        },
    ):
        from sessionrag.config import Settings
        yield Settings()


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_chunks():
    """Provide sample chunks with 3-dimensional embeddings."""
    from sessionrag.retrieval.chunker import Chunk

    return [
        Chunk(
            id="manual.pdf#0",
            text="The warranty covers manufacturing defects for two years.",
            embedding=[1.0, 0.0, 0.0],
        ),
        Chunk(
            id="manual.pdf#1",
            text="Returns are accepted within 30 days of purchase.",
            embedding=[0.0, 1.0, 0.0],
        ),
        Chunk(
            id="faq.txt#0",
            text="Warranty claims require the original receipt.",
            embedding=[0.8, 0.6, 0.0],
        ),
        Chunk(
            id="faq.txt#1",
            text="The device charges fully in about two hours.",
            embedding=[0.0, 0.0, 1.0],
        ),
    ]


@pytest.fixture
def sample_index(sample_chunks):
    """Provide a session index built from the sample chunks."""
    from sessionrag.retrieval.indexer import SessionIndex

    return SessionIndex(session_id="0123456789abcdef0123456789abcdef", chunks=sample_chunks)


# =============================================================================
# Fake Collaborators
# =============================================================================

class KeywordEmbedder:
    """Deterministic embedder: one dimension per keyword, counted in the text."""

    KEYWORDS = ("warranty", "return", "charge")

    def __init__(self):
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        lowered = text.lower()
        return [float(lowered.count(word)) for word in self.KEYWORDS]


@pytest.fixture
def keyword_embedder():
    """Provide a deterministic keyword-count embedder."""
    return KeywordEmbedder()


@pytest.fixture
def mock_llm():
    """Provide a chat client mock returning a fixed answer."""
    llm = MagicMock()
    llm.invoke.return_value = "The warranty lasts two years."
    return llm


@pytest.fixture
def plain_text_extractor():
    """Provide an extractor that reads files as UTF-8 text."""
    def _extract(path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")
    return _extract


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def tmp_store(tmp_path: Path):
    """Provide an index store in a temporary directory."""
    from sessionrag.retrieval.indexer import IndexStore

    return IndexStore(tmp_path / "sessions")


@pytest.fixture
def sample_documents():
    """Provide sample document contents keyed by relative path."""
    return {
        "manual.txt": "Warranty: the warranty covers defects for two years. ",
        "guides/returns.md": "# Returns\n\nA return is accepted within 30 days.",
        "guides/charging.TXT": "To charge the device, charge it overnight.",
    }


@pytest.fixture
def docs_dir(tmp_path: Path, sample_documents) -> Path:
    """Provide a temporary folder tree with sample documents."""
    root = tmp_path / "docs"
    for relative, content in sample_documents.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    (root / "notes.docx").write_bytes(b"ignored")
    return root


@pytest.fixture
def session_manager(tmp_store, keyword_embedder, mock_llm, plain_text_extractor):
    """Provide a session manager wired to fakes."""
    from sessionrag.session.manager import SessionManager

    return SessionManager(
        store=tmp_store,
        embedder=keyword_embedder,
        llm=mock_llm,
        extractor=plain_text_extractor,
        chunk_size=1024,
        chunk_overlap=100,
        extensions=[".txt", ".md"],
    )
