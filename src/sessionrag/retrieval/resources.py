"""
Cached collaborators shared by the CLI commands.

Uses the same @lru_cache pattern as config.py so each client is built once
per process. Session indexes themselves are never cached: every query loads
its index from disk.

Usage:
    manager = get_session_manager()
    store = get_index_store()

    # In tests (reset cache)
    clear_resource_cache()
"""

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from sessionrag.config import settings

if TYPE_CHECKING:
    from sessionrag.retrieval.embeddings import OllamaEmbedder
    from sessionrag.retrieval.indexer import IndexStore
    from sessionrag.session.manager import SessionManager

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_index_store() -> "IndexStore":
    """Index store rooted at settings.storage_dir."""
    from sessionrag.retrieval.indexer import IndexStore

    logger.debug(f"Using session storage at {settings.storage_dir}")
    return IndexStore(settings.storage_dir)


@lru_cache(maxsize=1)
def get_embedder() -> "OllamaEmbedder":
    """Embedding client for the configured model."""
    from sessionrag.retrieval.embeddings import OllamaEmbedder

    logger.debug(f"Initializing embedder for model: {settings.embedding_model}")
    return OllamaEmbedder(
        base_url=settings.ollama_url,
        model=settings.embedding_model,
        timeout=settings.request_timeout,
    )


@lru_cache(maxsize=1)
def get_session_manager() -> "SessionManager":
    """Session manager wired to the cached store and embedder."""
    from sessionrag.llm import create_llm
    from sessionrag.retrieval.extraction import DocumentTextExtractor
    from sessionrag.session.manager import SessionManager

    return SessionManager(
        store=get_index_store(),
        embedder=get_embedder(),
        llm=create_llm(),
        extractor=DocumentTextExtractor(pdftotext_path=settings.pdftotext_path),
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        extensions=settings.document_extensions,
    )


def clear_resource_cache() -> None:
    """Clear all cached resources."""
    get_index_store.cache_clear()
    get_embedder.cache_clear()
    get_session_manager.cache_clear()
    logger.debug("Resource cache cleared")
