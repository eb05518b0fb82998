"""
sessionrag: per-session retrieval-augmented generation over document folders.

A folder of documents is chunked, embedded and persisted as a session index;
questions against that session are answered by a chat model using the most
similar chunks as context.

Key Components:
    - retrieval: Chunking, text extraction, embeddings, index store, retriever
    - llm: Chat client for the answering model
    - session: Ingestion and query pipelines
    - cli: Typer command-line interface

Example:
    >>> from sessionrag.retrieval.resources import get_session_manager
    >>> manager = get_session_manager()
    >>> session_id = manager.create_session_from_folder("docs/")
    >>> print(manager.chat(session_id, "What is the refund policy?"))
"""

__version__ = "0.1.0"

from sessionrag.config import settings

__all__ = [
    "__version__",
    "settings",
]
