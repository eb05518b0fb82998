"""
Session manager: ingestion and query pipelines.

Ingestion:
    folder -> discover documents -> extract text -> chunk -> embed each chunk
    -> save the SessionIndex -> return a fresh session id

Query:
    load the SessionIndex -> embed the question -> retrieve top chunks
    -> build prompt -> chat model -> answer

Everything runs sequentially in the calling thread. Any error aborts the
whole operation; a session id is only returned once its index is saved.
"""

import logging
import secrets
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Protocol

from sessionrag.exceptions import InputError, ServiceError
from sessionrag.retrieval.chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    Chunk,
    chunk_document,
)
from sessionrag.retrieval.extraction import TextExtractor, discover_documents
from sessionrag.retrieval.indexer import IndexStore, SessionIndex
from sessionrag.retrieval.retriever import (
    DEFAULT_SCORE_THRESHOLD,
    DEFAULT_TOP_K,
    retrieve,
)
from sessionrag.session.prompts import NO_CONTEXT_ANSWER, build_context, build_prompt

if TYPE_CHECKING:
    from sessionrag.llm.factory import LLMProtocol

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".pdf", ".txt", ".md")


class Embedder(Protocol):
    """Anything that turns a text into a vector."""

    def embed(self, text: str) -> list[float]:
        ...


def new_session_id() -> str:
    """128 random bits rendered as 32 hex characters."""
    return secrets.token_hex(16)


class SessionManager:
    """
    Build sessions from document folders and answer questions against them.

    Example:
        >>> manager = get_session_manager()
        >>> session_id = manager.create_session_from_folder("docs/")
        >>> manager.chat(session_id, "What is the warranty period?")
    """

    def __init__(
        self,
        store: IndexStore,
        embedder: Embedder,
        llm: "LLMProtocol",
        extractor: TextExtractor,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        """
        Args:
            store: Index store holding persisted sessions
            embedder: Embedding client
            llm: Chat client used to answer questions
            extractor: Callable returning the text of a document file
            chunk_size: Chunk window size in characters
            chunk_overlap: Characters shared by consecutive chunks
            extensions: Document suffixes picked up during ingestion
        """
        self.store = store
        self.embedder = embedder
        self.llm = llm
        self.extractor = extractor
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.extensions = tuple(ext.lower() for ext in extensions)

    # ==========================================================================
    # Ingestion
    # ==========================================================================
    def create_session_from_folder(self, folder_path: str | Path) -> str:
        """
        Ingest every document under a folder into a new session.

        Args:
            folder_path: Directory to ingest (searched recursively)

        Returns:
            The new session id

        Raises:
            InputError: If the folder is missing or holds no documents
            ExtractionError: If a document cannot be converted to text
            ServiceError: If an embedding request fails
        """
        folder = Path(folder_path)
        if not folder.exists() or not folder.is_dir():
            raise InputError(f"Folder does not exist: {folder}")

        documents = discover_documents(folder, self.extensions)
        if not documents:
            raise InputError(
                f"No documents ({', '.join(self.extensions)}) found in: {folder}"
            )

        start_time = time.perf_counter()
        logger.info(f"Ingesting {len(documents)} documents from {folder}")

        chunks: list[Chunk] = []
        for document in documents:
            source_id = document.relative_to(folder).as_posix()
            text = self.extractor(document)
            doc_chunks = chunk_document(
                text, source_id, chunk_size=self.chunk_size, overlap=self.chunk_overlap
            )
            for chunk in doc_chunks:
                chunk.embedding = self._embed_chunk(chunk, chunks)
                chunks.append(chunk)
            logger.info(f"  {source_id}: {len(doc_chunks)} chunks ({len(text):,} chars)")

        index = SessionIndex(session_id=new_session_id(), chunks=chunks)
        self.store.save(index)

        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Created session {index.session_id} with {index.size} chunks in {elapsed:.1f}s"
        )
        return index.session_id

    create_session = create_session_from_folder

    def _embed_chunk(self, chunk: Chunk, previous: list[Chunk]) -> list[float]:
        """Embed one chunk, keeping the session's dimensionality consistent."""
        embedding = self.embedder.embed(chunk.text)
        if not embedding:
            raise ServiceError(f"Empty embedding returned for chunk {chunk.id}")
        if previous and len(embedding) != len(previous[0].embedding):
            raise ServiceError(
                f"Embedding for chunk {chunk.id} has dimension {len(embedding)}, "
                f"expected {len(previous[0].embedding)}"
            )
        return embedding

    # ==========================================================================
    # Query
    # ==========================================================================
    def chat(
        self,
        session_id: str,
        message: str,
        k: int = DEFAULT_TOP_K,
        score_threshold: float = DEFAULT_SCORE_THRESHOLD,
    ) -> str:
        """
        Answer a question from a session's documents.

        Args:
            session_id: Session created by create_session_from_folder
            message: The user's question
            k: Maximum number of chunks used as context
            score_threshold: Minimum similarity for a chunk to be used

        Returns:
            The model's answer, or NO_CONTEXT_ANSWER when nothing relevant
            was retrieved (the chat model is not called in that case)

        Raises:
            InputError: If the session does not exist
            ServiceError: If the embedding or chat request fails
        """
        index: Optional[SessionIndex] = self.store.load(session_id)
        if index is None:
            raise InputError(f"Invalid or unknown session_id: {session_id}")

        query_vector = self.embedder.embed(message)
        selected = retrieve(index, query_vector, k=k, score_threshold=score_threshold)

        if not selected:
            logger.info(f"No relevant context in session {session_id}")
            return NO_CONTEXT_ANSWER

        logger.info(f"Answering from {len(selected)} chunks of session {session_id}")
        context = build_context([chunk.text for chunk in selected])
        prompt = build_prompt(context, message)
        return self.llm.invoke(prompt)
