"""
Document retrieval components for the RAG pipeline.

Components:
    - chunker: Split extracted text into overlapping fixed-size chunks
    - extraction: Discover documents and extract their text
    - embeddings: Generate vector embeddings via the Ollama API
    - indexer: Per-session index persistence
    - retriever: Cosine-similarity top-k selection with thresholding
"""

from sessionrag.retrieval.chunker import Chunk, chunk_document, split_text
from sessionrag.retrieval.embeddings import OllamaEmbedder
from sessionrag.retrieval.indexer import IndexStore, SessionIndex
from sessionrag.retrieval.retriever import cosine_similarity, retrieve, search

__all__ = [
    "Chunk",
    "chunk_document",
    "split_text",
    "OllamaEmbedder",
    "IndexStore",
    "SessionIndex",
    "cosine_similarity",
    "retrieve",
    "search",
]
