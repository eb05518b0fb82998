"""
Exact similarity search over a loaded session index.

Every chunk is re-scored against the query on each call (linear scan).
Selection walks the chunks from most to least similar and stops at the first
score below the threshold or once k chunks are taken, whichever comes first.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from sessionrag.retrieval.chunker import Chunk
from sessionrag.retrieval.indexer import SessionIndex

logger = logging.getLogger(__name__)

NO_MATCH_SCORE = -1.0
"""Score for vectors that cannot be compared; below any real cosine similarity."""

DEFAULT_TOP_K = 5
DEFAULT_SCORE_THRESHOLD = 0.2


def _similarity(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """Cosine similarity, or None when the vectors cannot be compared."""
    if len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return None

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if not (np.isfinite(va).all() and np.isfinite(vb).all()):
        return None

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return None

    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    if not np.isfinite(similarity):
        return None

    # Rounding can push |v|*|v| slightly past dot(v, v)
    return float(np.clip(similarity, -1.0, 1.0))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        dot(a, b) / (|a| * |b|), or NO_MATCH_SCORE when either vector is
        empty, the lengths differ, a component is NaN or infinite, or
        either magnitude is zero
    """
    similarity = _similarity(a, b)
    return NO_MATCH_SCORE if similarity is None else similarity


def score_chunks(index: SessionIndex, query_vector: Sequence[float]) -> list[float]:
    """Similarity of every chunk to the query, in index order."""
    return [cosine_similarity(query_vector, chunk.embedding) for chunk in index.chunks]


def search(
    index: SessionIndex,
    query_vector: Sequence[float],
    k: int = DEFAULT_TOP_K,
    score_threshold: float = DEFAULT_SCORE_THRESHOLD,
) -> list[tuple[Chunk, float]]:
    """
    Select the most similar chunks.

    Args:
        index: Loaded session index
        query_vector: Embedded query
        k: Maximum number of chunks to return
        score_threshold: Minimum similarity a chunk needs to be included

    Returns:
        List of (chunk, similarity_score) tuples, sorted by score descending;
        equal scores keep index order, incomparable chunks after comparable ones
    """
    if k <= 0 or not index.chunks:
        return []

    similarities = [_similarity(query_vector, chunk.embedding) for chunk in index.chunks]
    incomparable = np.array([s is None for s in similarities])
    scores = np.array(
        [NO_MATCH_SCORE if s is None else s for s in similarities], dtype=np.float64
    )
    # A real -1.0 ranks above the sentinel; lexsort is stable, ties keep index order
    order = np.lexsort((incomparable, -scores))

    results: list[tuple[Chunk, float]] = []
    for i in order:
        score = float(scores[i])
        if score < score_threshold:
            break
        results.append((index.chunks[i], score))
        if len(results) >= k:
            break

    if results:
        logger.debug(
            f"Selected {len(results)}/{index.size} chunks "
            f"(top score {results[0][1]:.3f}, threshold {score_threshold})"
        )
    else:
        logger.debug(f"No chunk of {index.size} reached threshold {score_threshold}")

    return results


def retrieve(
    index: SessionIndex,
    query_vector: Sequence[float],
    k: int = DEFAULT_TOP_K,
    score_threshold: float = DEFAULT_SCORE_THRESHOLD,
) -> list[Chunk]:
    """
    Ordered chunks selected by `search`, without their scores.

    Args:
        index: Loaded session index
        query_vector: Embedded query
        k: Maximum number of chunks to return
        score_threshold: Minimum similarity a chunk needs to be included

    Returns:
        Selected chunks, most similar first (may be empty)
    """
    return [chunk for chunk, _ in search(index, query_vector, k, score_threshold)]
