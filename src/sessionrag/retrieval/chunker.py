"""
Fixed-window document chunking.

Splits extracted text into overlapping windows measured in characters:
    - no sentence or markdown awareness, offsets only
    - windows start at 0 and advance by chunk_size - overlap
    - the window reaching the end of the text closes the sequence
"""

from dataclasses import dataclass, field

DEFAULT_CHUNK_SIZE = 1024
DEFAULT_CHUNK_OVERLAP = 100


@dataclass
class Chunk:
    """A unit of indexed text."""

    id: str
    """Session-unique id built from the source document and the chunk ordinal."""

    text: str
    """The literal substring of the extracted document text."""

    embedding: list[float] = field(default_factory=list)
    """Embedding vector; empty only until the chunk has been embedded."""


def split_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    """
    Split text into overlapping fixed-size windows.

    Args:
        text: Extracted document text
        chunk_size: Window length in characters
        overlap: Characters shared by consecutive windows

    Returns:
        Ordered list of windows; the last one may be shorter than chunk_size

    Raises:
        ValueError: If chunk_size <= 0 or overlap < 0
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise ValueError(f"overlap must be non-negative, got {overlap}")

    if not text:
        return []

    # overlap >= chunk_size would stall the window
    step = max(1, chunk_size - overlap)

    windows: list[str] = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        windows.append(text[start:end])
        if end == len(text):
            break
        start += step

    return windows


def sanitize_path_component(value: str) -> str:
    """Replace path separators so the value is safe as a single path component."""
    return value.replace("/", "_").replace("\\", "_")


def encode_source_id(source_id: str) -> str:
    """
    Flatten a relative POSIX path into a chunk id prefix.

    "/" becomes "_". Characters that would otherwise collide with it are
    percent-escaped first ("%" -> "%25", "_" -> "%5F", "\\" -> "%5C"), so
    distinct paths always give distinct prefixes:

        >>> encode_source_id("guides/returns.md")
        'guides_returns.md'
        >>> encode_source_id("guides_returns.md")
        'guides%5Freturns.md'
    """
    escaped = source_id.replace("%", "%25").replace("_", "%5F").replace("\\", "%5C")
    return escaped.replace("/", "_")


def chunk_document(
    text: str,
    source_id: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Chunk]:
    """
    Chunk one document into un-embedded Chunk records.

    Ids are "<encoded source>#<ordinal>" (see encode_source_id), unique per
    distinct source path. Re-running the same ingestion with the
    same parameters reproduces them.

    Args:
        text: Extracted document text
        source_id: Identity of the document (relative path within the folder)
        chunk_size: Window length in characters
        overlap: Characters shared by consecutive windows

    Returns:
        List of Chunk objects with empty embeddings
    """
    prefix = encode_source_id(source_id)
    return [
        Chunk(id=f"{prefix}#{i}", text=window)
        for i, window in enumerate(split_text(text, chunk_size, overlap))
    ]
