"""
Embedding generation via the Ollama embeddings endpoint.

One request per text, no batching and no retries: a failed call aborts the
ingestion or query that issued it.
"""

import logging
import math
from typing import Optional

import httpx

from sessionrag.config import settings
from sessionrag.exceptions import ServiceError

logger = logging.getLogger(__name__)


class OllamaEmbedder:
    """
    Generate embeddings using an Ollama server.

    Example:
        >>> embedder = OllamaEmbedder()
        >>> vector = embedder.embed("What does chapter 2 cover?")
        >>> len(vector)
        1024
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            base_url: Ollama server URL (default from settings)
            model: Embedding model name (default from settings)
            timeout: Request timeout in seconds (default from settings)
        """
        self.base_url = (base_url or settings.ollama_url).rstrip("/")
        self.model = model or settings.embedding_model
        self.timeout = timeout if timeout is not None else settings.request_timeout

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url}/api/embeddings"

    def embed(self, text: str) -> list[float]:
        """
        Generate the embedding for a single text.

        Args:
            text: Text to embed

        Returns:
            The embedding vector

        Raises:
            ServiceError: On transport failure, HTTP error status or a
                response without a usable "embedding" field
        """
        payload = {"model": self.model, "prompt": text}

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.endpoint_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ServiceError(
                f"Embedding request failed with HTTP {e.response.status_code}: "
                f"{e.response.text[:200]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ServiceError(f"Embedding request to {self.endpoint_url} failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise ServiceError("Embedding response is not valid JSON") from e

        embedding = body.get("embedding") if isinstance(body, dict) else None
        if not isinstance(embedding, list) or not embedding:
            raise ServiceError("Embedding response missing 'embedding'")

        # bool is an int subclass; JSON true/false are not vector components
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in embedding):
            raise ServiceError("Embedding response contains non-numeric values")

        try:
            vector = [float(value) for value in embedding]
        except OverflowError as e:
            raise ServiceError("Embedding response contains non-finite values") from e
        if not all(math.isfinite(value) for value in vector):
            raise ServiceError("Embedding response contains non-finite values")

        logger.debug(f"Embedded {len(text)} chars into {len(vector)} dimensions")
        return vector

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts, one request each, in order.

        Args:
            texts: Texts to embed

        Returns:
            One vector per text
        """
        return [self.embed(text) for text in texts]

    def embed_query(self, query: str) -> list[float]:
        """Embed a user question."""
        return self.embed(query)
