"""
Chat client for the Ollama /api/chat endpoint.

Sends one non-streaming request per prompt: a fixed system instruction plus a
single user turn. No retries; failures surface as ServiceError.
"""

import logging
from typing import Optional

import requests

from sessionrag.exceptions import ServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant answering questions based on provided context."


class OllamaChatLLM:
    """LLM client for an Ollama server."""

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: float = 120.0,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        """
        Initialize the chat client.

        Args:
            base_url: Ollama server URL (without the /api/chat path)
            model: Chat model name
            timeout: Request timeout in seconds
            system_prompt: Instruction sent as the system message
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.system_prompt = system_prompt

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url}/api/chat"

    def invoke(self, prompt: str) -> str:
        """
        Call the LLM with a prompt.

        Args:
            prompt: The user message

        Returns:
            The model's answer, verbatim

        Raises:
            ServiceError: On transport failure, HTTP error status or a
                response without a string "message.content"
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "stream": False,
        }

        try:
            response = requests.post(self.endpoint_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise ServiceError(
                f"Chat request failed with HTTP {status_code}", status_code=status_code
            ) from e
        except requests.RequestException as e:
            raise ServiceError(f"Chat request to {self.endpoint_url} failed: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            raise ServiceError("Chat response is not valid JSON") from e

        message = result.get("message") if isinstance(result, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ServiceError("Chat response missing 'message.content'")

        logger.debug(f"Chat model {self.model} answered with {len(content)} chars")
        return content

    complete = invoke

    def health_check(self, timeout: float = 10.0) -> tuple[bool, str]:
        """
        Check that the Ollama server is reachable and serves the model.

        Args:
            timeout: Health check timeout in seconds

        Returns:
            Tuple of (is_healthy, message)
        """
        tags_url = f"{self.base_url}/api/tags"

        try:
            logger.info(f"Performing health check on {tags_url}")
            response = requests.get(tags_url, timeout=timeout)
            response.raise_for_status()
            models = [m.get("name", "") for m in response.json().get("models", [])]
        except requests.Timeout:
            return False, f"Server timed out after {timeout}s"
        except requests.ConnectionError as e:
            return False, f"Connection failed: {e}"
        except requests.HTTPError as e:
            return False, f"HTTP {e.response.status_code}: {e.response.reason}"
        except (ValueError, AttributeError):
            return False, "Server returned invalid response structure"

        if self.model not in models:
            return False, f"Server is up but model '{self.model}' is not pulled"
        return True, f"Server healthy ({len(models)} models available)"


def create_ollama_llm(
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    timeout: Optional[float] = None,
) -> OllamaChatLLM:
    """
    Create a chat client, filling unset arguments from settings.

    Args:
        base_url: Ollama server URL
        model: Chat model name
        timeout: Request timeout in seconds

    Returns:
        Configured OllamaChatLLM instance
    """
    from sessionrag.config import settings

    return OllamaChatLLM(
        base_url=base_url or settings.ollama_url,
        model=model or settings.llm_model,
        timeout=timeout if timeout is not None else settings.request_timeout,
    )
