"""
LLM factory for creating the chat client from configuration.
"""

from typing import Protocol


class LLMProtocol(Protocol):
    """Protocol that all LLM clients must implement."""

    def invoke(self, prompt: str) -> str:
        """Call the LLM with a prompt and return the response."""
        ...


def create_llm() -> LLMProtocol:
    """
    Create the chat client configured in settings.

    Returns:
        LLM client that implements the LLMProtocol
    """
    from sessionrag.llm.ollama_chat import create_ollama_llm

    return create_ollama_llm()

