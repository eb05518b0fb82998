"""LLM clients for sessionrag."""

from sessionrag.llm.factory import LLMProtocol, create_llm
from sessionrag.llm.ollama_chat import OllamaChatLLM, create_ollama_llm

__all__ = ["OllamaChatLLM", "create_ollama_llm", "LLMProtocol", "create_llm"]
