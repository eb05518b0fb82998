"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use a .env file for local development.

Environment Variables:
    OLLAMA_URL: Base URL of the Ollama server (embeddings and chat)
    EMBEDDING_MODEL: Model used for document/query embeddings
    LLM_MODEL: Chat model used to answer questions
    STORAGE_DIR: Root directory for persisted session indexes
    CHUNK_SIZE: Character size of document chunks
    CHUNK_OVERLAP: Overlap between chunks
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Model Service Configuration
    # ==========================================================================
    ollama_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server serving embeddings and chat",
    )
    embedding_model: str = Field(
        default="mxbai-embed-large",
        description="Embedding model for document/query vectors",
    )
    llm_model: str = Field(
        default="deepseek-r1:latest",
        description="Chat model used to answer questions",
    )
    request_timeout: float = Field(
        default=120.0,
        gt=0.0,
        description="Timeout in seconds for each embedding/chat request",
    )

    # ==========================================================================
    # Storage Configuration
    # ==========================================================================
    storage_dir: Path = Field(
        default=Path("data/sessions"),
        description="Root directory holding one sub-directory per session",
    )

    # ==========================================================================
    # Ingestion Configuration
    # ==========================================================================
    chunk_size: int = Field(
        default=1024,
        ge=1,
        le=32768,
        description="Size in characters of document chunks",
    )
    chunk_overlap: int = Field(
        default=100,
        ge=0,
        description="Characters shared by consecutive chunks",
    )
    document_extensions: list[str] = Field(
        default=[".pdf", ".txt", ".md"],
        description="File extensions picked up when ingesting a folder",
    )
    pdftotext_path: str = Field(
        default="pdftotext",
        description="Executable used to extract text from PDF files",
    )

    # ==========================================================================
    # Retrieval Configuration
    # ==========================================================================
    retrieval_top_k: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Maximum number of chunks used as context",
    )
    similarity_threshold: float = Field(
        default=0.2,
        ge=-1.0,
        le=1.0,
        description="Minimum cosine similarity for retrieved chunks",
    )

    # ==========================================================================
    # Observability Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("chunk_overlap")
    @classmethod
    def validate_chunk_overlap(cls, v: int, info) -> int:
        """Ensure overlap is less than chunk size."""
        chunk_size = info.data.get("chunk_size", 1024)
        if v >= chunk_size:
            raise ValueError(f"chunk_overlap ({v}) must be less than chunk_size ({chunk_size})")
        return v

    @field_validator("document_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase extensions and make sure each starts with a dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        if not normalized:
            raise ValueError("document_extensions must contain at least one extension")
        return normalized

    @field_validator("ollama_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop trailing slashes so endpoint paths can be appended."""
        return v.rstrip("/")

    @field_validator("storage_dir")
    @classmethod
    def resolve_path(cls, v: Path) -> Path:
        """Resolve paths to absolute paths."""
        return v.resolve()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    Call `get_settings.cache_clear()` to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Convenience alias
settings = get_settings()
