"""
Configuration module for the chunking benchmark.
Manages all environment variables and settings with validation.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from benchmark.errors import ConfigurationError
from embeddings import PROVIDERS, EmbeddingConfig
from retrieval import BACKENDS


def _env_float(name: str, default: str) -> Optional[float]:
    """Seconds from the environment; 0 or below disables the limit."""
    value = float(os.getenv(name, default))
    return value if value > 0 else None


@dataclass
class BenchmarkConfig:
    """Run loop and reporting configuration."""

    top_k: int = 1
    ranking_size: int = 5
    sample_chunks: int = 2
    operation_timeout: Optional[float] = field(
        default_factory=lambda: _env_float("BENCHMARK_TIMEOUT", "60")
    )
    max_workers: int = field(
        default_factory=lambda: int(os.getenv("BENCHMARK_WORKERS", "1"))
    )


@dataclass
class Settings:
    """Main application settings loaded from environment."""

    # OpenAI settings
    OPENAI_API_KEY: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    EMBEDDING_PROVIDER: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "openai")
    )

    # Index settings
    INDEX_BACKEND: str = field(default_factory=lambda: os.getenv("INDEX_BACKEND", "chroma"))
    INDEX_PREFIX: str = field(default_factory=lambda: os.getenv("INDEX_PREFIX", "chunkbench"))
    CHROMA_HOST: Optional[str] = field(default_factory=lambda: os.getenv("CHROMA_HOST"))
    CHROMA_PORT: int = field(default_factory=lambda: int(os.getenv("CHROMA_PORT", "8000")))

    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Nested configs
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)

    def __post_init__(self):
        self.embedding.provider = self.EMBEDDING_PROVIDER

    def validate(self) -> None:
        """
        Check the settings before any strategy runs.

        Raises:
            ConfigurationError: On a missing credential or unknown option
        """
        if self.EMBEDDING_PROVIDER not in PROVIDERS:
            raise ConfigurationError(
                f"Unknown embedding provider '{self.EMBEDDING_PROVIDER}'. "
                f"Expected one of {PROVIDERS}"
            )
        if self.INDEX_BACKEND not in BACKENDS:
            raise ConfigurationError(
                f"Unknown index backend '{self.INDEX_BACKEND}'. Expected one of {BACKENDS}"
            )
        if self.EMBEDDING_PROVIDER == "openai" and not self.OPENAI_API_KEY:
            raise ConfigurationError("An OpenAI API key is required")
        if not isinstance(logging.getLevelName(self.LOG_LEVEL.upper()), int):
            raise ConfigurationError(f"Unknown log level '{self.LOG_LEVEL}'")
        if self.benchmark.max_workers < 1:
            raise ConfigurationError("BENCHMARK_WORKERS must be at least 1")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
