"""
Embedding providers for the benchmark index backends.

CRITICAL: Never mix vectors from different models in the same index.
Every strategy run builds its own ephemeral index, so the provider is chosen
once per comparison and shared by all runs.

Providers:
- openai: text-embedding-3-small via the OpenAI API (needs a key)
- local: sentence-transformers model, no credential required
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import numpy as np

from benchmark.errors import ConfigurationError, ExternalServiceFailure

logger = logging.getLogger(__name__)

PROVIDERS = ("openai", "local")


@dataclass
class EmbeddingConfig:
    """
    Embedding model configuration.

    `model_name` and `dimension` default to the OpenAI provider; the local
    provider falls back to `local_model_name`.
    """

    provider: str = "openai"
    model_name: str = "text-embedding-3-small"
    dimension: int = 1024
    local_model_name: str = "all-MiniLM-L6-v2"
    normalize: bool = True
    version: str = "2025-01-01"
    max_seq_length: int = 512
    batch_size: int = 64


@dataclass
class EmbeddingResult:
    """Embedding result with metadata for tracking."""

    vectors: np.ndarray
    model_name: str
    model_version: str
    embedding_timestamp: str
    preprocessing_hash: str


class EmbeddingService:
    """
    Base embedding service.

    Subclasses implement `_encode`; preprocessing and normalization are shared
    so both providers embed identical text the same way.
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        self.config = config or EmbeddingConfig()
        self._preprocessing_hash = self._compute_preprocessing_hash()

    @property
    def model_name(self) -> str:
        return self.config.model_name

    def _compute_preprocessing_hash(self) -> str:
        """Hash preprocessing config for drift detection."""
        config_str = (
            f"{self.model_name}:"
            f"{self.config.normalize}:"
            f"{self.config.version}"
        )
        return hashlib.md5(config_str.encode()).hexdigest()[:8]

    def preprocess_text(self, text: str) -> str:
        """
        Deterministic text preprocessing.

        Identical chunk and query text must map to identical input,
        otherwise self-retrieval scores drift below 1.0.
        """
        text = " ".join(text.split())

        max_chars = self.config.max_seq_length * 4  # Approximate
        if len(text) > max_chars:
            text = text[:max_chars]

        # Some APIs reject empty input
        return text or " "

    def _encode(self, texts: List[str]) -> np.ndarray:
        raise NotImplementedError

    def embed_batch(self, texts: List[str]) -> EmbeddingResult:
        """
        Embed a batch of texts with full metadata.

        Args:
            texts: List of texts to embed

        Returns:
            EmbeddingResult with vectors and metadata
        """
        processed = [self.preprocess_text(t) for t in texts]

        if processed:
            vectors = np.asarray(self._encode(processed), dtype=np.float32)
        else:
            vectors = np.zeros((0, self.config.dimension), dtype=np.float32)

        # Normalize to unit length for cosine similarity
        if self.config.normalize and len(vectors):
            norms = np.linalg.norm(vectors, axis=1, keepdims=True)
            vectors = vectors / (norms + 1e-10)  # Avoid division by zero

        return EmbeddingResult(
            vectors=vectors,
            model_name=self.model_name,
            model_version=self.config.version,
            embedding_timestamp=datetime.utcnow().isoformat() + "Z",
            preprocessing_hash=self._preprocessing_hash,
        )

    def embed_query(self, query: str) -> np.ndarray:
        """Embed a query for retrieval."""
        return self.embed_batch([query]).vectors[0]

    def get_metadata(self) -> dict:
        """Get embedding configuration metadata."""
        return {
            "provider": self.config.provider,
            "model_name": self.model_name,
            "version": self.config.version,
            "normalize": self.config.normalize,
            "preprocessing_hash": self._preprocessing_hash,
        }


class SentenceTransformerEmbeddingService(EmbeddingService):
    """Local sentence-transformers embeddings."""

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        super().__init__(config)
        self._model = None

    @property
    def model_name(self) -> str:
        return self.config.local_model_name

    @property
    def model(self):
        """Lazy load the model."""
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            logger.info(f"Loading embedding model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def _encode(self, texts: List[str]) -> np.ndarray:
        return self.model.encode(
            texts, show_progress_bar=False, convert_to_numpy=True
        )


class OpenAIEmbeddingService(EmbeddingService):
    """
    OpenAI embeddings.

    API errors surface as ExternalServiceFailure so the runner can tell a
    backend outage apart from a broken strategy in its warning.
    """

    def __init__(self, api_key: str, config: Optional[EmbeddingConfig] = None):
        super().__init__(config)
        if not api_key:
            raise ConfigurationError("OpenAI embeddings require an API key")
        self.api_key = api_key
        self._client = None

    @property
    def client(self):
        """Lazy load OpenAI client."""
        if self._client is None:
            try:
                from openai import OpenAI

                self._client = OpenAI(api_key=self.api_key)
            except ImportError:
                raise ImportError(
                    "openai package required. Install with: pip install openai"
                )
        return self._client

    def _encode(self, texts: List[str]) -> np.ndarray:
        from openai import OpenAIError

        vectors = []
        for start in range(0, len(texts), self.config.batch_size):
            batch = texts[start : start + self.config.batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model_name,
                    input=batch,
                    dimensions=self.config.dimension,
                )
            except OpenAIError as e:
                raise ExternalServiceFailure(f"OpenAI embeddings failed: {e}") from e
            vectors.extend(item.embedding for item in response.data)

        return np.array(vectors, dtype=np.float32)


def get_embedding_service(
    config: Optional[EmbeddingConfig] = None, api_key: Optional[str] = None
) -> EmbeddingService:
    """
    Create the embedding service for the configured provider.

    Args:
        config: Embedding configuration
        api_key: Credential for the OpenAI provider

    Returns:
        EmbeddingService instance
    """
    config = config or EmbeddingConfig()

    if config.provider == "openai":
        return OpenAIEmbeddingService(api_key=api_key, config=config)
    if config.provider == "local":
        return SentenceTransformerEmbeddingService(config)

    raise ConfigurationError(
        f"Unknown embedding provider '{config.provider}'. Expected one of {PROVIDERS}"
    )
