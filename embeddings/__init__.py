"""
Embeddings Module.

CRITICAL: Never mix vectors from different models in the same index.

This module handles:
- Embedding generation with versioning
- Provider selection (OpenAI API or local sentence-transformers)
- Preprocessing normalization

Usage:
    from embeddings import EmbeddingConfig, get_embedding_service

    service = get_embedding_service(EmbeddingConfig(provider="local"))
    result = service.embed_batch(["text1", "text2"])
"""

from .embedder import (
    PROVIDERS,
    EmbeddingConfig,
    EmbeddingResult,
    EmbeddingService,
    OpenAIEmbeddingService,
    SentenceTransformerEmbeddingService,
    get_embedding_service,
)

__all__ = [
    "PROVIDERS",
    "EmbeddingConfig",
    "EmbeddingResult",
    "EmbeddingService",
    "OpenAIEmbeddingService",
    "SentenceTransformerEmbeddingService",
    "get_embedding_service",
]
