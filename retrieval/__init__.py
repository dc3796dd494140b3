"""
Index backends for the benchmark.

Retrieval is the optical lens for your LLM; here it is the instrument that
measures how well each chunking strategy serves a query workload.

This module implements:
- The index capability (create, insert, search, destroy)
- Ephemeral ChromaDB collections
- An in-process numpy flat index

Usage:
    from retrieval import InMemoryIndexBackend

    backend = InMemoryIndexBackend(embedding_service)
    handle = backend.create("chunkbench-regex-1")
"""

from .index_backend import IndexBackend, IndexHandle, SearchHit
from .memory_index import InMemoryIndexBackend
from .vector_retriever import ChromaIndexBackend

BACKENDS = ("chroma", "memory")


def get_index_backend(name: str, embedding_service, host=None, port: int = 8000) -> IndexBackend:
    """Create the index backend registered under `name`."""
    from benchmark.errors import ConfigurationError

    if name == "chroma":
        return ChromaIndexBackend(embedding_service, host=host, port=port)
    if name == "memory":
        return InMemoryIndexBackend(embedding_service)

    raise ConfigurationError(f"Unknown index backend '{name}'. Expected one of {BACKENDS}")


__all__ = [
    "BACKENDS",
    "IndexBackend",
    "IndexHandle",
    "SearchHit",
    "ChromaIndexBackend",
    "InMemoryIndexBackend",
    "get_index_backend",
]
