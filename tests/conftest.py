"""
Shared pytest fixtures for the benchmark tests.

Provides:
- A deterministic hashing embedder (no model download, no network)
- Fake strategies (fixed, raising, slow, malformed)
- An in-memory backend that records index lifecycle calls
"""

import time
import zlib
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pytest

from benchmark.errors import ExternalServiceFailure
from retrieval import InMemoryIndexBackend

from app.workload import BERLIN_DOCUMENT, TEST_QUERIES


# =============================================================================
# Embeddings
# =============================================================================


@dataclass
class HashedEmbeddings:
    vectors: np.ndarray


class HashingEmbedder:
    """
    Bag-of-words feature hashing.

    Identical texts get identical vectors (cosine 1.0), texts sharing words
    get positive similarity, and nothing needs to be downloaded.
    """

    model_name = "hashing-test"

    def __init__(self, dimension: int = 512):
        self.dimension = dimension

    def _vector(self, text: str) -> np.ndarray:
        vec = np.zeros(self.dimension, dtype=np.float32)
        for word in text.lower().split():
            vec[zlib.crc32(word.encode()) % self.dimension] += 1.0
        norm = np.linalg.norm(vec)
        return vec / norm if norm else vec

    def embed_batch(self, texts: List[str]) -> HashedEmbeddings:
        if not texts:
            return HashedEmbeddings(np.zeros((0, self.dimension), dtype=np.float32))
        return HashedEmbeddings(np.vstack([self._vector(t) for t in texts]))

    def embed_query(self, query: str) -> np.ndarray:
        return self._vector(query)


# =============================================================================
# Strategies
# =============================================================================


class FixedChunker:
    """Returns the same chunks for any document."""

    content_preserving = True

    def __init__(self, chunks: List[str]):
        self.chunks = list(chunks)

    def chunk(self, text: str) -> List[str]:
        return list(self.chunks)


class RaisingChunker:
    def __init__(self, exc: Optional[Exception] = None):
        self.exc = exc or RuntimeError("chunker exploded")

    def chunk(self, text: str) -> List[str]:
        raise self.exc


class SlowChunker:
    """Sleeps before splitting the document into words."""

    def __init__(self, delay: float):
        self.delay = delay

    def chunk(self, text: str) -> List[str]:
        time.sleep(self.delay)
        return text.split()


class MalformedChunker:
    def __init__(self, output):
        self.output = output

    def chunk(self, text: str):
        return self.output


# =============================================================================
# Backends
# =============================================================================


class RecordingBackend(InMemoryIndexBackend):
    """
    In-memory backend that records lifecycle calls and can be told to fail
    (or raise an arbitrary exception) at one operation.
    """

    def __init__(self, embedding_service, fail_on: Optional[str] = None, exc=None):
        super().__init__(embedding_service)
        self.fail_on = fail_on
        self.exc = exc
        self.created: List[str] = []
        self.destroyed: List[str] = []

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise self.exc or ExternalServiceFailure(f"{operation} unavailable")

    def create(self, name):
        self._maybe_fail("create")
        handle = super().create(name)
        self.created.append(name)
        return handle

    def insert_many(self, handle, ids, texts):
        self._maybe_fail("insert")
        super().insert_many(handle, ids, texts)

    def search(self, handle, query, top_k=1):
        self._maybe_fail("search")
        return super().search(handle, query, top_k)

    def destroy(self, handle):
        self.destroyed.append(handle.name)
        self._maybe_fail("destroy")
        super().destroy(handle)


class SlowBackend(InMemoryIndexBackend):
    """In-memory backend that sleeps before one operation."""

    def __init__(self, embedding_service, slow_on: str, delay: float):
        super().__init__(embedding_service)
        self.slow_on = slow_on
        self.delay = delay

    def _maybe_sleep(self, operation: str) -> None:
        if self.slow_on == operation:
            time.sleep(self.delay)

    def create(self, name):
        self._maybe_sleep("create")
        return super().create(name)

    def insert_many(self, handle, ids, texts):
        self._maybe_sleep("insert")
        super().insert_many(handle, ids, texts)

    def search(self, handle, query, top_k=1):
        self._maybe_sleep("search")
        return super().search(handle, query, top_k)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def backend(embedder) -> RecordingBackend:
    return RecordingBackend(embedder)


@pytest.fixture
def document() -> str:
    return BERLIN_DOCUMENT


@pytest.fixture
def queries() -> List[str]:
    return list(TEST_QUERIES)
