"""
In-process flat vector index.

Exhaustive cosine search over a numpy matrix. No server and no persistence,
which makes it a good fit for ephemeral per-strategy indices and for tests.
"""

import logging
import threading
from typing import Dict, List, Sequence

import numpy as np

from benchmark.errors import ExternalServiceFailure

from .index_backend import IndexBackend, IndexHandle, SearchHit

logger = logging.getLogger(__name__)


class _FlatCollection:
    """Vectors and documents of one ephemeral index."""

    def __init__(self):
        self.ids: List[str] = []
        self.documents: List[str] = []
        self.vectors: List[np.ndarray] = []


class InMemoryIndexBackend(IndexBackend):
    """
    Flat cosine index backend.

    Handles are tracked by name so a name can never be handed out twice
    while its index is alive.
    """

    def __init__(self, embedding_service):
        self.embedding_service = embedding_service
        self._collections: Dict[str, _FlatCollection] = {}
        self._lock = threading.Lock()

    @property
    def active_indices(self) -> List[str]:
        """Names of indices that have not been destroyed."""
        with self._lock:
            return list(self._collections)

    def create(self, name: str) -> IndexHandle:
        with self._lock:
            if name in self._collections:
                raise ExternalServiceFailure(f"Index {name} already exists")
            collection = _FlatCollection()
            self._collections[name] = collection

        logger.debug(f"Created index {name}")
        return IndexHandle(name=name, collection=collection)

    def insert_many(
        self, handle: IndexHandle, ids: Sequence[str], texts: Sequence[str]
    ) -> None:
        if not ids:
            return
        if handle.collection is None:
            raise ExternalServiceFailure(f"Index {handle.name} was destroyed")

        result = self.embedding_service.embed_batch(list(texts))

        collection = handle.collection
        collection.ids.extend(ids)
        collection.documents.extend(texts)
        collection.vectors.extend(np.asarray(v, dtype=np.float32) for v in result.vectors)
        handle.size += len(ids)

    def search(self, handle: IndexHandle, query: str, top_k: int = 1) -> List[SearchHit]:
        if handle.size == 0:
            return []
        if handle.collection is None:
            raise ExternalServiceFailure(f"Index {handle.name} was destroyed")

        collection = handle.collection
        matrix = np.vstack(collection.vectors)
        query_vec = np.asarray(self.embedding_service.embed_query(query), dtype=np.float32)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
        similarities = (matrix @ query_vec) / (norms + 1e-10)

        # Stable sort keeps insertion order among equal scores
        order = np.argsort(-similarities, kind="stable")[:top_k]

        return [
            SearchHit(
                id=collection.ids[i],
                score=max(0.0, float(similarities[i])),
                content=collection.documents[i],
            )
            for i in order
        ]

    def destroy(self, handle: IndexHandle) -> None:
        with self._lock:
            self._collections.pop(handle.name, None)

        handle.collection = None
        handle.size = 0
        logger.debug(f"Deleted index {handle.name}")
