"""
Ephemeral vector indices on ChromaDB.

Each strategy run gets its own collection:
- created fresh (never reused across strategies)
- cosine HNSW space, embeddings computed by the configured provider
- deleted when the run ends
"""

import logging
import threading
from typing import List, Optional, Sequence

import chromadb
from chromadb.config import Settings as ChromaSettings

from benchmark.errors import ExternalServiceFailure

from .index_backend import IndexBackend, IndexHandle, SearchHit

logger = logging.getLogger(__name__)


class ChromaIndexBackend(IndexBackend):
    """
    Index backend with a Chroma client.

    Uses an in-process EphemeralClient unless a host is given, in which case
    collections live on a remote Chroma server for the duration of a run.

    Usage:
        backend = ChromaIndexBackend(embedding_service)
        handle = backend.create("chunkbench-regex-3")
    """

    def __init__(
        self,
        embedding_service,
        host: Optional[str] = None,
        port: int = 8000,
    ):
        """
        Args:
            embedding_service: Service with embed_batch/embed_query
            host: Remote Chroma host (optional)
            port: Remote Chroma port
        """
        self.embedding_service = embedding_service
        self.host = host
        self.port = port

        self._client = None
        self._client_lock = threading.Lock()

    @property
    def client(self):
        """Get or create Chroma client."""
        with self._client_lock:
            if self._client is None:
                settings = ChromaSettings(anonymized_telemetry=False)
                if self.host:
                    self._client = chromadb.HttpClient(
                        host=self.host, port=self.port, settings=settings
                    )
                else:
                    self._client = chromadb.EphemeralClient(settings=settings)
        return self._client

    def create(self, name: str) -> IndexHandle:
        try:
            collection = self.client.create_collection(
                name=name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=None,
            )
        except Exception as e:
            raise ExternalServiceFailure(f"Could not create index {name}: {e}") from e

        logger.debug(f"Created index {name}")
        return IndexHandle(name=name, collection=collection)

    def insert_many(
        self, handle: IndexHandle, ids: Sequence[str], texts: Sequence[str]
    ) -> None:
        if not ids:
            return

        result = self.embedding_service.embed_batch(list(texts))

        try:
            handle.collection.add(
                ids=list(ids),
                documents=list(texts),
                embeddings=result.vectors.tolist(),
            )
        except Exception as e:
            raise ExternalServiceFailure(f"Insert into {handle.name} failed: {e}") from e

        handle.size += len(ids)

    def search(self, handle: IndexHandle, query: str, top_k: int = 1) -> List[SearchHit]:
        """
        Retrieve the closest chunks by cosine similarity.

        Chroma reports cosine distance, so similarity = 1 - distance.
        """
        if handle.size == 0:
            return []

        query_embedding = self.embedding_service.embed_query(query)

        try:
            results = handle.collection.query(
                query_embeddings=[query_embedding.tolist()],
                n_results=min(top_k, handle.size),
                include=["documents", "distances"],
            )
        except Exception as e:
            raise ExternalServiceFailure(f"Search on {handle.name} failed: {e}") from e

        if not results["ids"] or not results["ids"][0]:
            return []

        hits = []
        for i in range(len(results["ids"][0])):
            distance = results["distances"][0][i]
            hits.append(
                SearchHit(
                    id=results["ids"][0][i],
                    score=max(0.0, 1.0 - float(distance)),
                    content=results["documents"][0][i],
                )
            )

        return hits

    def destroy(self, handle: IndexHandle) -> None:
        try:
            self.client.delete_collection(name=handle.name)
        except Exception as e:
            raise ExternalServiceFailure(f"Could not delete index {handle.name}: {e}") from e

        handle.collection = None
        handle.size = 0
        logger.debug(f"Deleted index {handle.name}")
