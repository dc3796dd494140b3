"""
Index capability consumed by the benchmark runner.

A backend hands out ephemeral IndexHandles. Each handle belongs to exactly
one strategy run and must be destroyed by that run.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Sequence

logger = logging.getLogger(__name__)


@dataclass
class IndexHandle:
    """An ephemeral per-run index."""

    name: str
    collection: Any = None
    size: int = 0


@dataclass
class SearchHit:
    """A single similarity-search hit."""

    id: str
    score: float
    content: str


class IndexBackend:
    """
    Base class for index backends.

    Subclasses implement create/insert_many/search/destroy. Backend errors
    are raised as ExternalServiceFailure.

    Usage:
        handle = backend.create("chunkbench-sliding-window-1")
        try:
            backend.insert_many(handle, ["chunk-0"], ["Berlin is ..."])
            hits = backend.search(handle, "What is Berlin?", top_k=1)
        finally:
            backend.destroy(handle)
    """

    def create(self, name: str) -> IndexHandle:
        raise NotImplementedError

    def insert(self, handle: IndexHandle, id: str, text: str) -> None:
        """Insert a single text."""
        self.insert_many(handle, [id], [text])

    def insert_many(
        self, handle: IndexHandle, ids: Sequence[str], texts: Sequence[str]
    ) -> None:
        raise NotImplementedError

    def search(self, handle: IndexHandle, query: str, top_k: int = 1) -> List[SearchHit]:
        raise NotImplementedError

    def destroy(self, handle: IndexHandle) -> None:
        raise NotImplementedError
