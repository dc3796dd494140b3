"""
Per-strategy metrics.

Derives chunk-size statistics and the per-query score list from the raw
outputs of one benchmark run. Sizes are measured in characters.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class QueryScore:
    """Top-1 similarity score of one query against one strategy's index."""

    query: str
    score: float


@dataclass(frozen=True)
class StrategyResult:
    """
    Immutable record of one strategy run.

    A failed run is recorded as the sentinel returned by `empty()`:
    all-zero fields, no scores, `failed=True`.
    """

    chunk_count: int = 0
    avg_chunk_size: float = 0.0
    min_chunk_size: int = 0
    max_chunk_size: int = 0
    chunking_time_ms: float = 0.0
    indexing_time_ms: float = 0.0
    query_scores: Tuple[QueryScore, ...] = ()
    sample_chunks: Tuple[str, ...] = ()
    failed: bool = False
    error: Optional[str] = None

    @classmethod
    def empty(cls, error: Optional[str] = None) -> "StrategyResult":
        """Sentinel result for a failed run."""
        return cls(failed=True, error=error)

    def score_for(self, query: str) -> Optional[float]:
        """Score of the first occurrence of `query`, or None if absent."""
        for item in self.query_scores:
            if item.query == query:
                return item.score
        return None

    def score_at(self, position: int) -> Optional[float]:
        """Score of the query at `position` in the workload, or None."""
        if 0 <= position < len(self.query_scores):
            return self.query_scores[position].score
        return None

    @property
    def scores(self) -> Tuple[float, ...]:
        return tuple(item.score for item in self.query_scores)

    @property
    def mean_score(self) -> float:
        """Mean query score; 0.0 when nothing was scored."""
        if not self.query_scores:
            return 0.0
        return float(np.mean(self.scores))


@dataclass(frozen=True)
class DocumentStats:
    """Basic statistics of the benchmarked document."""

    length: int
    word_count: int
    sentence_count: int


def collect_metrics(
    chunks: Sequence[str],
    chunking_time_ms: float,
    indexing_time_ms: float,
    query_scores: Iterable[Tuple[str, float]],
    sample_size: int = 2,
) -> StrategyResult:
    """
    Build a StrategyResult from one run's raw outputs.

    Args:
        chunks: Chunks produced by the strategy, in order
        chunking_time_ms: Wall-clock chunking time
        indexing_time_ms: Wall-clock indexing time
        query_scores: (query, score) pairs in query-list order
        sample_size: Number of leading chunks kept as samples

    Returns:
        StrategyResult with count, mean, min and max chunk length
    """
    scores = tuple(
        QueryScore(query=query, score=max(0.0, float(score)))
        for query, score in query_scores
    )

    if chunks:
        lengths = np.array([len(c) for c in chunks])
        avg_size = float(np.mean(lengths))
        min_size = int(np.min(lengths))
        max_size = int(np.max(lengths))
    else:
        avg_size, min_size, max_size = 0.0, 0, 0

    return StrategyResult(
        chunk_count=len(chunks),
        avg_chunk_size=avg_size,
        min_chunk_size=min_size,
        max_chunk_size=max_size,
        chunking_time_ms=max(0.0, float(chunking_time_ms)),
        indexing_time_ms=max(0.0, float(indexing_time_ms)),
        query_scores=scores,
        sample_chunks=tuple(chunks[: max(0, sample_size)]),
    )


def describe_document(text: str) -> DocumentStats:
    """Character, word and sentence counts of a document."""
    stripped = text.strip()
    return DocumentStats(
        length=len(text),
        word_count=len(stripped.split()),
        sentence_count=len(re.split(r"[.!?]\s+", stripped)) if stripped else 0,
    )
