"""
Boundary-pattern chunking.

- RegexChunker: one chunk per regex-delimited segment
- AdaptiveChunker: segments merged toward a character size band
"""

import re
from typing import List

from .base import ChunkingStrategy

# Split after sentence-ending punctuation, keeping the punctuation
SENTENCE_BOUNDARY = r"(?<=[.!?])\s+"


class RegexChunker(ChunkingStrategy):
    """Split on a boundary regex; empty segments are dropped."""

    def __init__(self, pattern: str = SENTENCE_BOUNDARY):
        self.pattern = re.compile(pattern)

    def chunk(self, text: str) -> List[str]:
        parts = self.pattern.split(text)
        return [p.strip() for p in parts if p and p.strip()]

    def __repr__(self) -> str:
        return f"RegexChunker({self.pattern.pattern!r})"


class AdaptiveChunker(ChunkingStrategy):
    """
    Merge boundary-delimited segments until a chunk reaches `min_size`
    characters, never exceeding `max_size` unless one segment alone does.

    Oversized segments are split on whitespace into `max_size` pieces.
    """

    def __init__(
        self,
        pattern: str = SENTENCE_BOUNDARY,
        min_size: int = 200,
        max_size: int = 400,
    ):
        if not 0 < min_size <= max_size:
            raise ValueError("Expected 0 < min_size <= max_size")
        self.splitter = RegexChunker(pattern)
        self.min_size = min_size
        self.max_size = max_size

    def _split_oversized(self, segment: str) -> List[str]:
        pieces = []
        current = ""
        for word in segment.split():
            candidate = f"{current} {word}" if current else word
            if current and len(candidate) > self.max_size:
                pieces.append(current)
                current = word
            else:
                current = candidate
        if current:
            pieces.append(current)
        return pieces

    def chunk(self, text: str) -> List[str]:
        chunks = []
        buffer = ""

        for segment in self.splitter.chunk(text):
            parts = (
                self._split_oversized(segment)
                if len(segment) > self.max_size
                else [segment]
            )
            for part in parts:
                if buffer and len(buffer) + 1 + len(part) > self.max_size:
                    chunks.append(buffer)
                    buffer = ""

                buffer = f"{buffer} {part}" if buffer else part

                if len(buffer) >= self.min_size:
                    chunks.append(buffer)
                    buffer = ""

        if buffer:
            chunks.append(buffer)

        return chunks

    def __repr__(self) -> str:
        return f"AdaptiveChunker({self.min_size}, {self.max_size})"
