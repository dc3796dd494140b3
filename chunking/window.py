"""
Fixed-size window chunking.

Traditional chunk-then-embed splitting. Fast and simple, but anaphoric
references ("Its", "The city") lose their antecedent whenever a window
boundary falls between them.
"""

from functools import lru_cache
from typing import List

from .base import ChunkingStrategy


@lru_cache()
def get_encoding():
    """cl100k_base tokenizer, loaded on first use."""
    import tiktoken

    return tiktoken.get_encoding("cl100k_base")


def num_tokens(text: str) -> int:
    """Count tokens using cl100k_base encoding."""
    return len(get_encoding().encode(text))


class SlidingWindowChunker(ChunkingStrategy):
    """
    Word windows with overlap.

    Usage:
        chunker = SlidingWindowChunker(window_size=100, overlap=20)
        chunks = chunker.chunk(text)
    """

    def __init__(self, window_size: int = 100, overlap: int = 20):
        if window_size <= 0:
            raise ValueError("window_size must be positive")
        if not 0 <= overlap < window_size:
            raise ValueError("overlap must be in [0, window_size)")
        self.window_size = window_size
        self.overlap = overlap

    def chunk(self, text: str) -> List[str]:
        words = text.split()
        chunks = []

        step = self.window_size - self.overlap
        start = 0
        while start < len(words):
            end = min(start + self.window_size, len(words))
            chunks.append(" ".join(words[start:end]))
            if end == len(words):
                break
            start += step

        return chunks

    def __repr__(self) -> str:
        return f"SlidingWindowChunker({self.window_size}, {self.overlap})"


class TokenWindowChunker(ChunkingStrategy):
    """
    Split by token count (not semantic boundaries).

    Token boundaries can fall inside words, so decoded chunks are not
    guaranteed to be clean substrings of the document.
    """

    content_preserving = False

    def __init__(self, max_tokens: int = 128, overlap_tokens: int = 16):
        if not 0 <= overlap_tokens < max_tokens:
            raise ValueError("overlap_tokens must be in [0, max_tokens)")
        self.max_tokens = max_tokens
        self.overlap_tokens = overlap_tokens

    def chunk(self, text: str) -> List[str]:
        enc = get_encoding()
        tokens = enc.encode(text)
        chunks = []

        start = 0
        while start < len(tokens):
            end = min(start + self.max_tokens, len(tokens))
            chunks.append(enc.decode(tokens[start:end]))

            # Move start with overlap
            start = end - self.overlap_tokens if end < len(tokens) else end

        return chunks

    def __repr__(self) -> str:
        return f"TokenWindowChunker({self.max_tokens}, {self.overlap_tokens})"
