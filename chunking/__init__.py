"""
Chunking Strategies.

Chunking determines what the retriever can find. This package is the
strategy library the benchmark compares:
- Fixed windows (words or tokens)
- Boundary patterns (regex, adaptive size band)
- Sentence and paragraph-aware grouping
- Entity-anchored grouping
- Composites (contextual prefixing, hybrid refinement)

Every strategy exposes `chunk(text) -> List[str]` and a
`content_preserving` flag.

Usage:
    from chunking import SlidingWindowChunker

    chunker = SlidingWindowChunker(window_size=100, overlap=20)
    chunks = chunker.chunk(text)
"""

from .base import ChunkingStrategy
from .composite import ContextualChunker, HybridChunker, first_sentence_context
from .entity import EntityChunker
from .pattern import SENTENCE_BOUNDARY, AdaptiveChunker, RegexChunker
from .semantic_chunker import (
    Paragraph,
    SemanticChunker,
    extract_paragraphs,
    semantic_chunk,
)
from .sentence_splitter import Sentence, SentenceSplitter, split_into_sentences
from .window import SlidingWindowChunker, TokenWindowChunker, num_tokens

__all__ = [
    "ChunkingStrategy",
    "SlidingWindowChunker",
    "TokenWindowChunker",
    "num_tokens",
    "RegexChunker",
    "AdaptiveChunker",
    "SENTENCE_BOUNDARY",
    "Sentence",
    "SentenceSplitter",
    "split_into_sentences",
    "Paragraph",
    "SemanticChunker",
    "extract_paragraphs",
    "semantic_chunk",
    "EntityChunker",
    "ContextualChunker",
    "HybridChunker",
    "first_sentence_context",
]
