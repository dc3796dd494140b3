"""
Strategies built from other strategies.

- ContextualChunker: prepends document-level context to every chunk of a
  base strategy, so chunks with anaphoric references still carry the
  entity they refer to
- HybridChunker: refines the chunks of one strategy with a second one
"""

import logging
from typing import Callable, List, Optional

from .base import ChunkingStrategy
from .sentence_splitter import split_into_sentences

logger = logging.getLogger(__name__)


def first_sentence_context(document: str, max_chars: int = 200) -> str:
    """
    Use the document's opening sentence as its context.

    Opening sentences usually introduce the main entity, which is what
    later pronouns refer to.
    """
    sentences = split_into_sentences(document)
    if not sentences:
        return ""

    context = sentences[0].text
    if len(context) > max_chars:
        context = context[: max_chars - 3] + "..."
    return context


class ContextualChunker(ChunkingStrategy):
    """
    Wrap a base strategy and prefix each chunk with document context.

    Chunk text is synthesized, so this strategy is not content-preserving.

    Usage:
        chunker = ContextualChunker(SlidingWindowChunker(100, 20))
        chunks = chunker.chunk(text)
    """

    content_preserving = False

    def __init__(
        self,
        base: ChunkingStrategy,
        context_generator: Optional[Callable[[str], str]] = None,
    ):
        self.base = base
        self.context_generator = context_generator or first_sentence_context

    def chunk(self, text: str) -> List[str]:
        chunks = self.base.chunk(text)
        if not chunks:
            return []

        context = self.context_generator(text)
        if not context:
            return list(chunks)

        return [f"Context: {context}\n\n{chunk}" for chunk in chunks]

    def __repr__(self) -> str:
        return f"ContextualChunker({self.base!r})"


class HybridChunker(ChunkingStrategy):
    """
    Apply `primary`, then split each resulting chunk with `secondary`.

    A primary chunk the secondary strategy cannot split further is kept
    unchanged.
    """

    def __init__(self, primary: ChunkingStrategy, secondary: ChunkingStrategy):
        self.primary = primary
        self.secondary = secondary
        self.content_preserving = (
            getattr(primary, "content_preserving", True)
            and getattr(secondary, "content_preserving", True)
        )

    def chunk(self, text: str) -> List[str]:
        chunks = []
        for coarse in self.primary.chunk(text):
            refined = self.secondary.chunk(coarse)
            chunks.extend(refined if refined else [coarse])

        logger.debug(f"Hybrid chunking produced {len(chunks)} chunks")
        return chunks

    def __repr__(self) -> str:
        return f"HybridChunker({self.primary!r}, {self.secondary!r})"
