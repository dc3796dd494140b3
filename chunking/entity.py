"""
Entity-based chunking.

Starts a new chunk at every sentence that names one of the tracked
entities. Sentences without a mention stay with the preceding chunk, since
they usually refer back to it ("Its economy ...", "The city ...").
"""

import re
from typing import List, Sequence

from .base import ChunkingStrategy
from .sentence_splitter import split_into_sentences


class EntityChunker(ChunkingStrategy):
    """
    Usage:
        chunker = EntityChunker(["Berlin", "Germany"])
        chunks = chunker.chunk(text)
    """

    def __init__(self, entities: Sequence[str]):
        if not entities:
            raise ValueError("EntityChunker needs at least one entity")
        self.entities = list(entities)
        self._mention_re = re.compile(
            r"\b(" + "|".join(re.escape(e) for e in self.entities) + r")\b"
        )

    def mentions_entity(self, sentence: str) -> bool:
        return self._mention_re.search(sentence) is not None

    def chunk(self, text: str) -> List[str]:
        chunks = []
        current: List[str] = []

        for sentence in split_into_sentences(text):
            if current and self.mentions_entity(sentence.text):
                chunks.append(" ".join(current))
                current = []
            current.append(sentence.text)

        if current:
            chunks.append(" ".join(current))

        return chunks

    def __repr__(self) -> str:
        return f"EntityChunker({self.entities!r})"
