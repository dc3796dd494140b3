"""
Sentence-level text splitting.

For fine-grained chunking when semantic paragraph boundaries aren't
available or appropriate.
"""

import logging
import re
from dataclasses import dataclass
from typing import List

from .base import ChunkingStrategy
from .window import num_tokens

logger = logging.getLogger(__name__)

# Common abbreviations that shouldn't end a sentence
ABBREVIATIONS = (
    "Mr", "Mrs", "Ms", "Dr", "Prof", "Sr", "Jr", "St", "vs", "etc", "eg", "ie",
    "al", "Inc", "Ltd", "Corp", "Jan", "Feb", "Mar", "Apr", "Jun", "Jul", "Aug",
    "Sep", "Oct", "Nov", "Dec",
)

_ABBREVIATION_RE = re.compile(
    r"\b(" + "|".join(ABBREVIATIONS) + r")\.", flags=re.IGNORECASE
)
_DECIMAL_RE = re.compile(r"(\d)\.(\d)")
_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
_PLACEHOLDER = "<DOT>"


@dataclass
class Sentence:
    """A sentence with its character span in the source text."""

    text: str
    start: int
    end: int
    index: int


def split_into_sentences(text: str) -> List[Sentence]:
    """
    Split text into sentences.

    Abbreviations ("Dr.") and decimals ("3.85") are protected so they do
    not end a sentence.

    Args:
        text: Text to split

    Returns:
        List of Sentence objects, empty for blank text
    """
    protected = _ABBREVIATION_RE.sub(rf"\1{_PLACEHOLDER}", text)
    protected = _DECIMAL_RE.sub(rf"\1{_PLACEHOLDER}\2", protected)

    sentences = []
    position = 0

    for part in _BOUNDARY_RE.split(protected):
        restored = part.replace(_PLACEHOLDER, ".").strip()
        if not restored:
            continue

        start = text.find(restored, position)
        if start == -1:
            start = position
        end = start + len(restored)

        sentences.append(
            Sentence(text=restored, start=start, end=end, index=len(sentences))
        )
        position = end

    return sentences


class SentenceSplitter(ChunkingStrategy):
    """
    Sentence-based splitter with token-aware grouping.

    Usage:
        splitter = SentenceSplitter(max_tokens=80)
        chunks = splitter.chunk(long_text)
    """

    def __init__(
        self,
        max_tokens: int = 500,
        overlap_sentences: int = 1,
    ):
        """
        Args:
            max_tokens: Maximum tokens per chunk
            overlap_sentences: Sentences repeated at the start of the next chunk
        """
        self.max_tokens = max_tokens
        self.overlap_sentences = overlap_sentences

    def chunk(self, text: str) -> List[str]:
        sentences = split_into_sentences(text)

        chunks = []
        current: List[Sentence] = []
        current_tokens = 0

        for sentence in sentences:
            sent_tokens = num_tokens(sentence.text)

            if current and current_tokens + sent_tokens > self.max_tokens:
                chunks.append(" ".join(s.text for s in current))

                # Keep overlap sentences, unless they alone fill the budget
                current = current[-self.overlap_sentences :] if self.overlap_sentences else []
                current_tokens = sum(num_tokens(s.text) for s in current)
                if current_tokens + sent_tokens > self.max_tokens:
                    current = []
                    current_tokens = 0

            current.append(sentence)
            current_tokens += sent_tokens

        if current:
            chunks.append(" ".join(s.text for s in current))

        return chunks

    def __repr__(self) -> str:
        return f"SentenceSplitter({self.max_tokens}, {self.overlap_sentences})"
