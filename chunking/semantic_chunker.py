"""
Semantic chunking with hierarchical structure preservation.

Chunking determines what the retriever can find.

Best practices:
- Chunk on semantic boundaries (paragraphs, sections)
- Preserve document structure (titles, headings)
- Use overlap to maintain context across chunk boundaries
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .base import ChunkingStrategy
from .window import num_tokens

logger = logging.getLogger(__name__)


@dataclass
class Paragraph:
    """A paragraph with metadata."""

    text: str
    title: Optional[str] = None
    section: Optional[str] = None


@dataclass
class SemanticChunk:
    """A group of paragraphs emitted as one chunk."""

    paragraphs: List[Paragraph] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n\n".join(p.text for p in self.paragraphs)

    @property
    def titles(self) -> List[str]:
        seen = []
        for p in self.paragraphs:
            if p.title and p.title not in seen:
                seen.append(p.title)
        return seen


def extract_paragraphs(text: str) -> List[Paragraph]:
    """
    Extract paragraphs with heading detection.

    Preserves structure by identifying:
    - Markdown headings (# ## ###)
    - Section numbers (1.2.3)
    - All-caps headings

    Args:
        text: Document text

    Returns:
        List of Paragraph objects with metadata
    """
    paragraphs = []
    current_title = None
    current_section = None

    for block in re.split(r"\n\s*\n", text):
        block = block.strip()
        if not block:
            continue

        heading_match = re.match(r"^(#{1,6})\s+(.+)$", block)
        if heading_match:
            current_title = heading_match.group(2).strip()
            continue

        # e.g. "1.2.3 Section Name"
        section_match = re.match(r"^(\d+(?:\.\d+)*)\s+(.+)$", block)
        if section_match:
            current_section = section_match.group(1)
            block = section_match.group(2)

        if len(block) < 100 and block.isupper():
            current_title = block
            continue

        paragraphs.append(
            Paragraph(text=block, title=current_title, section=current_section)
        )

    return paragraphs


def _split_oversized(para: Paragraph, max_tokens: int) -> List[Paragraph]:
    """Split a paragraph above the budget on sentence boundaries."""
    pieces = []
    sentences = re.split(r"(?<=[.!?])\s+", para.text)
    current: List[str] = []
    current_tokens = 0

    for sent in sentences:
        s_tokens = num_tokens(sent)
        if current and current_tokens + s_tokens > max_tokens:
            pieces.append(
                Paragraph(text=" ".join(current), title=para.title, section=para.section)
            )
            current = []
            current_tokens = 0
        current.append(sent)
        current_tokens += s_tokens

    if current:
        pieces.append(
            Paragraph(text=" ".join(current), title=para.title, section=para.section)
        )
    return pieces


def semantic_chunk(
    paragraphs: List[Paragraph],
    max_tokens: int = 1000,
    overlap_tokens: int = 100,
) -> List[SemanticChunk]:
    """
    Group paragraphs into chunks under a token budget.

    Args:
        paragraphs: List of paragraphs with metadata
        max_tokens: Maximum tokens per chunk
        overlap_tokens: Trailing paragraphs carried into the next chunk

    Returns:
        List of semantic chunks
    """
    units: List[Paragraph] = []
    for para in paragraphs:
        if num_tokens(para.text) > max_tokens:
            units.extend(_split_oversized(para, max_tokens))
        else:
            units.append(para)

    chunks = []
    current: List[Paragraph] = []
    current_tokens = 0

    for para in units:
        p_tokens = num_tokens(para.text)

        if current and current_tokens + p_tokens > max_tokens:
            chunks.append(SemanticChunk(list(current)))

            # Carry trailing paragraphs as overlap while they fit the budget
            overlap: List[Paragraph] = []
            overlap_tok = 0
            for p in reversed(current):
                p_tok = num_tokens(p.text)
                if overlap_tok + p_tok > overlap_tokens or overlap_tok + p_tok + p_tokens > max_tokens:
                    break
                overlap.insert(0, p)
                overlap_tok += p_tok

            current = overlap
            current_tokens = overlap_tok

        current.append(para)
        current_tokens += p_tokens

    if current:
        chunks.append(SemanticChunk(current))

    return chunks


class SemanticChunker(ChunkingStrategy):
    """
    Paragraph-aware chunker with a token budget.

    With `include_headings`, each chunk is prefixed with its section title,
    which makes the strategy synthesize text (not content-preserving).

    Usage:
        chunker = SemanticChunker(max_tokens=120, overlap_tokens=20)
        chunks = chunker.chunk(document_text)
    """

    def __init__(
        self,
        max_tokens: int = 1000,
        overlap_tokens: int = 100,
        include_headings: bool = False,
    ):
        self.max_tokens = max_tokens
        self.overlap_tokens = overlap_tokens
        self.include_headings = include_headings
        self.content_preserving = not include_headings

    def chunk(self, text: str) -> List[str]:
        paragraphs = extract_paragraphs(text)
        chunks = semantic_chunk(paragraphs, self.max_tokens, self.overlap_tokens)

        result = []
        for chunk in chunks:
            body = chunk.text
            if self.include_headings and chunk.titles:
                body = f"[Section: {chunk.titles[0]}]\n\n{body}"
            result.append(body)

        logger.debug(f"Semantic chunking produced {len(result)} chunks")
        return result

    def __repr__(self) -> str:
        return f"SemanticChunker({self.max_tokens}, {self.overlap_tokens})"
