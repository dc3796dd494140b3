"""
Common interface of all chunking strategies.
"""

from typing import List


class ChunkingStrategy:
    """
    A strategy maps one document to an ordered list of chunk strings.

    `content_preserving` is True when every chunk is text taken from the
    document (possibly re-joined on whitespace). Strategies that synthesize
    or prepend text set it to False, and the literal self-retrieval check
    does not apply to them.
    """

    content_preserving: bool = True

    def chunk(self, text: str) -> List[str]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
