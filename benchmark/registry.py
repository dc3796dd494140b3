"""
Strategy registry.

The strategies of a comparison are an explicit, ordered list built at
startup. Registration order is significant: it is the report order and
the tie-breaker for every ranking.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional

from chunking import (
    AdaptiveChunker,
    ContextualChunker,
    EntityChunker,
    HybridChunker,
    RegexChunker,
    SemanticChunker,
    SentenceSplitter,
    SlidingWindowChunker,
    TokenWindowChunker,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredStrategy:
    """A named strategy and whether its chunks are literal document text."""

    name: str
    strategy: Any
    content_preserving: bool = True


class StrategyRegistry:
    """
    Ordered collection of uniquely named strategies.

    Usage:
        registry = StrategyRegistry()
        registry.register("Regex", RegexChunker())
        for entry in registry:
            print(entry.name)
    """

    def __init__(self):
        self._entries: List[RegisteredStrategy] = []

    def register(
        self,
        name: str,
        strategy: Any,
        content_preserving: Optional[bool] = None,
    ) -> RegisteredStrategy:
        """
        Add a strategy at the end of the registry.

        Args:
            name: Unique, stable identifier
            strategy: Object with a `chunk(text)` method
            content_preserving: Overrides the strategy's own flag

        Raises:
            ValueError: On a blank or duplicate name, or a strategy
                without a callable `chunk`
        """
        if not name or not name.strip():
            raise ValueError("Strategy name must not be blank")
        if name in self.names():
            raise ValueError(f"Strategy '{name}' is already registered")
        if not callable(getattr(strategy, "chunk", None)):
            raise ValueError(f"Strategy '{name}' has no chunk() method")

        if content_preserving is None:
            content_preserving = bool(getattr(strategy, "content_preserving", True))

        entry = RegisteredStrategy(
            name=name, strategy=strategy, content_preserving=content_preserving
        )
        self._entries.append(entry)
        return entry

    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def get(self, name: str) -> RegisteredStrategy:
        for entry in self._entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def __iter__(self) -> Iterator[RegisteredStrategy]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


# Entities named in the built-in Berlin workload
DEFAULT_ENTITIES = ["Berlin", "Germany", "Brandenburg", "Europe"]


def build_default_registry() -> StrategyRegistry:
    """The nine strategies compared by default, in report order."""
    registry = StrategyRegistry()

    registry.register("1. SlidingWindowChunking", SlidingWindowChunker(100, 20))
    registry.register(
        "2. ContextualChunking", ContextualChunker(SlidingWindowChunker(100, 20))
    )
    registry.register("3. AdaptiveChunking", AdaptiveChunker(min_size=200, max_size=400))
    registry.register("4. EntityBasedChunking", EntityChunker(DEFAULT_ENTITIES))
    registry.register("5. SentenceChunking", SentenceSplitter(max_tokens=80))
    registry.register("6. RegexChunking", RegexChunker())
    registry.register(
        "7. HybridChunking",
        HybridChunker(
            SlidingWindowChunker(100, 20), EntityChunker(["Berlin", "Germany"])
        ),
    )
    registry.register(
        "8. SemanticChunking", SemanticChunker(max_tokens=120, overlap_tokens=20)
    )
    registry.register("9. TokenWindowChunking", TokenWindowChunker(128, 16))

    logger.debug(f"Default registry: {registry.names()}")
    return registry
