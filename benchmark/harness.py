"""
Comparison run loop.

Feeds every registered strategy to the runner and accumulates the results
in registration order. Sequential by default: a single embedding backend is
usually rate-limited, and one run finishing (teardown included) before the
next starts keeps the load predictable. Bounded parallelism is available
because strategies share no mutable state and each owns its index.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .metrics import StrategyResult
from .registry import StrategyRegistry
from .runner import BenchmarkRunner

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str, StrategyResult], None]


@dataclass(frozen=True)
class ComparisonReport:
    """
    Ordered strategy -> result entries of one comparison, plus its queries.

    Entries follow registration order regardless of completion order.
    """

    entries: Tuple[Tuple[str, StrategyResult], ...]
    queries: Tuple[str, ...]

    @property
    def results(self) -> Mapping[str, StrategyResult]:
        return MappingProxyType(dict(self.entries))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.entries]

    def as_dict(self) -> Dict[str, StrategyResult]:
        return dict(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class ResultAccumulator:
    """
    Collects results from one or more workers.

    `append` is the only writer and holds the lock for the whole update, so
    concurrent runs never interleave. `build` orders entries by their
    registration position.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[int, Tuple[str, StrategyResult]] = {}

    def append(self, position: int, name: str, result: StrategyResult) -> None:
        with self._lock:
            if position in self._entries:
                raise ValueError(f"Result for position {position} already recorded")
            self._entries[position] = (name, result)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def build(self, queries: Sequence[str]) -> ComparisonReport:
        with self._lock:
            ordered = tuple(self._entries[p] for p in sorted(self._entries))
        return ComparisonReport(entries=ordered, queries=tuple(queries))


class BenchmarkHarness:
    """
    Runs a registry of strategies against one document.

    Usage:
        harness = BenchmarkHarness(build_default_registry(), runner)
        report = harness.run(document, queries)
    """

    def __init__(
        self,
        registry: StrategyRegistry,
        runner: BenchmarkRunner,
        max_workers: int = 1,
        on_result: Optional[ResultCallback] = None,
    ):
        """
        Args:
            registry: Strategies to compare, in report order
            runner: Runner shared by all strategies
            max_workers: 1 for sequential runs, >1 for bounded parallelism
            on_result: Called with (name, result) as each run finishes
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.registry = registry
        self.runner = runner
        self.max_workers = max_workers
        self.on_result = on_result

    def _record(
        self,
        accumulator: ResultAccumulator,
        position: int,
        name: str,
        result: StrategyResult,
    ) -> None:
        accumulator.append(position, name, result)
        if self.on_result is not None:
            self.on_result(name, result)

    def run(self, document: str, queries: Sequence[str]) -> ComparisonReport:
        """
        Benchmark every registered strategy.

        Returns:
            ComparisonReport with exactly one entry per registered strategy
        """
        entries = list(self.registry)
        queries = list(queries)
        accumulator = ResultAccumulator()

        logger.info(
            f"Benchmarking {len(entries)} strategies with {len(queries)} queries "
            f"({'sequential' if self.max_workers == 1 else f'{self.max_workers} workers'})"
        )

        if self.max_workers == 1:
            for position, entry in enumerate(entries):
                result = self.runner.run(entry.name, entry.strategy, document, queries)
                self._record(accumulator, position, entry.name, result)
        else:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="chunkbench"
            ) as executor:
                futures = {
                    executor.submit(
                        self.runner.run, entry.name, entry.strategy, document, queries
                    ): (position, entry.name)
                    for position, entry in enumerate(entries)
                }
                for future in as_completed(futures):
                    position, name = futures[future]
                    self._record(accumulator, position, name, future.result())

        report = accumulator.build(queries)
        failed = sum(1 for _, result in report.entries if result.failed)
        logger.info(f"Benchmark complete: {len(report)} strategies, {failed} failed")
        return report
