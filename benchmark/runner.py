"""
Benchmark runner: chunk -> index -> query for one strategy.

Every run owns a fresh index that is destroyed on every exit path. Any
failure inside the pipeline (strategy error, backend outage, timeout,
malformed chunks) is contained here: the caller always gets a
StrategyResult, the sentinel one when the run failed.
"""

import itertools
import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Callable, List, Optional, Sequence

from .errors import OperationTimeout, StrategyFailure
from .metrics import StrategyResult, collect_metrics

logger = logging.getLogger(__name__)

_run_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def next_run_sequence() -> int:
    """Process-wide run counter used to keep index names unique."""
    with _sequence_lock:
        return next(_run_sequence)


def slugify(name: str, max_length: int = 40) -> str:
    """Lowercase alphanumeric slug of a strategy name."""
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", name).strip("-").lower()
    return slug[:max_length].strip("-") or "strategy"


def materialize_chunks(chunks: Any) -> List[str]:
    """
    Turn a strategy's output into a list of strings.

    Raises:
        StrategyFailure: If the output is not a finite sequence of str
    """
    if chunks is None:
        raise StrategyFailure("chunk() returned None")
    if isinstance(chunks, (str, bytes)):
        raise StrategyFailure("chunk() returned a single string, expected a sequence")

    try:
        items = list(chunks)
    except TypeError as e:
        raise StrategyFailure(f"chunk() returned a non-iterable result: {e}") from e

    for i, chunk in enumerate(items):
        if not isinstance(chunk, str):
            raise StrategyFailure(
                f"chunk {i} is {type(chunk).__name__}, expected str"
            )

    return items


class BenchmarkRunner:
    """
    Runs one strategy against a document and a query workload.

    Usage:
        runner = BenchmarkRunner(backend, operation_timeout=30.0)
        result = runner.run("Regex", RegexChunker(), document, queries)
    """

    def __init__(
        self,
        backend,
        top_k: int = 1,
        operation_timeout: Optional[float] = None,
        sample_size: int = 2,
        index_prefix: str = "chunkbench",
    ):
        """
        Args:
            backend: IndexBackend handing out ephemeral indices
            top_k: Hits requested per query; the best one is scored
            operation_timeout: Seconds allowed per external call (None = no limit)
            sample_size: Leading chunks kept in the result as samples
            index_prefix: Prefix of ephemeral index names
        """
        self.backend = backend
        self.top_k = max(1, top_k)
        self.operation_timeout = operation_timeout or None
        self.sample_size = sample_size
        self.index_prefix = index_prefix

    def index_name(self, strategy_name: str) -> str:
        return f"{self.index_prefix}-{slugify(strategy_name)}-{next_run_sequence()}"

    def _call(
        self,
        strategy_name: str,
        operation: str,
        fn: Callable,
        *args,
        on_late_result: Optional[Callable[[Any], None]] = None,
    ) -> Any:
        """
        Run an external call, bounded by the per-operation timeout.

        `on_late_result` receives the result of a call that completes after
        it was abandoned, so resources it acquired can still be released.
        """
        if self.operation_timeout is None:
            return fn(*args)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chunkbench-op")
        future = executor.submit(fn, *args)
        try:
            return future.result(timeout=self.operation_timeout)
        except FuturesTimeoutError:
            if not future.cancel() and on_late_result is not None:
                future.add_done_callback(
                    lambda f: self._deliver_late(strategy_name, f, on_late_result)
                )
            raise OperationTimeout(
                f"{operation} timed out after {self.operation_timeout:.1f}s",
                strategy=strategy_name,
            )
        finally:
            # A timed-out call keeps running on its worker thread; don't wait for it
            executor.shutdown(wait=False)

    @staticmethod
    def _deliver_late(strategy_name: str, future, callback: Callable[[Any], None]) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        logger.debug(f"Abandoned call of '{strategy_name}' completed late")
        callback(future.result())

    def _release(self, strategy_name: str, handle) -> None:
        try:
            self.backend.destroy(handle)
        except Exception as e:
            logger.warning(
                f"Could not release index {handle.name} of '{strategy_name}': {e}"
            )

    def run(
        self,
        name: str,
        strategy: Any,
        document: str,
        queries: Sequence[str],
    ) -> StrategyResult:
        """
        Benchmark one strategy. Never raises an Exception to the caller.

        Args:
            name: Strategy name (used for logging and the index name)
            strategy: Object with `chunk(document)`
            document: Source text
            queries: Query workload, scored in this order

        Returns:
            StrategyResult, or the failure sentinel
        """
        handle = None

        try:
            start = time.perf_counter()
            chunks = self._call(
                name, "chunking", lambda: materialize_chunks(strategy.chunk(document))
            )
            chunking_ms = (time.perf_counter() - start) * 1000

            handle = self._call(
                name,
                "index creation",
                self.backend.create,
                self.index_name(name),
                on_late_result=lambda late: self._release(name, late),
            )

            ids = [f"chunk-{i}" for i in range(len(chunks))]
            start = time.perf_counter()
            if chunks:
                self._call(name, "indexing", self.backend.insert_many, handle, ids, chunks)
            indexing_ms = (time.perf_counter() - start) * 1000

            query_scores = []
            for query in queries:
                hits = self._call(name, "search", self.backend.search, handle, query, self.top_k)
                query_scores.append((query, hits[0].score if hits else 0.0))

            logger.info(
                f"Strategy '{name}': {len(chunks)} chunks, "
                f"chunking={chunking_ms:.1f}ms, indexing={indexing_ms:.1f}ms"
            )
            return collect_metrics(
                chunks,
                chunking_time_ms=chunking_ms,
                indexing_time_ms=indexing_ms,
                query_scores=query_scores,
                sample_size=self.sample_size,
            )

        except Exception as e:
            logger.warning(f"Error testing '{name}' ({type(e).__name__}): {e}")
            return StrategyResult.empty(error=str(e) or type(e).__name__)

        finally:
            if handle is not None:
                self._release(name, handle)
