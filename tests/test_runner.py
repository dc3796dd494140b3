"""
Unit tests for the benchmark runner.

Tests:
- Metrics of successful runs
- Failure isolation (strategy errors, malformed output, backend outages)
- Index release on every exit path, interrupts included
- Per-operation timeouts
"""

import logging
import time

import pytest

from benchmark.errors import ExternalServiceFailure, StrategyFailure
from benchmark.runner import BenchmarkRunner, materialize_chunks, slugify
from chunking import RegexChunker

from conftest import (
    FixedChunker,
    MalformedChunker,
    RaisingChunker,
    RecordingBackend,
    SlowBackend,
    SlowChunker,
)


class TestSuccessfulRun:
    def test_chunk_count_matches_strategy_output(self, backend, document, queries):
        """chunk_count equals len(strategy.chunk(document))."""
        strategy = RegexChunker()
        result = BenchmarkRunner(backend).run("regex", strategy, document, queries)

        chunks = strategy.chunk(document)
        assert not result.failed
        assert result.chunk_count == len(chunks)
        assert result.avg_chunk_size == pytest.approx(
            sum(len(c) for c in chunks) / len(chunks)
        )

    def test_one_score_per_query_in_order(self, backend, document, queries):
        result = BenchmarkRunner(backend).run("regex", RegexChunker(), document, queries)

        assert [item.query for item in result.query_scores] == queries
        assert all(0.0 <= item.score <= 1.0 + 1e-6 for item in result.query_scores)

    def test_exact_chunk_query_scores_one(self, backend):
        chunks = ["alpha beta gamma", "delta epsilon"]
        result = BenchmarkRunner(backend).run(
            "fixed", FixedChunker(chunks), "ignored", ["delta epsilon"]
        )

        assert result.score_for("delta epsilon") >= 0.99

    def test_empty_document_yields_zero_chunks_and_scores(self, backend, queries):
        result = BenchmarkRunner(backend).run("regex", RegexChunker(), "", queries)

        assert not result.failed
        assert result.chunk_count == 0
        assert result.avg_chunk_size == 0
        assert result.scores == tuple(0.0 for _ in queries)

    def test_index_released_after_success(self, backend, document, queries):
        BenchmarkRunner(backend).run("regex", RegexChunker(), document, queries)

        assert len(backend.created) == 1
        assert backend.destroyed == backend.created
        assert backend.active_indices == []

    def test_index_names_are_unique_and_derived_from_strategy(self, backend):
        runner = BenchmarkRunner(backend, index_prefix="bench")
        runner.run("My Strategy #1", FixedChunker(["x"]), "doc", [])
        runner.run("My Strategy #1", FixedChunker(["x"]), "doc", [])

        first, second = backend.created
        assert first != second
        assert first.startswith("bench-my-strategy-1-")
        assert second.startswith("bench-my-strategy-1-")


class TestFailureIsolation:
    def test_raising_strategy_returns_sentinel(self, backend, queries, caplog):
        with caplog.at_level(logging.WARNING, logger="benchmark.runner"):
            result = BenchmarkRunner(backend).run(
                "broken", RaisingChunker(ValueError("bad input")), "doc", queries
            )

        assert result.failed
        assert result.chunk_count == 0
        assert result.query_scores == ()
        assert "bad input" in result.error
        assert "broken" in caplog.text
        assert "bad input" in caplog.text

    def test_chunking_failure_creates_no_index(self, backend):
        BenchmarkRunner(backend).run("broken", RaisingChunker(), "doc", ["q"])
        assert backend.created == []

    @pytest.mark.parametrize(
        "output",
        [None, "a single string", [1, 2], ["ok", None], 42],
    )
    def test_malformed_output_returns_sentinel(self, backend, output):
        result = BenchmarkRunner(backend).run(
            "malformed", MalformedChunker(output), "doc", ["q"]
        )
        assert result.failed

    @pytest.mark.parametrize("operation", ["create", "insert", "search"])
    def test_backend_failure_returns_sentinel(self, embedder, operation):
        backend = RecordingBackend(embedder, fail_on=operation)
        result = BenchmarkRunner(backend).run(
            "strategy", FixedChunker(["some text"]), "doc", ["q"]
        )

        assert result.failed
        assert "unavailable" in result.error
        assert backend.active_indices == []

    def test_release_failure_does_not_mask_result(self, embedder, caplog):
        backend = RecordingBackend(embedder, fail_on="destroy")
        with caplog.at_level(logging.WARNING, logger="benchmark.runner"):
            result = BenchmarkRunner(backend).run(
                "strategy", FixedChunker(["text"]), "doc", ["text"]
            )

        assert not result.failed
        assert "Could not release index" in caplog.text


class TestInterruptsAndTimeouts:
    def test_interrupt_releases_index_and_propagates(self, embedder):
        backend = RecordingBackend(embedder, fail_on="search", exc=KeyboardInterrupt())

        with pytest.raises(KeyboardInterrupt):
            BenchmarkRunner(backend).run("strategy", FixedChunker(["text"]), "doc", ["q"])

        assert backend.destroyed == backend.created
        assert backend.active_indices == []

    def test_slow_chunking_times_out(self, backend):
        runner = BenchmarkRunner(backend, operation_timeout=0.05)
        result = runner.run("slow", SlowChunker(0.5), "a b c", ["q"])

        assert result.failed
        assert "timed out" in result.error
        assert backend.created == []

    @pytest.mark.parametrize("operation", ["create", "insert", "search"])
    def test_slow_backend_operation_times_out(self, embedder, operation):
        """Every external call is bounded, and no index survives the run."""
        backend = SlowBackend(embedder, slow_on=operation, delay=0.3)
        runner = BenchmarkRunner(backend, operation_timeout=0.05)

        result = runner.run("slow", FixedChunker(["some text"]), "doc", ["some text"])

        assert result.failed
        assert "timed out" in result.error
        time.sleep(0.4)
        assert backend.active_indices == []

    def test_fast_operations_within_timeout(self, backend, document, queries):
        runner = BenchmarkRunner(backend, operation_timeout=10.0)
        result = runner.run("regex", RegexChunker(), document, queries)

        assert not result.failed
        assert backend.active_indices == []


class TestHelpers:
    def test_slugify(self):
        assert slugify("9. TaskAware (SEARCH)") == "9-taskaware-search"
        assert slugify("!!!") == "strategy"

    def test_materialize_accepts_generators(self):
        assert materialize_chunks(c for c in ["a", "b"]) == ["a", "b"]

    def test_materialize_rejects_none(self):
        with pytest.raises(StrategyFailure):
            materialize_chunks(None)

    def test_external_failure_is_not_strategy_failure(self):
        assert not issubclass(ExternalServiceFailure, StrategyFailure)
