"""
Chunking benchmark harness.

Applies each registered chunking strategy to one document in isolation,
builds an ephemeral index per strategy, runs a fixed query workload and
compares the strategies on chunk statistics, timing and retrieval quality.

Components:
- StrategyRegistry: ordered, explicitly registered strategies
- BenchmarkRunner: chunk -> index -> query for one strategy, failures contained
- collect_metrics: chunk-size statistics and per-query scores
- BenchmarkHarness: the run loop, sequential or bounded-parallel
- build_comparison / render_report: tables, rankings and best picks

Usage:
    from benchmark import BenchmarkHarness, BenchmarkRunner, build_default_registry

    runner = BenchmarkRunner(backend)
    report = BenchmarkHarness(build_default_registry(), runner).run(document, queries)
    print(render_report(build_comparison(report)))
"""

from .errors import (
    BenchmarkError,
    ConfigurationError,
    ExternalServiceFailure,
    OperationTimeout,
    StrategyFailure,
)
from .harness import BenchmarkHarness, ComparisonReport, ResultAccumulator
from .metrics import (
    DocumentStats,
    QueryScore,
    StrategyResult,
    collect_metrics,
    describe_document,
)
from .registry import RegisteredStrategy, StrategyRegistry, build_default_registry
from .reporter import (
    NOT_AVAILABLE,
    BestInCategory,
    Comparison,
    OverallRow,
    QueryRanking,
    build_comparison,
    rank_query,
    render_document_stats,
    render_report,
    render_strategy_result,
    select_best,
)
from .runner import BenchmarkRunner

__all__ = [
    "BenchmarkError",
    "ConfigurationError",
    "ExternalServiceFailure",
    "OperationTimeout",
    "StrategyFailure",
    "BenchmarkHarness",
    "ComparisonReport",
    "ResultAccumulator",
    "DocumentStats",
    "QueryScore",
    "StrategyResult",
    "collect_metrics",
    "describe_document",
    "RegisteredStrategy",
    "StrategyRegistry",
    "build_default_registry",
    "NOT_AVAILABLE",
    "BestInCategory",
    "Comparison",
    "OverallRow",
    "QueryRanking",
    "build_comparison",
    "rank_query",
    "render_document_stats",
    "render_report",
    "render_strategy_result",
    "select_best",
    "BenchmarkRunner",
]
