"""
Command line entry point.

    chunkbench sk-proj-...                  # OpenAI embeddings, Chroma indices
    chunkbench --provider local --backend memory --workers 3

Report tables go to stdout, log lines to stderr. Exit codes: 0 on a
completed comparison (even if strategies failed), 1 on a configuration
error, 130 when interrupted.
"""

import argparse
import logging
import sys
from typing import List, Optional

from benchmark import (
    BenchmarkHarness,
    BenchmarkRunner,
    ConfigurationError,
    build_comparison,
    build_default_registry,
    describe_document,
    render_document_stats,
    render_report,
    render_strategy_result,
)
from embeddings import PROVIDERS, get_embedding_service
from retrieval import BACKENDS, get_index_backend

from .config import Settings
from .workload import BERLIN_DOCUMENT, TEST_QUERIES

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunkbench",
        description="Compare chunking strategies on chunk statistics, timing and retrieval quality.",
    )
    parser.add_argument(
        "api_key",
        nargs="?",
        help="OpenAI API key (defaults to OPENAI_API_KEY)",
    )
    parser.add_argument("--provider", choices=PROVIDERS, help="Embedding provider")
    parser.add_argument("--backend", choices=BACKENDS, help="Index backend")
    parser.add_argument("--workers", type=int, help="Strategies run concurrently (default 1)")
    parser.add_argument(
        "--timeout", type=float, help="Seconds per external operation (0 disables)"
    )
    parser.add_argument("--log-level", help="Logging level (default INFO)")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command line overrides applied."""
    settings = Settings()

    if args.api_key:
        settings.OPENAI_API_KEY = args.api_key
    if args.provider:
        settings.EMBEDDING_PROVIDER = args.provider
        settings.embedding.provider = args.provider
    if args.backend:
        settings.INDEX_BACKEND = args.backend
    if args.workers is not None:
        settings.benchmark.max_workers = args.workers
    if args.timeout is not None:
        settings.benchmark.operation_timeout = args.timeout if args.timeout > 0 else None
    if args.log_level:
        settings.LOG_LEVEL = args.log_level

    return settings


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)

    try:
        settings.validate()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Usage: chunkbench <openai-api-key>", file=sys.stderr)
        print("Example: chunkbench sk-proj-...", file=sys.stderr)
        return 1

    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)

    embedding_service = get_embedding_service(
        settings.embedding, api_key=settings.OPENAI_API_KEY
    )
    backend = get_index_backend(
        settings.INDEX_BACKEND,
        embedding_service,
        host=settings.CHROMA_HOST,
        port=settings.CHROMA_PORT,
    )
    runner = BenchmarkRunner(
        backend,
        top_k=settings.benchmark.top_k,
        operation_timeout=settings.benchmark.operation_timeout,
        sample_size=settings.benchmark.sample_chunks,
        index_prefix=settings.INDEX_PREFIX,
    )

    queries = list(TEST_QUERIES)

    def print_progress(name, result):
        print(render_strategy_result(name, result, queries))
        print()

    harness = BenchmarkHarness(
        build_default_registry(),
        runner,
        max_workers=settings.benchmark.max_workers,
        on_result=print_progress,
    )

    print(render_document_stats(describe_document(BERLIN_DOCUMENT)))
    print()
    print(f"Embedding model: {embedding_service.model_name} ({settings.INDEX_BACKEND} index)")
    print("Testing chunking strategies...\n")

    try:
        report = harness.run(BERLIN_DOCUMENT, queries)
    except KeyboardInterrupt:
        logger.warning("Benchmark interrupted")
        return 130

    comparison = build_comparison(report, top_n=settings.benchmark.ranking_size)
    print(render_report(comparison))
    print("\n✅ Comparison complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
