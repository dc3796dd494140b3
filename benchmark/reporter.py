"""
Comparison reporting.

Turns a ComparisonReport into:
- an overall metrics table (one row per strategy, registration order)
- per-query rankings (stable descending sort, top N)
- best-in-category picks (fewest chunks, fastest chunking, best retrieval)

and renders them as plain-text tables. Failure sentinels appear in the
tables with zeroed metrics but never win a category.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .harness import ComparisonReport
from .metrics import DocumentStats, StrategyResult

NOT_AVAILABLE = "N/A"

MEDALS = ("🥇", "🥈", "🥉")

RULE = "─" * 71


@dataclass(frozen=True)
class OverallRow:
    """One strategy's line in the overall metrics table."""

    strategy: str
    chunk_count: int
    avg_chunk_size: float
    min_chunk_size: int
    max_chunk_size: int
    chunking_time_ms: float
    indexing_time_ms: float
    failed: bool = False


@dataclass(frozen=True)
class QueryRanking:
    """Top strategies for one query, best first."""

    query: str
    entries: Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class BestInCategory:
    """Winning strategy name per category, or NOT_AVAILABLE."""

    fewest_chunks: str = NOT_AVAILABLE
    fastest_chunking: str = NOT_AVAILABLE
    best_avg_retrieval: str = NOT_AVAILABLE


@dataclass(frozen=True)
class Comparison:
    """A report together with everything derived from it."""

    report: ComparisonReport
    overall: Tuple[OverallRow, ...]
    rankings: Tuple[QueryRanking, ...]
    best: BestInCategory


def overall_table(report: ComparisonReport) -> Tuple[OverallRow, ...]:
    return tuple(
        OverallRow(
            strategy=name,
            chunk_count=result.chunk_count,
            avg_chunk_size=result.avg_chunk_size,
            min_chunk_size=result.min_chunk_size,
            max_chunk_size=result.max_chunk_size,
            chunking_time_ms=result.chunking_time_ms,
            indexing_time_ms=result.indexing_time_ms,
            failed=result.failed,
        )
        for name, result in report.entries
    )


def rank_query(report: ComparisonReport, position: int, top_n: int = 5) -> QueryRanking:
    """
    Rank strategies by their score for the query at `position`.

    Queries are matched by position, so a repeated query string gets its
    own ranking. Strategies without a score at that position are left
    out. `sorted` is stable, so equal scores keep registration order.
    """
    query = report.queries[position]
    scored = []
    for name, result in report.entries:
        score = result.score_at(position)
        if score is not None:
            scored.append((name, score))

    scored = sorted(scored, key=lambda item: item[1], reverse=True)
    return QueryRanking(query=query, entries=tuple(scored[:top_n]))


def select_best(report: ComparisonReport) -> BestInCategory:
    """
    Pick the winner of each category.

    Only successful runs compete, so a failed run's zero chunk count or
    zero mean score never wins a category. Failed entries still appear in
    the overall table; they are only excluded from these picks.
    Every tie goes to the strategy registered first.
    """
    candidates = [(name, r) for name, r in report.entries if not r.failed]
    if not candidates:
        return BestInCategory()

    fewest_name, fewest = candidates[0]
    for name, result in candidates[1:]:
        if result.chunk_count < fewest.chunk_count:
            fewest_name, fewest = name, result

    fastest_name = NOT_AVAILABLE
    fastest_time = None
    for name, result in candidates:
        if result.chunking_time_ms > 0 and (
            fastest_time is None or result.chunking_time_ms < fastest_time
        ):
            fastest_name, fastest_time = name, result.chunking_time_ms

    best_name, best_mean = candidates[0][0], candidates[0][1].mean_score
    for name, result in candidates[1:]:
        if result.mean_score > best_mean:
            best_name, best_mean = name, result.mean_score

    return BestInCategory(
        fewest_chunks=fewest_name,
        fastest_chunking=fastest_name,
        best_avg_retrieval=best_name,
    )


def build_comparison(report: ComparisonReport, top_n: int = 5) -> Comparison:
    """Derive tables, rankings and picks from a report."""
    return Comparison(
        report=report,
        overall=overall_table(report),
        rankings=tuple(
            rank_query(report, i, top_n) for i in range(len(report.queries))
        ),
        best=select_best(report),
    )


def truncate(text: str, max_length: int) -> str:
    if text is None:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def _banner(title: str) -> List[str]:
    width = 72
    return [
        "╔" + "═" * width + "╗",
        "║" + title.center(width) + "║",
        "╚" + "═" * width + "╝",
    ]


def _section(title: str) -> str:
    heading = f"═══ {title} "
    return heading + "═" * max(0, 71 - len(heading))


def render_document_stats(stats: DocumentStats) -> str:
    return "\n".join(
        [
            "Test Document Statistics:",
            f"  Total length: {stats.length} characters",
            f"  Word count: {stats.word_count} words",
            f"  Sentence count: {stats.sentence_count} sentences",
        ]
    )


def render_strategy_result(
    name: str, result: StrategyResult, queries: Sequence[str]
) -> str:
    """Progress block printed as each strategy finishes."""
    lines = [RULE, name, RULE]

    if result.failed:
        lines.append(f"  ⚠️  Error testing {name}: {result.error}")
        return "\n".join(lines)

    lines += [
        "Chunking Results:",
        f"  Chunks created: {result.chunk_count}",
        f"  Avg chunk size: {result.avg_chunk_size:.1f} chars",
        f"  Min chunk size: {result.min_chunk_size} chars",
        f"  Max chunk size: {result.max_chunk_size} chars",
        f"  Chunking time: {result.chunking_time_ms:.1f}ms",
        "",
        "Sample Chunks:",
    ]
    for i, chunk in enumerate(result.sample_chunks):
        lines.append(f"  Chunk {i + 1}: {truncate(chunk, 80)}")

    lines += ["", f"Indexing time: {result.indexing_time_ms:.1f}ms", "", "Search Results:"]
    for item in result.query_scores:
        lines.append(f"  {truncate(item.query, 40):<45} → Score: {item.score:.4f}")

    return "\n".join(lines)


def render_report(comparison: Comparison) -> str:
    """Render the comparison summary as plain-text tables."""
    lines = _banner("COMPARISON SUMMARY") + [""]

    lines.append(_section("Overall Metrics"))
    lines.append(
        f"{'Strategy':<35}  {'Chunks':>6}  {'Avg Size':>8}  {'Chunk(ms)':>9}  {'Index(ms)':>9}"
    )
    lines.append(RULE)
    for row in comparison.overall:
        lines.append(
            f"{truncate(row.strategy, 35):<35}  {row.chunk_count:>6d}  "
            f"{row.avg_chunk_size:>8.0f}  {row.chunking_time_ms:>9.1f}  "
            f"{row.indexing_time_ms:>9.1f}"
        )

    lines += ["", _section("Query Performance (Top Result Scores)")]
    for ranking in comparison.rankings:
        lines += ["", f'Query: "{ranking.query}"', RULE]
        if not ranking.entries:
            lines.append("  No scores recorded")
        for i, (name, score) in enumerate(ranking.entries):
            medal = MEDALS[i] if i < len(MEDALS) else "  "
            lines.append(f"  {medal} {truncate(name, 40):<45} → {score:.4f}")

    best = comparison.best
    lines += [
        "",
        _section("Best Strategies"),
        f"  🏆 Fewest chunks: {best.fewest_chunks}",
        f"  ⚡ Fastest chunking: {best.fastest_chunking}",
        f"  🎯 Best avg retrieval: {best.best_avg_retrieval}",
    ]

    return "\n".join(lines)
