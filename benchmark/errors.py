"""
Error taxonomy for the benchmark harness.

Only ConfigurationError is allowed to end a comparison run. Every other
failure is contained at the single-strategy boundary by the runner and
recorded as a sentinel result.
"""

from typing import Optional


class BenchmarkError(Exception):
    """Base class for harness errors."""

    pass


class StrategyFailure(BenchmarkError):
    """The chunk/index/query pipeline for one strategy failed."""

    def __init__(self, message: str, strategy: Optional[str] = None):
        super().__init__(message)
        self.strategy = strategy


class OperationTimeout(StrategyFailure):
    """An external call exceeded the per-operation timeout."""

    pass


class ExternalServiceFailure(BenchmarkError):
    """The embedding or index backend is unreachable or erroring."""

    pass


class ConfigurationError(BenchmarkError):
    """Missing credential or invalid configuration at startup."""

    pass
