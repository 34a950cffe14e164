"""Exception hierarchy for aumos-compliance.

Three failure families are distinguished:

- :class:`ValidationError` : a rule record, pattern, or administrative
  request is malformed.  Batch paths (loading, matching) recover by
  skipping the offending record; single-rule calls raise it directly.
- :class:`AnalysisError` : the AI review backend timed out, failed, or
  returned something that could not be used.
- :class:`CacheComputeError` : the function wrapped by the compliance
  cache raised.  The original exception is chained as ``__cause__``.
"""
from __future__ import annotations

from enum import Enum


class ComplianceError(Exception):
    """Base class for every error raised by aumos-compliance."""


class ValidationError(ComplianceError, ValueError):
    """Raised when a rule or administrative input fails validation.

    Attributes
    ----------
    field:
        Name of the offending field, when known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AnalysisFailure(str, Enum):
    """Reason an AI review operation did not produce a result."""

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    UPSTREAM = "upstream"
    MALFORMED = "malformed"


class AnalysisError(ComplianceError):
    """Raised when an AI review operation fails.

    Attributes
    ----------
    operation:
        Name of the AI operation (``"contract_analysis"``,
        ``"topic_research"``, ``"risk_assessment"``,
        ``"compliance_opinion"``).
    kind:
        The :class:`AnalysisFailure` category.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        kind: AnalysisFailure = AnalysisFailure.UPSTREAM,
    ) -> None:
        self.operation = operation
        self.kind = kind
        super().__init__(f"{operation} failed ({kind.value}): {message}")


class CacheComputeError(ComplianceError):
    """Raised to every caller waiting on a cache computation that failed.

    Attributes
    ----------
    key:
        The cache key whose computation failed.
    cause:
        The exception raised by the compute function.
    """

    def __init__(self, key: object, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"Computation for cache key {key!r} failed: {cause}")
