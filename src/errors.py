"""
Error classes for the impact analysis core.

Only SingularMatrixError is ever raised by the core operations.  The other
two name conditions that are absorbed locally (empty result, ``None`` model,
zero correlation).  Every class carries a ``reason`` tag; the pipeline
reports these tags in ``degraded_reasons``.
"""

from __future__ import annotations

from typing import Optional


class ImpactAnalysisError(Exception):
    """Base class for analysis errors."""


class InsufficientDataError(ImpactAnalysisError):
    """Too few weekly points for correlation or regression."""

    reason = "insufficient_weekly_data"


class DegenerateInputError(ImpactAnalysisError):
    """Zero-variance series or zero-sum contribution denominator."""

    reason = "degenerate_input"


class SingularMatrixError(ImpactAnalysisError):
    """Matrix inversion hit a numerically zero pivot."""

    reason = "singular_matrix"

    def __init__(self, message: str = "Matrix is singular", column: Optional[int] = None):
        super().__init__(message)
        self.column = column
