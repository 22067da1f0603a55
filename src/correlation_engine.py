"""
Correlation Engine
==================
Rank-based correlation between weekly spending metrics and weekly
wellbeing ratings.

For every (financial metric × wellbeing metric) pair:
  • extract the paired weekly series (stress_level inverted: 11 − v, so a
    larger value is always "better");
  • Spearman ρ = Pearson r of the ranks.  Ties take the MINIMUM rank of
    their run ([5, 5, 1] → [2, 2, 1]), not the textbook average rank;
  • keep |ρ| > 0.1, classify strength / direction, round to 3 decimals;
  • sort by |ρ| descending.

``significance`` is 1 − |ρ|, a monotonic heuristic, not a p-value.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

import numpy as np
from scipy import stats as sp_stats

from analytics.rounding import round_half_up
from constants import (
    FINANCIAL_METRICS,
    INVERSION_BASE,
    INVERTED_METRICS,
    MIN_ABS_CORRELATION,
    MIN_CORRELATION_POINTS,
    MODERATE_THRESHOLD,
    RANK_DECIMALS,
    STRONG_THRESHOLD,
    WELLBEING_METRICS,
)
from models import CorrelationResult, WeeklyAggregate

log = logging.getLogger("correlation_engine")


# ─── Primitives ──────────────────────────────────────────────


def rank_data(values: Sequence[float]) -> np.ndarray:
    """1-based ranks; tied values share the lowest rank of their run.

    Values are compared at RANK_DECIMALS places, so float noise such as
    16.666666666666664 vs 16.666666666666668 counts as a tie.
    """
    values = np.round(np.asarray(values, dtype=np.float64), RANK_DECIMALS)
    return sp_stats.rankdata(values, method="min")


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r via the sum-of-products formula.

    Returns 0 for fewer than two points or a zero-variance series.
    """
    xa = np.asarray(x, dtype=np.float64)
    ya = np.asarray(y, dtype=np.float64)
    if xa.shape != ya.shape:
        raise ValueError(f"Series lengths differ: {len(xa)} vs {len(ya)}")
    n = len(xa)
    if n < 2:
        return 0.0

    sum_x, sum_y = xa.sum(), ya.sum()
    numerator = n * np.dot(xa, ya) - sum_x * sum_y
    var_term = (n * np.dot(xa, xa) - sum_x * sum_x) * (n * np.dot(ya, ya) - sum_y * sum_y)
    if var_term <= 0:
        return 0.0
    return float(numerator / math.sqrt(var_term))


def spearman(x: Sequence[float], y: Sequence[float]) -> float:
    if len(x) != len(y):
        raise ValueError(f"Series lengths differ: {len(x)} vs {len(y)}")
    if len(x) < 2:
        return 0.0
    return pearson(rank_data(x), rank_data(y))


def classify_strength(correlation: float) -> str:
    magnitude = abs(correlation)
    if magnitude > STRONG_THRESHOLD:
        return "strong"
    if magnitude > MODERATE_THRESHOLD:
        return "moderate"
    return "weak"


# ─── Series extraction ───────────────────────────────────────


def financial_series(weekly: Sequence[WeeklyAggregate], metric: str) -> List[float]:
    return [float(getattr(w.financial, metric)) for w in weekly]


def wellbeing_series(weekly: Sequence[WeeklyAggregate], metric: str) -> List[float]:
    """Weekly wellbeing values, with inverted metrics flipped to 11 − v."""
    values = [float(getattr(w.wellbeing, metric)) for w in weekly]
    if metric in INVERTED_METRICS:
        values = [INVERSION_BASE - v for v in values]
    return values


# ─── Main entry ──────────────────────────────────────────────


def analyze_correlations(weekly: Sequence[WeeklyAggregate]) -> List[CorrelationResult]:
    """Correlate all 8 financial metrics with all 5 wellbeing metrics."""
    if len(weekly) < MIN_CORRELATION_POINTS:
        log.warning(
            "Insufficient data for correlation analysis (need >= %d weeks, got %d)",
            MIN_CORRELATION_POINTS, len(weekly),
        )
        return []

    results: List[CorrelationResult] = []
    for fin in FINANCIAL_METRICS:
        x = financial_series(weekly, fin)
        for wb in WELLBEING_METRICS:
            y = wellbeing_series(weekly, wb)
            r = spearman(x, y)
            if math.isnan(r) or abs(r) <= MIN_ABS_CORRELATION:
                continue
            results.append(CorrelationResult(
                financial_metric=fin,
                wellbeing_metric=wb,
                correlation=round_half_up(r, 3),
                strength=classify_strength(r),
                direction="positive" if r > 0 else "negative",
                significance=round_half_up(max(0.0, 1 - abs(r)), 3),
            ))

    results.sort(key=lambda c: abs(c.correlation), reverse=True)
    log.info("   %d correlations above |r| > %.1f across %d weeks",
             len(results), MIN_ABS_CORRELATION, len(weekly))
    return results


def top_correlations(results: Sequence[CorrelationResult], limit: int = 5) -> List[CorrelationResult]:
    """First ``limit`` moderate/strong correlations, engine order preserved."""
    return [c for c in results if c.strength in ("strong", "moderate")][:limit]
