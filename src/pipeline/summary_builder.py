"""Helpers for building deterministic insight text from analysis results."""

from __future__ import annotations

from typing import List, Sequence

from constants import (
    FINANCIAL_LABELS,
    QUICK_HIGH_CONFIDENCE,
    QUICK_MEDIUM_CONFIDENCE,
    WELLBEING_LABELS,
)
from correlation_engine import top_correlations
from models import CorrelationResult, ImpactInsight, ImpactReport, QuickInsight, WhatIfScenario

NO_CORRELATIONS_TEXT = "No significant correlations found between financial and wellbeing metrics."

FALLBACK_RECOMMENDATIONS = [
    "Track your spending patterns weekly",
    "Monitor your wellbeing metrics daily",
    "Look for patterns between spending and mood",
    "Set spending limits for categories that negatively impact your wellbeing",
    "Increase spending in categories that positively impact your wellbeing",
]

FALLBACK_NEXT_STEPS = [
    "Set up weekly reviews of your financial-wellbeing connection",
    "Focus on the strongest correlations in your data",
    "Experiment with different spending patterns to see their impact",
    "Continue collecting data for better insights over time",
]


def financial_metric_label(metric: str) -> str:
    return FINANCIAL_LABELS.get(metric, metric)


def wellbeing_metric_label(metric: str) -> str:
    return WELLBEING_LABELS.get(metric, metric)


def _verb(corr: CorrelationResult) -> str:
    return "increases" if corr.direction == "positive" else "decreases"


def build_correlation_summary(correlations: Sequence[CorrelationResult], limit: int = 3) -> str:
    """Numbered list of the strongest moderate/strong correlations."""
    strongest = top_correlations(correlations, limit)
    if not strongest:
        return NO_CORRELATIONS_TEXT

    lines = ["Key Financial-Wellbeing Correlations Found:", ""]
    for i, corr in enumerate(strongest, start=1):
        lines.append(
            f"{i}. {financial_metric_label(corr.financial_metric)} {_verb(corr)} "
            f"{wellbeing_metric_label(corr.wellbeing_metric)} "
            f"(correlation: {corr.correlation}, strength: {corr.strength})"
        )
    return "\n".join(lines)


def _insight(corr: CorrelationResult) -> ImpactInsight:
    fin = financial_metric_label(corr.financial_metric)
    wb = wellbeing_metric_label(corr.wellbeing_metric)
    level = "high" if corr.strength == "strong" else "medium"
    return ImpactInsight(
        title=f"{fin} Affects {wb}",
        insight=(
            f"{fin} has a {corr.strength} {corr.direction} correlation with {wb} "
            f"({corr.correlation:.3f}). Changes in this spending move together with your wellbeing."
        ),
        actionable_advice=[
            f"Monitor your {fin} weekly",
            f"Track how it affects your {wb}",
            "Consider adjusting your spending if needed",
        ],
        confidence=level,
        priority=level,
    )


def build_fallback_report(
    correlations: Sequence[CorrelationResult],
    scenarios: Sequence[WhatIfScenario],
    data_points: int,
) -> ImpactReport:
    """Report assembled from the numbers alone, without a language model."""
    strong = [c for c in correlations if c.strength == "strong"]

    summary = (
        f"Your financial-wellbeing analysis of {data_points} weeks "
        f"found {len(strong)} strong correlations. "
    )
    if strong:
        top = strong[0]
        summary += (
            f"{financial_metric_label(top.financial_metric)} {_verb(top)} your "
            f"{wellbeing_metric_label(top.wellbeing_metric)}, which could help you "
            f"make more informed financial decisions."
        )
    else:
        summary += "Continue tracking your data to identify patterns between your spending and wellbeing."

    insights: List[ImpactInsight] = [_insight(c) for c in strong[:3]]
    return ImpactReport(
        summary=summary,
        key_insights=insights,
        recommendations=list(FALLBACK_RECOMMENDATIONS),
        what_if_scenarios=list(scenarios[:3]),
        next_steps=list(FALLBACK_NEXT_STEPS),
    )


# ─── Quick insight ──────────────────────────────────────────

NEED_MORE_DATA = QuickInsight(
    insight="Need more data for analysis. Please add more transactions and wellbeing records.",
    action="Continue logging your spending and mood for better insights.",
    expected_impact="More data will enable personalized recommendations.",
    timeframe="1-2 weeks",
    confidence="low",
)

NEED_MORE_WEEKS = QuickInsight(
    insight="Insufficient weekly data for correlation analysis.",
    action="Continue logging data for at least 2-3 weeks.",
    expected_impact="Weekly patterns will emerge with more data.",
    timeframe="2-3 weeks",
    confidence="low",
)


def quick_insight_confidence(correlations: Sequence[CorrelationResult]) -> str:
    """Bucket the mean |r|: > 0.6 high, > 0.3 medium, else low."""
    if not correlations:
        return "low"
    mean_abs = sum(abs(c.correlation) for c in correlations) / len(correlations)
    if mean_abs > QUICK_HIGH_CONFIDENCE:
        return "high"
    if mean_abs > QUICK_MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def build_quick_insight(top: Sequence[CorrelationResult]) -> QuickInsight:
    """Insight about the strongest recent correlation, if there is one."""
    confidence = quick_insight_confidence(top)
    if not top:
        return QuickInsight(
            insight=(
                "Your spending and wellbeing data shows some interesting patterns, "
                "but no strong correlations were found yet."
            ),
            action="Continue logging your spending and mood to identify patterns over time.",
            expected_impact="More data will enable personalized recommendations.",
            timeframe="1-2 weeks",
            confidence=confidence,
        )

    corr = top[0]
    fin = financial_metric_label(corr.financial_metric)
    wb = wellbeing_metric_label(corr.wellbeing_metric)
    return QuickInsight(
        insight=(
            f"Your {fin} has a {corr.strength} {corr.direction} correlation with {wb} "
            f"({corr.correlation:.3f}). This means changes in your spending directly "
            f"impact your wellbeing."
        ),
        action=(
            f"Monitor your {fin} and track how it affects your {wb}. "
            f"Consider adjusting your spending if needed."
        ),
        expected_impact=(
            "Understanding this connection can help you make more informed financial "
            "decisions that support your wellbeing."
        ),
        timeframe="1-2 weeks",
        confidence=confidence,
    )
