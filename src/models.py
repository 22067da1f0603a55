"""Data models for the spending/wellbeing impact analysis."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

Strength = Literal["weak", "moderate", "strong"]
Direction = Literal["positive", "negative"]
Confidence = Literal["low", "medium", "high"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _date_part(value):
    """datetimes and ISO timestamps (``2024-01-07T15:30:00Z``) keep their date."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


# ─── Raw inputs ────────────────────────────────────────────


class Transaction(_Frozen):
    date: dt.date
    category: str
    amount: float = Field(ge=0)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return _date_part(value)


class WellbeingEntry(_Frozen):
    """One self-reported rating set, nominally 1-10 per field."""

    date: dt.date
    overall_wellbeing: float
    stress_level: float
    sleep_quality: float
    energy_level: float
    mood: float

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return _date_part(value)


# ─── Weekly aggregates ─────────────────────────────────────


class FinancialSummary(_Frozen):
    total_spending: float = 0.0
    entertainment_spending: float = 0.0
    food_spending: float = 0.0
    shopping_spending: float = 0.0
    transport_spending: float = 0.0
    self_care_spending: float = 0.0
    savings_rate: float = 0.0
    anomaly_spending: float = 0.0


class WellbeingSummary(_Frozen):
    overall_wellbeing: float = 0.0
    stress_level: float = 0.0
    sleep_quality: float = 0.0
    energy_level: float = 0.0
    mood: float = 0.0


class WeeklyAggregate(_Frozen):
    week: str
    financial: FinancialSummary
    wellbeing: WellbeingSummary


# ─── Analysis results ──────────────────────────────────────


class CorrelationResult(_Frozen):
    financial_metric: str
    wellbeing_metric: str
    correlation: float
    strength: Strength
    direction: Direction
    significance: float  # 1 - |r|, not a p-value


class RegressionModel(_Frozen):
    """Linear model: target = intercept + sum(coef * scaled feature).

    ``p_value_approx`` is ``1 - r_squared``.  It is a monotonic heuristic,
    not a statistical p-value.
    """

    target_metric: str
    feature_names: Tuple[str, ...]
    coefficients: Tuple[float, ...]
    intercept: float
    r_squared: float
    p_value_approx: float

    def coefficient_map(self) -> Dict[str, float]:
        return dict(zip(self.feature_names, self.coefficients))


class PredictionFactor(_Frozen):
    metric: str
    impact: float
    contribution_percent: int


class PredictionResult(_Frozen):
    predicted_value: float
    confidence: Confidence
    factors: Tuple[PredictionFactor, ...] = ()


class ScenarioDefinition(_Frozen):
    name: str
    changes: Dict[str, float]


class WhatIfScenario(_Frozen):
    name: str
    financial_deltas: Dict[str, float]
    predicted_impact: Dict[str, PredictionResult]
    recommendation_text: str


# ─── Fallback report ───────────────────────────────────────


class ImpactInsight(_Frozen):
    title: str
    insight: str
    actionable_advice: List[str]
    confidence: Confidence
    priority: Literal["low", "medium", "high"]
    category: str = "spending"


class ImpactReport(_Frozen):
    summary: str
    key_insights: List[ImpactInsight]
    recommendations: List[str]
    what_if_scenarios: List[WhatIfScenario]
    next_steps: List[str]


class QuickInsight(_Frozen):
    """Single-line insight from the most recent records only."""

    insight: str
    action: str
    expected_impact: str
    timeframe: str
    confidence: Confidence
