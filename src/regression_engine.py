"""
Regression Engine
=================
Fits one small linear model per wellbeing metric from the spending metrics
that correlate with it, then predicts wellbeing for arbitrary spending
snapshots with per-feature attribution.

Model (normal equation, explicit inverse):

    X = [1, f₁/s₁, f₂/s₂]          s = 100 for savings_rate, else 1000
    β = (XᵀX)⁻¹ Xᵀy                  y = target, stress_level → 11 − y

At most two features: weekly samples are small and a third regressor makes
XᵀX badly conditioned.

R² = 1 − SS_res / SS_tot (0 when SS_tot = 0).  ``p_value_approx`` = 1 − R²
is a heuristic only and should not be read as a significance test.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from analytics.linear_algebra import invert, matmul, matvec, transpose
from analytics.rounding import percent_half_up, round_half_up
from constants import (
    FINANCIAL_METRICS,
    HIGH_CONFIDENCE_R2,
    INVERSION_BASE,
    INVERTED_METRICS,
    MAX_FEATURES,
    MEDIUM_CONFIDENCE_R2,
    PERCENT_SCALE,
    SPENDING_SCALE,
    WELLBEING_METRICS,
)
from errors import SingularMatrixError
from models import (
    CorrelationResult,
    PredictionFactor,
    PredictionResult,
    RegressionModel,
    WeeklyAggregate,
)

log = logging.getLogger("regression_engine")


def scale_feature(metric: str, value: float) -> float:
    """Same scaling at train and predict time."""
    if metric == "savings_rate":
        return value / PERCENT_SCALE
    return value / SPENDING_SCALE


def _target_value(metric: str, value: float) -> float:
    if metric in INVERTED_METRICS:
        return INVERSION_BASE - value
    return value


def _confidence(r_squared: float) -> str:
    if r_squared > HIGH_CONFIDENCE_R2:
        return "high"
    if r_squared > MEDIUM_CONFIDENCE_R2:
        return "medium"
    return "low"


def select_features(target_metric: str,
                    significant: Sequence[CorrelationResult]) -> List[str]:
    """Financial metrics paired with the target, in given order, max 2."""
    features: List[str] = []
    for corr in significant:
        if corr.wellbeing_metric != target_metric:
            continue
        if corr.financial_metric not in features:
            features.append(corr.financial_metric)
    return features[:MAX_FEATURES]


# ─── Training ───────────────────────────────────────────────


def _fit(X: np.ndarray, y: np.ndarray):
    """OLS coefficients [intercept, β₁, …] and R²."""
    design = np.column_stack([np.ones(len(y)), X])
    design_t = transpose(design)
    xtx_inv = invert(matmul(design_t, design))
    beta = matvec(xtx_inv, matvec(design_t, y))

    y_hat = design @ beta
    ss_res = float(np.sum((y - y_hat) ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r2 = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot
    return beta, r2


def train_model(
    weekly: Sequence[WeeklyAggregate],
    target_metric: str,
    significant_correlations: Sequence[CorrelationResult],
) -> Optional[RegressionModel]:
    """Train a model for ``target_metric``.

    Returns None when no significant feature is paired with the target or
    there are fewer weeks than ``features + 1``.  Raises SingularMatrixError
    when XᵀX cannot be inverted.
    """
    if target_metric not in WELLBEING_METRICS:
        raise ValueError(f"Unknown wellbeing metric: {target_metric}")

    features = select_features(target_metric, significant_correlations)
    unknown = [f for f in features if f not in FINANCIAL_METRICS]
    if unknown:
        raise ValueError(f"Unknown financial metric(s): {', '.join(unknown)}")

    if not features:
        log.info("   No significant correlations for %s, no model", target_metric)
        return None
    if len(weekly) < len(features) + 1:
        log.warning(
            "   Insufficient data for %s model (need >= %d weeks, got %d)",
            target_metric, len(features) + 1, len(weekly),
        )
        return None

    X = np.array([
        [scale_feature(f, float(getattr(w.financial, f))) for f in features]
        for w in weekly
    ], dtype=np.float64)
    y = np.array([
        _target_value(target_metric, float(getattr(w.wellbeing, target_metric)))
        for w in weekly
    ], dtype=np.float64)

    try:
        beta, r2 = _fit(X, y)
    except SingularMatrixError:
        log.warning("   Singular XᵀX for %s with features [%s]",
                    target_metric, ", ".join(features))
        raise

    model = RegressionModel(
        target_metric=target_metric,
        feature_names=tuple(features),
        coefficients=tuple(float(b) for b in beta[1:]),
        intercept=float(beta[0]),
        r_squared=round_half_up(r2, 3),
        p_value_approx=round_half_up(max(0.0, 1 - r2), 3),
    )
    log.info("   ✓ %s ~ %s  (R²=%.3f, n=%d)",
             target_metric, " + ".join(features), model.r_squared, len(weekly))
    return model


def train_models(
    weekly: Sequence[WeeklyAggregate],
    significant_correlations: Sequence[CorrelationResult],
    targets: Optional[Sequence[str]] = None,
    failures: Optional[Dict[str, List[str]]] = None,
) -> Dict[str, RegressionModel]:
    """Train one model per wellbeing metric; skip the ones that can't train.

    Targets whose XᵀX is singular are recorded in ``failures`` as
    ``{target: [features]}`` when a dict is supplied.
    """
    models: Dict[str, RegressionModel] = {}
    for target in targets or WELLBEING_METRICS:
        try:
            model = train_model(weekly, target, significant_correlations)
        except SingularMatrixError:
            if failures is not None:
                failures[target] = select_features(target, significant_correlations)
            continue
        if model is not None:
            models[target] = model
    return models


# ─── Prediction ─────────────────────────────────────────────


def predict(model: RegressionModel, financial_snapshot: Mapping[str, float]) -> PredictionResult:
    """Predict the model's target from raw (unscaled) spending metrics.

    Each factor's share is its rounded impact over the unrounded total
    impact, rounded half-up to a whole percent.
    """
    prediction = model.intercept
    total = 0.0
    impacts = []
    for metric, coefficient in zip(model.feature_names, model.coefficients):
        value = scale_feature(metric, float(financial_snapshot.get(metric, 0) or 0))
        impact = coefficient * value
        prediction += impact
        total += abs(impact)
        impacts.append((metric, round_half_up(impact, 3)))

    factors = [
        PredictionFactor(
            metric=metric,
            impact=impact,
            contribution_percent=percent_half_up(100 * abs(impact) / total) if total > 0 else 0,
        )
        for metric, impact in sorted(impacts, key=lambda t: abs(t[1]), reverse=True)
    ]

    return PredictionResult(
        predicted_value=round_half_up(prediction, 3),
        confidence=_confidence(model.r_squared),
        factors=tuple(factors),
    )


def latest_snapshot(weekly: Sequence[WeeklyAggregate]) -> Dict[str, float]:
    """Financial metrics of the most recent week, as a plain dict."""
    if not weekly:
        return {}
    return weekly[-1].financial.model_dump()
