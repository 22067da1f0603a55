"""
What-If scenario simulation.

Each scenario adds signed deltas to a baseline spending snapshot and asks
every trained model for a prediction on the modified snapshot.

The recommendation classifies each wellbeing metric by its PREDICTED VALUE
(> 0.5 positive, < -0.5 negative).  Predictions usually sit on the 1-10
scale, so nearly every metric lands in "positive" whether or not the
scenario changed anything.  ``compare_to_baseline=True`` classifies the
difference from the unmodified baseline prediction instead.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Union

from constants import DEFAULT_SCENARIOS, IMPACT_THRESHOLD, WELLBEING_LABELS
from models import PredictionResult, RegressionModel, ScenarioDefinition, WhatIfScenario
from regression_engine import predict

log = logging.getLogger("scenario_simulator")

ScenarioInput = Union[ScenarioDefinition, Mapping]


def default_scenarios() -> List[ScenarioDefinition]:
    return [ScenarioDefinition(name=name, changes=dict(changes))
            for name, changes in DEFAULT_SCENARIOS]


def apply_deltas(baseline: Mapping[str, float], deltas: Mapping[str, float]) -> Dict[str, float]:
    """New snapshot = baseline + deltas; metrics missing from baseline start at 0."""
    snapshot = dict(baseline)
    for metric, change in deltas.items():
        snapshot[metric] = snapshot.get(metric, 0) + change
    return snapshot


def build_recommendation(name: str, impacts: Mapping[str, float]) -> str:
    positive: List[str] = []
    negative: List[str] = []
    for metric, value in impacts.items():
        label = WELLBEING_LABELS.get(metric, metric)
        if value > IMPACT_THRESHOLD:
            positive.append(f"{label} (+{value:.1f})")
        elif value < -IMPACT_THRESHOLD:
            negative.append(f"{label} ({value:.1f})")

    lines = [f"Scenario: {name}"]
    if positive:
        lines.append(f"Positive impacts: {', '.join(positive)}")
    if negative:
        lines.append(f"Negative impacts: {', '.join(negative)}")

    if len(positive) > len(negative):
        lines.append("This scenario is likely to improve your overall wellbeing!")
    elif len(negative) > len(positive):
        lines.append("This scenario may negatively impact your wellbeing. Consider alternatives.")
    else:
        lines.append("This scenario has mixed impacts. Monitor your wellbeing closely.")
    return "\n".join(lines)


def _as_definition(scenario: ScenarioInput) -> ScenarioDefinition:
    if isinstance(scenario, ScenarioDefinition):
        return scenario
    return ScenarioDefinition.model_validate(scenario)


def simulate_scenarios(
    models: Mapping[str, RegressionModel],
    baseline_snapshot: Mapping[str, float],
    scenarios: Iterable[ScenarioInput],
    *,
    compare_to_baseline: bool = False,
) -> List[WhatIfScenario]:
    baseline_predictions: Dict[str, PredictionResult] = {}
    if compare_to_baseline:
        baseline_predictions = {m: predict(model, baseline_snapshot) for m, model in models.items()}

    results: List[WhatIfScenario] = []
    for raw in scenarios:
        scenario = _as_definition(raw)
        snapshot = apply_deltas(baseline_snapshot, scenario.changes)
        predicted = {metric: predict(model, snapshot) for metric, model in models.items()}

        if compare_to_baseline:
            impacts = {
                m: p.predicted_value - baseline_predictions[m].predicted_value
                for m, p in predicted.items()
            }
        else:
            impacts = {m: p.predicted_value for m, p in predicted.items()}

        results.append(WhatIfScenario(
            name=scenario.name,
            financial_deltas=dict(scenario.changes),
            predicted_impact=predicted,
            recommendation_text=build_recommendation(scenario.name, impacts),
        ))

    log.info("   Simulated %d scenarios against %d models", len(results), len(models))
    return results
