"""Impact analysis orchestration with explicit health signaling."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from config import Settings
from constants import (
    MIN_CORRELATION_POINTS,
    QUICK_MIN_TRANSACTIONS,
    QUICK_MIN_WEEKS,
    QUICK_RECENT_TRANSACTIONS,
    QUICK_RECENT_WELLBEING,
    QUICK_TOP_CORRELATIONS,
    WELLBEING_METRICS,
)
from correlation_engine import analyze_correlations, top_correlations, wellbeing_series
from errors import DegenerateInputError, InsufficientDataError, SingularMatrixError
from models import QuickInsight, Transaction, WellbeingEntry
from pipeline.summary_builder import (
    NEED_MORE_DATA,
    NEED_MORE_WEEKS,
    build_correlation_summary,
    build_fallback_report,
    build_quick_insight,
)
from regression_engine import latest_snapshot, predict, train_models
from scenario_simulator import ScenarioInput, default_scenarios, simulate_scenarios
from weekly_aggregator import aggregate_weekly

log = logging.getLogger("impact_pipeline")


class ImpactPipeline:
    """aggregate → correlate → train → predict → simulate → summarise."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()

    def run(
        self,
        transactions: Sequence[Transaction],
        wellbeing_entries: Sequence[WellbeingEntry],
        scenarios: Optional[Sequence[ScenarioInput]] = None,
    ) -> Dict[str, Any]:
        """Run one full analysis and return results plus status metadata."""
        result: Dict[str, Any] = {
            "analysis_status": "success",
            "degraded_reasons": [],
            "weekly_data": [],
            "correlations": [],
            "top_correlations": [],
            "models": {},
            "model_failures": {},
            "predictions": {},
            "scenarios": [],
            "correlation_summary": "",
            "report": None,
            "metadata": {},
        }

        log.info("=" * 60)
        log.info("  IMPACT ANALYSIS STARTED")
        log.info("=" * 60)

        log.info("Step 1/5: Aggregating weekly data...")
        weekly = aggregate_weekly(
            transactions, wellbeing_entries,
            trailing_weeks=self.settings.anomaly_trailing_weeks,
        )
        result["weekly_data"] = weekly
        result["metadata"] = self._metadata(weekly)

        if len(weekly) < MIN_CORRELATION_POINTS:
            msg = f"Need at least {MIN_CORRELATION_POINTS} weeks of combined data, got {len(weekly)}."
            log.warning("   %s: %s", InsufficientDataError.__name__, msg)
            result["analysis_status"] = "failed"
            result["degraded_reasons"] = [InsufficientDataError.reason]
            result["correlation_summary"] = msg
            return result

        log.info("Step 2/5: Computing correlations...")
        correlations = analyze_correlations(weekly)
        strongest = top_correlations(correlations, self.settings.top_correlations)
        result["correlations"] = correlations
        result["top_correlations"] = strongest
        result["correlation_summary"] = build_correlation_summary(correlations)
        if not strongest:
            self._degrade(result, "no_correlations")
            if self._flat_wellbeing(weekly):
                log.warning("   %s: every wellbeing metric is constant", DegenerateInputError.__name__)
                self._degrade(result, DegenerateInputError.reason)

        log.info("Step 3/5: Training predictive models...")
        failures: Dict[str, List[str]] = {}
        models = train_models(weekly, strongest, failures=failures)
        result["models"] = models
        result["model_failures"] = failures
        if failures:
            for target, features in failures.items():
                log.warning("   %s for %s (%s)", SingularMatrixError.__name__, target, ", ".join(features))
            self._degrade(result, SingularMatrixError.reason)
        if not models:
            self._degrade(result, "no_models_trained")

        log.info("Step 4/5: Predicting current wellbeing...")
        baseline = latest_snapshot(weekly)
        result["predictions"] = {m: predict(model, baseline) for m, model in models.items()}

        log.info("Step 5/5: Simulating What-If scenarios...")
        what_if = simulate_scenarios(
            models, baseline,
            scenarios if scenarios is not None else default_scenarios(),
            compare_to_baseline=self.settings.compare_to_baseline,
        )
        result["scenarios"] = what_if
        result["report"] = build_fallback_report(correlations, what_if, len(weekly))

        self._print_summary(result)
        return result

    def quick_insight(
        self,
        transactions: Sequence[Transaction],
        wellbeing_entries: Sequence[WellbeingEntry],
    ) -> QuickInsight:
        """Fast insight from the last 20 transactions and last 2 wellbeing entries."""
        recent_tx = list(transactions)[-QUICK_RECENT_TRANSACTIONS:]
        recent_wb = list(wellbeing_entries)[-QUICK_RECENT_WELLBEING:]
        if len(recent_tx) < QUICK_MIN_TRANSACTIONS or len(recent_wb) < QUICK_RECENT_WELLBEING:
            log.info("Quick insight: not enough recent records")
            return NEED_MORE_DATA

        weekly = aggregate_weekly(
            recent_tx, recent_wb,
            trailing_weeks=self.settings.anomaly_trailing_weeks,
        )
        if len(weekly) < QUICK_MIN_WEEKS:
            log.info("Quick insight: %d week(s) of combined data", len(weekly))
            return NEED_MORE_WEEKS

        top = top_correlations(analyze_correlations(weekly), QUICK_TOP_CORRELATIONS)
        return build_quick_insight(top)

    @staticmethod
    def _flat_wellbeing(weekly) -> bool:
        return all(len(set(wellbeing_series(weekly, m))) == 1 for m in WELLBEING_METRICS)

    @staticmethod
    def _degrade(result: Dict[str, Any], reason: str) -> None:
        if result["analysis_status"] != "failed":
            result["analysis_status"] = "degraded"
        if reason not in result["degraded_reasons"]:
            result["degraded_reasons"].append(reason)

    @staticmethod
    def _metadata(weekly) -> Dict[str, Any]:
        return {
            "analysis_date": datetime.now(timezone.utc).isoformat(),
            "data_points": len(weekly),
            "time_range": {
                "start": weekly[0].week if weekly else None,
                "end": weekly[-1].week if weekly else None,
            },
        }

    @staticmethod
    def overall_status(status: Dict[str, Any]) -> str:
        if status.get("analysis_status") == "failed":
            return "failed"
        if status.get("analysis_status") == "degraded" or status.get("degraded_reasons"):
            return "degraded"
        return "success"

    def _print_summary(self, result: Dict[str, Any]) -> None:
        meta = result["metadata"]
        log.info("ANALYSIS SUMMARY:")
        log.info("  Weeks:         %d (%s -> %s)", meta["data_points"],
                 meta["time_range"]["start"], meta["time_range"]["end"])
        log.info("  Correlations:  %d (%d moderate/strong)",
                 len(result["correlations"]), len(result["top_correlations"]))
        log.info("  Models:        %s", ", ".join(result["models"]) or "none")
        log.info("  Scenarios:     %d", len(result["scenarios"]))
        reasons = result["degraded_reasons"]
        if reasons:
            log.info("  Degraded reasons: %s", ", ".join(reasons))
        log.info("  Overall status: %s", self.overall_status(result))
