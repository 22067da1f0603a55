"""
Tests for model training, prediction and factor attribution.
"""
import pytest
from pydantic import ValidationError

from errors import SingularMatrixError
from models import (
    CorrelationResult,
    FinancialSummary,
    RegressionModel,
    WeeklyAggregate,
    WellbeingSummary,
)
from regression_engine import (
    latest_snapshot,
    predict,
    scale_feature,
    select_features,
    train_model,
    train_models,
)


def _weeks(food, overall=None, stress=None, **fin_series):
    n = len(food)
    overall = overall or [5.0] * n
    stress = stress or [5.0] * n
    out = []
    for i in range(n):
        extra = {k: v[i] for k, v in fin_series.items()}
        extra.setdefault("total_spending", food[i])
        out.append(WeeklyAggregate(
            week=f"2024-W{i + 2:02d}",
            financial=FinancialSummary(food_spending=food[i], **extra),
            wellbeing=WellbeingSummary(
                overall_wellbeing=overall[i], stress_level=stress[i],
                sleep_quality=5, energy_level=5, mood=5,
            ),
        ))
    return out


def _sig(fin, wb="overall_wellbeing", r=-0.9):
    return CorrelationResult(
        financial_metric=fin, wellbeing_metric=wb, correlation=r,
        strength="strong", direction="positive" if r > 0 else "negative",
        significance=round(1 - abs(r), 3),
    )


# ─── Feature handling ───────────────────────────────────────


class TestFeatures:

    def test_scaling(self):
        assert scale_feature("savings_rate", 50) == pytest.approx(0.5)
        assert scale_feature("food_spending", 250) == pytest.approx(0.25)

    def test_select_in_order_capped_at_two(self):
        sig = [_sig("shopping_spending"), _sig("food_spending", wb="mood"),
               _sig("food_spending"), _sig("total_spending")]
        assert select_features("overall_wellbeing", sig) == ["shopping_spending", "food_spending"]

    def test_select_none_for_other_target(self):
        assert select_features("sleep_quality", [_sig("food_spending")]) == []


# ─── Training ───────────────────────────────────────────────


class TestTrainModel:

    def test_recovers_exact_linear_relationship(self):
        weeks = _weeks([100, 200, 300, 400], overall=[2, 4, 6, 8])
        model = train_model(weeks, "overall_wellbeing", [_sig("food_spending", r=1.0)])
        assert model is not None
        assert model.feature_names == ("food_spending",)
        assert model.coefficients[0] == pytest.approx(20.0)
        assert model.intercept == pytest.approx(0.0, abs=1e-9)
        assert model.r_squared == 1.0
        assert model.p_value_approx == 0.0

    def test_four_weeks_one_feature_gives_bounded_r2(self):
        weeks = _weeks([100, 200, 300, 400], overall=[3, 4, 7, 7])
        model = train_model(weeks, "overall_wellbeing", [_sig("food_spending", r=0.9)])
        assert model is not None
        assert 0 <= model.r_squared <= 1
        assert model.p_value_approx == pytest.approx(round(1 - model.r_squared, 3), abs=1e-3)

    def test_stress_target_is_inverted(self):
        weeks = _weeks([100, 200, 300, 400], stress=[9, 7, 5, 3])
        model = train_model(weeks, "stress_level", [_sig("food_spending", wb="stress_level")])
        # inverted target: 2, 4, 6, 8
        assert model.coefficients[0] == pytest.approx(20.0)

    def test_savings_rate_feature_scaled_by_100(self):
        weeks = _weeks([100, 100, 100], overall=[2, 3, 4], savings_rate=[10, 20, 30])
        model = train_model(weeks, "overall_wellbeing", [_sig("savings_rate", r=1.0)])
        # y = 1 + 10 * (rate / 100)
        assert model.coefficients[0] == pytest.approx(10.0)
        assert model.intercept == pytest.approx(1.0)

    def test_too_few_rows_returns_none(self):
        weeks = _weeks([100], overall=[5])
        assert train_model(weeks, "overall_wellbeing", [_sig("food_spending")]) is None

    def test_two_features_need_three_rows(self):
        weeks = _weeks([100, 200], overall=[5, 6], entertainment_spending=[10, 40])
        sig = [_sig("food_spending"), _sig("entertainment_spending")]
        assert train_model(weeks, "overall_wellbeing", sig) is None

    def test_no_matching_features_returns_none(self):
        weeks = _weeks([100, 200, 300], overall=[5, 6, 7])
        assert train_model(weeks, "overall_wellbeing", [_sig("food_spending", wb="mood")]) is None

    def test_caps_features_at_two(self):
        weeks = _weeks(
            [100, 200, 300, 400, 500], overall=[3, 5, 4, 8, 7],
            entertainment_spending=[50, 20, 80, 10, 40],
            shopping_spending=[5, 9, 1, 7, 3],
        )
        sig = [_sig("food_spending"), _sig("entertainment_spending"), _sig("shopping_spending")]
        model = train_model(weeks, "overall_wellbeing", sig)
        assert model.feature_names == ("food_spending", "entertainment_spending")
        assert len(model.coefficients) == 2

    def test_collinear_features_raise_singular(self):
        # total_spending == food_spending every week
        weeks = _weeks([100, 200, 300, 400], overall=[3, 5, 4, 8])
        sig = [_sig("food_spending"), _sig("total_spending")]
        with pytest.raises(SingularMatrixError):
            train_model(weeks, "overall_wellbeing", sig)

    def test_constant_target_gives_zero_r2(self):
        weeks = _weeks([100, 200, 300], overall=[5, 5, 5])
        model = train_model(weeks, "overall_wellbeing", [_sig("food_spending")])
        assert model.r_squared == 0
        assert model.p_value_approx == 1.0

    def test_unknown_target_raises(self):
        with pytest.raises(ValueError):
            train_model(_weeks([1, 2, 3]), "happiness", [])

    def test_model_is_immutable(self):
        weeks = _weeks([100, 200, 300, 400], overall=[2, 4, 6, 8])
        model = train_model(weeks, "overall_wellbeing", [_sig("food_spending")])
        with pytest.raises(ValidationError):
            model.intercept = 3.0


class TestTrainModels:

    def test_trains_each_target_with_features(self):
        weeks = _weeks([100, 200, 300, 400], overall=[2, 4, 6, 8], stress=[9, 7, 5, 3])
        sig = [_sig("food_spending"), _sig("food_spending", wb="stress_level")]
        models = train_models(weeks, sig)
        assert set(models) == {"overall_wellbeing", "stress_level"}

    def test_singular_target_recorded_and_skipped(self, caplog):
        weeks = _weeks([100, 200, 300, 400], overall=[3, 5, 4, 8], stress=[9, 7, 5, 3])
        sig = [_sig("food_spending"), _sig("total_spending"),
               _sig("food_spending", wb="stress_level")]
        failures = {}
        models = train_models(weeks, sig, failures=failures)
        assert "overall_wellbeing" not in models
        assert "stress_level" in models
        assert failures == {"overall_wellbeing": ["food_spending", "total_spending"]}
        assert "Singular" in caplog.text


# ─── Prediction ─────────────────────────────────────────────


def _model(features=("food_spending", "entertainment_spending"), coefs=(10.0, -4.0),
           intercept=5.0, r2=0.8):
    return RegressionModel(
        target_metric="overall_wellbeing", feature_names=features,
        coefficients=coefs, intercept=intercept,
        r_squared=r2, p_value_approx=round(1 - r2, 3),
    )


class TestPredict:

    def test_prediction_and_attribution(self):
        result = predict(_model(), {"food_spending": 300, "entertainment_spending": 500})
        assert result.predicted_value == pytest.approx(6.0)
        assert result.confidence == "high"
        assert [f.metric for f in result.factors] == ["food_spending", "entertainment_spending"]
        assert result.factors[0].impact == pytest.approx(3.0)
        assert result.factors[1].impact == pytest.approx(-2.0)
        assert [f.contribution_percent for f in result.factors] == [60, 40]

    def test_factors_sorted_by_absolute_impact(self):
        result = predict(_model(), {"food_spending": 100, "entertainment_spending": 1000})
        assert result.factors[0].metric == "entertainment_spending"

    def test_missing_metrics_default_to_zero(self):
        result = predict(_model(), {})
        assert result.predicted_value == pytest.approx(5.0)
        assert all(f.contribution_percent == 0 for f in result.factors)

    def test_savings_rate_scaling(self):
        model = _model(features=("savings_rate",), coefs=(2.0,), intercept=1.0)
        assert predict(model, {"savings_rate": 50}).predicted_value == pytest.approx(2.0)

    @pytest.mark.parametrize("r2, expected", [
        (0.71, "high"), (0.7, "medium"), (0.41, "medium"), (0.4, "low"), (0.0, "low"),
    ])
    def test_confidence_buckets(self, r2, expected):
        assert predict(_model(r2=r2), {}).confidence == expected

    def test_round_trip_at_training_mean(self):
        food = [100, 200, 300, 400, 500]
        ent = [50, 20, 80, 10, 40]
        overall = [3, 5, 4, 8, 7]
        weeks = _weeks(food, overall=overall, entertainment_spending=ent)
        sig = [_sig("food_spending"), _sig("entertainment_spending")]
        model = train_model(weeks, "overall_wellbeing", sig)
        snapshot = {"food_spending": sum(food) / 5, "entertainment_spending": sum(ent) / 5}
        predicted = predict(model, snapshot).predicted_value
        tolerance = 1e-3 + (1 - model.r_squared) * 1e-3
        assert predicted == pytest.approx(sum(overall) / 5, abs=tolerance)

    def test_contribution_halves_round_up(self):
        model = _model(coefs=(5.0, 3.0))
        result = predict(model, {"food_spending": 1000, "entertainment_spending": 1000})
        # 62.5% / 37.5%
        assert [f.contribution_percent for f in result.factors] == [63, 38]

    def test_contribution_uses_rounded_impact(self):
        model = _model(features=("food_spending",), coefs=(1.0,))
        result = predict(model, {"food_spending": 1.4})
        # impact 0.0014 is reported as 0.001; its share of the unrounded total is 71%
        assert result.factors[0].impact == pytest.approx(0.001)
        assert result.factors[0].contribution_percent == 71


class TestLatestSnapshot:

    def test_uses_last_week(self):
        weeks = _weeks([100, 250], overall=[5, 6])
        snap = latest_snapshot(weeks)
        assert snap["food_spending"] == 250
        assert set(snap) >= {"total_spending", "savings_rate", "anomaly_spending"}

    def test_empty(self):
        assert latest_snapshot([]) == {}
