"""
Weekly Aggregator
=================
Groups raw transactions and wellbeing entries into one observation per
calendar week.  Week keys use a simplified (non ISO-8601) numbering:

    week = ceil((day_of_year + weekday_of_jan1 + 1) / 7)     weekday: 0 = Sunday

The same key joins the financial and wellbeing sides, so it must stay
stable; do not swap it for ``date.isocalendar()``.

Derived fields:
  • savings_rate     : placeholder income model (spending × 1.2), ≈16.67%
                       for every week.  Not informative without real income.
  • anomaly_spending : excess over 1.5× the trailing-N-week mean spending.
                       ``trailing_weeks=0`` keeps the self-referential
                       placeholder, which is always 0.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from constants import (
    ANOMALY_MULTIPLIER,
    CATEGORY_FIELDS,
    INCOME_MULTIPLIER,
)
from models import (
    FinancialSummary,
    Transaction,
    WeeklyAggregate,
    WellbeingEntry,
    WellbeingSummary,
)

log = logging.getLogger("weekly_aggregator")

DEFAULT_TRAILING_WEEKS = 4

DateLike = Union[dt.date, dt.datetime, str]


def _to_date(value: DateLike) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value)[:10])


def week_key(value: DateLike) -> str:
    """Return the ``YYYY-Www`` key for a date."""
    d = _to_date(value)
    jan1 = dt.date(d.year, 1, 1)
    day_of_year = (d - jan1).days
    first_weekday = (jan1.weekday() + 1) % 7  # Python: Monday=0 -> Sunday=0
    week_number = math.ceil((day_of_year + first_weekday + 1) / 7)
    return f"{d.year}-W{week_number:02d}"


def _savings_rate(total: float) -> float:
    estimated_income = total * INCOME_MULTIPLIER
    if estimated_income <= 0:
        return 0.0
    return (estimated_income - total) / estimated_income * 100


def _anomaly_series(totals: pd.Series, trailing_weeks: int) -> pd.Series:
    """Excess spend over ``1.5 × mean(previous N weeks)`` per week."""
    if trailing_weeks <= 0:
        threshold = totals * ANOMALY_MULTIPLIER
        return (totals - threshold).where(totals > threshold, 0.0)

    baseline = totals.shift(1).rolling(trailing_weeks, min_periods=1).mean()
    threshold = baseline * ANOMALY_MULTIPLIER
    excess = (totals - threshold).where(totals > threshold, 0.0)
    # First week has no history to compare with
    return excess.fillna(0.0)


def aggregate_weekly(
    transactions: Iterable[Transaction],
    wellbeing_entries: Iterable[WellbeingEntry],
    *,
    trailing_weeks: Optional[int] = None,
) -> List[WeeklyAggregate]:
    """Build chronologically ordered weekly aggregates.

    Only weeks where both sources contributed (``overall_wellbeing > 0`` and
    ``total_spending > 0``) are returned.
    """
    if trailing_weeks is None:
        trailing_weeks = DEFAULT_TRAILING_WEEKS

    spending: Dict[str, Dict[str, float]] = {}
    for tx in transactions:
        key = week_key(tx.date)
        week = spending.setdefault(
            key, {"total_spending": 0.0, **{f: 0.0 for f in CATEGORY_FIELDS.values()}}
        )
        week["total_spending"] += tx.amount
        field = CATEGORY_FIELDS.get(tx.category)
        if field:
            week[field] += tx.amount

    wellbeing: Dict[str, WellbeingSummary] = {}
    dropped = 0
    for entry in wellbeing_entries:
        key = week_key(entry.date)
        if key not in spending:
            dropped += 1
            continue
        # Last entry for a week wins
        wellbeing[key] = WellbeingSummary(
            overall_wellbeing=entry.overall_wellbeing,
            stress_level=entry.stress_level,
            sleep_quality=entry.sleep_quality,
            energy_level=entry.energy_level,
            mood=entry.mood,
        )
    if dropped:
        log.debug("Dropped %d wellbeing entries with no spending in their week", dropped)

    if not spending:
        return []

    frame = pd.DataFrame.from_dict(spending, orient="index").sort_index()
    frame["savings_rate"] = frame["total_spending"].apply(_savings_rate)
    frame["anomaly_spending"] = _anomaly_series(frame["total_spending"], trailing_weeks)

    result: List[WeeklyAggregate] = []
    for key, row in frame.iterrows():
        summary = wellbeing.get(key, WellbeingSummary())
        financial = FinancialSummary(**{k: float(v) for k, v in row.items()})
        if summary.overall_wellbeing <= 0 or financial.total_spending <= 0:
            continue
        result.append(WeeklyAggregate(week=key, financial=financial, wellbeing=summary))

    log.info("Aggregated %d weeks (%d with wellbeing data)", len(frame), len(result))
    return result
