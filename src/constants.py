"""
Shared constants used across multiple modules.
Single source of truth for metric names, spending categories and labels.
"""

# Transaction category (case-sensitive, exact match) -> weekly financial field
CATEGORY_FIELDS = {
    "Entertainment": "entertainment_spending",
    "Food":          "food_spending",
    "Shopping":      "shopping_spending",
    "Transport":     "transport_spending",
    "Self-Care":     "self_care_spending",
}

FINANCIAL_METRICS = [
    "total_spending",
    "entertainment_spending",
    "food_spending",
    "shopping_spending",
    "transport_spending",
    "self_care_spending",
    "savings_rate",
    "anomaly_spending",
]

WELLBEING_METRICS = [
    "overall_wellbeing",
    "stress_level",   # inverted (11 - v) wherever it is correlated or fitted
    "sleep_quality",
    "energy_level",
    "mood",
]

# Wellbeing metrics where a lower raw rating is better
INVERTED_METRICS = {"stress_level"}
INVERSION_BASE = 11

# Placeholder income model: income = spending * multiplier
INCOME_MULTIPLIER = 1.2
ANOMALY_MULTIPLIER = 1.5

# Correlation thresholds
MIN_CORRELATION_POINTS = 3
MIN_ABS_CORRELATION = 0.1
STRONG_THRESHOLD = 0.7
MODERATE_THRESHOLD = 0.4
# Values equal to this many decimals share a rank
RANK_DECIMALS = 9

# Regression
MAX_FEATURES = 2
PERCENT_SCALE = 100.0      # savings_rate
SPENDING_SCALE = 1000.0    # every other financial feature
SINGULAR_PIVOT_EPS = 1e-10
HIGH_CONFIDENCE_R2 = 0.7
MEDIUM_CONFIDENCE_R2 = 0.4

# Scenario recommendation threshold
IMPACT_THRESHOLD = 0.5

# Quick insight: most recent records considered, and their minimums
QUICK_RECENT_TRANSACTIONS = 20
QUICK_RECENT_WELLBEING = 2
QUICK_MIN_TRANSACTIONS = 3
QUICK_MIN_WEEKS = 2
QUICK_TOP_CORRELATIONS = 2
QUICK_HIGH_CONFIDENCE = 0.6
QUICK_MEDIUM_CONFIDENCE = 0.3

FINANCIAL_LABELS = {
    "total_spending":         "Total Spending",
    "entertainment_spending": "Entertainment Spending",
    "food_spending":          "Food & Dining Spending",
    "shopping_spending":      "Shopping Spending",
    "transport_spending":     "Transportation Spending",
    "self_care_spending":     "Self-Care Spending",
    "savings_rate":           "Savings Rate",
    "anomaly_spending":       "Unusual Spending Events",
}

WELLBEING_LABELS = {
    "overall_wellbeing": "Overall Wellbeing",
    "stress_level":      "Stress Levels",
    "sleep_quality":     "Sleep Quality",
    "energy_level":      "Energy Levels",
    "mood":              "Mood",
}

# Built-in What-If scenarios: (name, {metric: delta})
DEFAULT_SCENARIOS = [
    ("Reduce Entertainment Spending", {"entertainment_spending": -100.0}),
    ("Increase Self-Care Budget",     {"self_care_spending": 50.0}),
    ("Cut Back on Dining Out",        {"food_spending": -75.0}),
    ("Boost Savings Rate",            {"savings_rate": 5.0}),
]
