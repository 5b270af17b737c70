"""
advisor/constants.py
--------------------
Presentation constants shared across modules.

Placing these here keeps the formatting layer (ResponseGenerator) and the
interpretation layers (AllocationTable, RecommendationEngine) aligned on a
single source of truth without creating circular imports.
"""

from __future__ import annotations

from advisor.enums import RiskLevel


# ---------------------------------------------------------------------------
# Risk tolerance → display label
# ---------------------------------------------------------------------------

RISK_TOLERANCE_LABELS: dict[int, str] = {
    1:  "Very low risk",
    2:  "Low risk",
    3:  "Lower risk",
    4:  "Moderately low risk",
    5:  "Moderate risk",
    6:  "Moderately high risk",
    7:  "Higher risk",
    8:  "High risk",
    9:  "Very high risk",
    10: "Aggressive",
}


# ---------------------------------------------------------------------------
# Annualised volatility → risk band
# ---------------------------------------------------------------------------
# Ordered (upper bound, level) pairs; the first bound the volatility falls
# below wins.  Anything above the last bound is VERY_HIGH.

RISK_LEVEL_BANDS: tuple = (
    (0.15, RiskLevel.LOW),
    (0.25, RiskLevel.MEDIUM),
    (0.35, RiskLevel.HIGH),
)


# ---------------------------------------------------------------------------
# Metric registry
# ---------------------------------------------------------------------------
# Each entry drives ResponseGenerator formatting.  Keys must exactly match
# the field names of PerformanceMetrics.  Values in PerformanceMetrics are
# already scaled (percentages are stored ×100), so no scale is applied here.
# ---------------------------------------------------------------------------

METRIC_REGISTRY: dict[str, dict] = {
    "total_return": {
        "display":          "Total Return",
        "unit":             "%",
        "decimals":         2,
    },
    "annualized_return": {
        "display":          "Annualized Return",
        "unit":             "%",
        "decimals":         2,
    },
    "volatility": {
        "display":          "Volatility",
        "unit":             "%",
        "decimals":         1,
    },
    "sharpe_ratio": {
        "display":          "Sharpe",
        "unit":             "",
        "decimals":         2,
    },
    "sortino_ratio": {
        "display":          "Sortino",
        "unit":             "",
        "decimals":         2,
    },
    "max_drawdown": {
        "display":          "Max Drawdown",
        "unit":             "%",
        "decimals":         2,
    },
    "win_rate": {
        "display":          "Win Rate",
        "unit":             "%",
        "decimals":         1,
    },
}


# ---------------------------------------------------------------------------
# Known company names for the allocation table
# ---------------------------------------------------------------------------

COMPANY_NAMES: dict[str, str] = {
    "AAPL":  "Apple Inc.",
    "GOOGL": "Alphabet Inc.",
    "MSFT":  "Microsoft Corp.",
    "TSLA":  "Tesla Inc.",
    "AMZN":  "Amazon.com Inc.",
    "NVDA":  "NVIDIA Corp.",
    "META":  "Meta Platforms Inc.",
    "BRK.B": "Berkshire Hathaway",
    "V":     "Visa Inc.",
    "JPM":   "JPMorgan Chase",
    "UNH":   "UnitedHealth Group",
    "HD":    "Home Depot",
    "PG":    "Procter & Gamble",
    "MA":    "Mastercard Inc.",
    "BAC":   "Bank of America",
}

UNKNOWN_COMPANY: str = "Unknown company"
