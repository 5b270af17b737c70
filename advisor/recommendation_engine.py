"""
RecommendationEngine — deterministic, rule-based advisory text.

Responsibilities
----------------
* Accept a finished :class:`PortfolioAnalysis` (weights + backtest metrics).
* Produce a list of recommendations, each with a title, body text and a
  priority, ordered from most to least important.
* Never touch optimization or metric computation.

Design principles
-----------------
* **Pure interpretation** — inputs are already computed; this engine only
  reads and translates them into language.
* **Deterministic** — same analysis always produces the same advice.
* **Threshold-based** — every rule is an explicit comparison against a
  constant in :class:`_Thresholds`, so the advice is auditable.
"""

from __future__ import annotations

from typing import Dict, List

from advisor.enums import Priority
from advisor.portfolio import PortfolioAnalysis


class _Thresholds:
    SHARPE_STRONG   = 1.5    # Sharpe above this → praise
    SHARPE_WEAK     = 0.5    # Sharpe below this → rebalance advice
    DRAWDOWN_HIGH   = 25.0   # max drawdown % above this → downside warning
    CONCENTRATION   = 0.40   # single weight above this → diversify
    TARGET_MAX      = 30.0   # suggested single-position ceiling (%)
    VOLATILITY_HIGH = 25.0   # annualised volatility % above this
    CONSERVATIVE    = 3      # risk tolerance at or below this
    AGGRESSIVE      = 8      # risk tolerance at or above this
    WIN_RATE_LOW    = 45.0   # win rate % below this


class RecommendationEngine:
    """
    Generates advisory recommendations for an analyzed portfolio.

    All public methods are static — the engine has no mutable state.

    Output schema
    -------------
    ::

        [
            {"title": str, "content": str, "priority": Priority},
            ...
        ]
    """

    @staticmethod
    def recommend(analysis: PortfolioAnalysis) -> List[Dict]:
        """Return all triggered recommendations, highest priority first."""
        recommendations: List[Dict] = []
        recommendations += RecommendationEngine._sharpe(analysis)
        recommendations += RecommendationEngine._drawdown(analysis)
        recommendations += RecommendationEngine._concentration(analysis)
        recommendations += RecommendationEngine._volatility(analysis)
        recommendations += RecommendationEngine._risk_profile(analysis)
        recommendations += RecommendationEngine._win_rate(analysis)

        # Stable sort keeps rule order within one priority
        recommendations.sort(key=lambda r: r["priority"].value, reverse=True)
        return recommendations

    # ------------------------------------------------------------------ #
    #  Rules
    # ------------------------------------------------------------------ #

    @staticmethod
    def _sharpe(analysis: PortfolioAnalysis) -> List[Dict]:
        sharpe = analysis.metrics.sharpe_ratio
        if sharpe > _Thresholds.SHARPE_STRONG:
            return [_item(
                "Excellent risk-adjusted return",
                f"Your portfolio's Sharpe ratio is {sharpe:.2f}: each unit of risk "
                f"earned {sharpe:.2f} units of excess return. Keeping the current "
                "allocation is reasonable.",
                Priority.HIGH,
            )]
        if sharpe < _Thresholds.SHARPE_WEAK:
            return [_item(
                "Improve the risk/return trade-off",
                f"The Sharpe ratio is {sharpe:.2f}, which is relatively low. Consider "
                "shifting weight toward higher-quality holdings or adding some "
                "defensive assets.",
                Priority.MEDIUM,
            )]
        return []

    @staticmethod
    def _drawdown(analysis: PortfolioAnalysis) -> List[Dict]:
        mdd = analysis.metrics.max_drawdown
        if mdd <= _Thresholds.DRAWDOWN_HIGH:
            return []
        return [_item(
            "Protect against downside risk",
            f"Maximum drawdown reached {mdd:.1f}%. Adding defensive assets such as "
            "high-grade bond ETFs or low-volatility stocks would reduce overall risk.",
            Priority.HIGH,
        )]

    @staticmethod
    def _concentration(analysis: PortfolioAnalysis) -> List[Dict]:
        top_weight = max(analysis.weights)
        if top_weight <= _Thresholds.CONCENTRATION:
            return []
        symbol = analysis.symbols[analysis.weights.index(top_weight)]
        return [_item(
            "Reduce allocation concentration",
            f"{symbol} makes up {top_weight * 100:.1f}% of the portfolio. Keeping any "
            f"single holding under {_Thresholds.TARGET_MAX:.0f}% spreads "
            "company-specific risk.",
            Priority.MEDIUM,
        )]

    @staticmethod
    def _volatility(analysis: PortfolioAnalysis) -> List[Dict]:
        vol = analysis.metrics.volatility
        if vol <= _Thresholds.VOLATILITY_HIGH:
            return []
        return [_item(
            "Manage portfolio volatility",
            f"Annualized volatility is {vol:.1f}%, which is on the high side. Large "
            "caps or utilities can steady the portfolio if you want smoother returns.",
            Priority.LOW,
        )]

    @staticmethod
    def _risk_profile(analysis: PortfolioAnalysis) -> List[Dict]:
        tolerance = analysis.risk_tolerance
        if tolerance <= _Thresholds.CONSERVATIVE:
            return [_item(
                "Conservative strategy",
                "Given your low risk tolerance, consider regular fixed-amount "
                "investing focused on blue chips with steady dividends, plus a "
                "10-20% bond ETF sleeve to dampen volatility.",
                Priority.HIGH,
            )]
        if tolerance >= _Thresholds.AGGRESSIVE:
            return [_item(
                "Growth strategy",
                "Your high risk tolerance suits a growth-oriented strategy. Technology "
                "and emerging sectors can carry more weight, but set stop-losses and "
                "watch the trend closely.",
                Priority.HIGH,
            )]
        return []

    @staticmethod
    def _win_rate(analysis: PortfolioAnalysis) -> List[Dict]:
        win_rate = analysis.metrics.win_rate
        if win_rate >= _Thresholds.WIN_RATE_LOW:
            return []
        return [_item(
            "Raise the win rate",
            f"Only {win_rate:.1f}% of trading days were positive. Technical or "
            "fundamental screens could improve entry decisions.",
            Priority.MEDIUM,
        )]


def _item(title: str, content: str, priority: Priority) -> Dict:
    return {"title": title, "content": content, "priority": priority}
