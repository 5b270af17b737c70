from __future__ import annotations

from typing import Dict, List

from advisor.allocation import AllocationTable
from advisor.constants import METRIC_REGISTRY, RISK_TOLERANCE_LABELS
from advisor.portfolio import PortfolioAnalysis
from advisor.recommendation_engine import RecommendationEngine


class ResponseGenerator:
    """
    Builds human-readable CLI output for one analysis.

    **Formatting-only** — all computation is delegated to
    :class:`AllocationTable` and :class:`RecommendationEngine`.
    """

    def report(self, analysis: PortfolioAnalysis, investment: float) -> str:
        """Full report: header, allocation table, metrics, recommendations."""
        rows = AllocationTable.build(analysis.series, analysis.weights, investment)
        sections = [
            self.header(analysis, investment),
            self.allocation_table(rows),
            self.ex_ante_summary(analysis),
            self.metrics_block(analysis),
            self.recommendations(RecommendationEngine.recommend(analysis)),
        ]
        return "\n\n".join(sections)

    def header(self, analysis: PortfolioAnalysis, investment: float) -> str:
        label = RISK_TOLERANCE_LABELS.get(analysis.risk_tolerance, "")
        lines = [
            f"Portfolio analysis for {', '.join(analysis.symbols)}",
            f"Risk tolerance: {analysis.risk_tolerance}/10 ({label})",
            f"Investment: {investment:,.0f}",
        ]
        if analysis.uses_simulated_data:
            simulated = [s.symbol for s in analysis.series if s.is_simulated]
            lines.append(f"Note: simulated data used for {', '.join(simulated)}")
        return "\n".join(lines)

    def allocation_table(self, rows: List[Dict]) -> str:
        """Fixed-width table: Symbol | Company | Weight | Amount | Exp. Return | Risk."""
        lines = [
            f"{'Symbol':<8}{'Company':<22}{'Weight':>8}{'Amount':>14}"
            f"{'Exp. Return':>13}  Risk"
        ]
        for row in rows:
            lines.append(
                f"{row['symbol']:<8}{row['company'][:21]:<22}"
                f"{row['weight'] * 100:>7.1f}%"
                f"{row['capital_amount']:>14,.0f}"
                f"{row['expected_return'] * 100:>12.1f}%"
                f"  {row['risk_level'].value}"
            )
        return "\n".join(lines)

    def ex_ante_summary(self, analysis: PortfolioAnalysis) -> str:
        exp_return = AllocationTable.portfolio_expected_return(
            analysis.weights, [s.expected_return for s in analysis.series]
        )
        vol = AllocationTable.portfolio_volatility(analysis.weights, analysis.covariance)
        return (
            f"Expected annual return: {exp_return * 100:.2f}%   "
            f"Expected volatility: {vol * 100:.2f}%"
        )

    def metrics_block(self, analysis: PortfolioAnalysis) -> str:
        """One line per metric, formatted via METRIC_REGISTRY."""
        values = analysis.metrics.as_dict()
        lines = [f"Backtest ({len(analysis.portfolio_returns)} trading days)"]
        for key, meta in METRIC_REGISTRY.items():
            value = values[key]
            if key == "max_drawdown" and value > 0:
                value = -value
            text = f"{value:.{meta['decimals']}f}{meta['unit']}"
            if key == "total_return" and value > 0:
                text = "+" + text
            lines.append(f"  {meta['display']:<18}{text:>10}")
        return "\n".join(lines)

    def recommendations(self, recommendations: List[Dict]) -> str:
        if not recommendations:
            return "Recommendations\n  No specific adjustments suggested."
        lines = ["Recommendations"]
        for rec in recommendations:
            lines.append(f"  [{rec['priority'].name}] {rec['title']}")
            lines.append(f"      {rec['content']}")
        return "\n".join(lines)
