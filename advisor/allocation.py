"""
advisor/allocation.py
---------------------
Turns an optimized weight vector into a capital allocation table.

Design contract:
  - Does NOT optimize weights
  - Does NOT mutate its inputs
  - Fully stateless (all methods are @staticmethod)
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence

from advisor.constants import COMPANY_NAMES, RISK_LEVEL_BANDS, UNKNOWN_COMPANY
from advisor.enums import RiskLevel
from advisor.errors import DimensionMismatch, ValidationError
from advisor.return_series import ReturnSeries


class AllocationTable:
    """
    Build per-symbol allocation rows for display.

    Each row::

        {
            "symbol":          str,
            "company":         str,
            "weight":          float,       # decimal, sums to 1
            "capital_amount":  float,       # currency, sums to investment
            "expected_return": float,       # annualised decimal
            "volatility":      float,       # annualised decimal
            "risk_level":      RiskLevel,
        }
    """

    @staticmethod
    def build(
        series: Sequence[ReturnSeries],
        weights: Sequence[float],
        investment: float,
    ) -> List[Dict]:
        """
        Combine series statistics, weights and capital into table rows.

        Raises
        ------
        ValidationError
            If *investment* is not positive.
        DimensionMismatch
            If *series* and *weights* differ in length.
        """
        if len(series) != len(weights):
            raise DimensionMismatch(
                f"{len(series)} return series but {len(weights)} weights."
            )

        rows = []
        for s, w in zip(series, weights):
            rows.append({
                "symbol":          s.symbol,
                "company":         COMPANY_NAMES.get(s.symbol, UNKNOWN_COMPANY),
                "weight":          float(w),
                "expected_return": s.expected_return,
                "volatility":      s.volatility,
                "risk_level":      AllocationTable.risk_level(s.volatility),
            })

        return AllocationTable.allocate_capital(rows, investment)

    @staticmethod
    def allocate_capital(rows: List[Dict], investment: float) -> List[Dict]:
        """
        Add ``"capital_amount"`` to copies of *rows*.

        Uses **remainder absorption** — every row except the last is
        rounded to 2 dp; the final row receives ``investment − sum_of_rest``
        so the amounts always sum exactly to *investment*.
        """
        if not (isinstance(investment, (int, float)) and math.isfinite(investment)) \
                or investment <= 0:
            raise ValidationError(
                f"Investment amount must be a positive number, got {investment!r}."
            )

        output = [dict(r) for r in rows]
        if not output:
            return output

        distributed = 0.0
        for row in output[:-1]:
            amount = round(investment * row["weight"], 2)
            row["capital_amount"] = amount
            distributed += amount

        output[-1]["capital_amount"] = round(investment - distributed, 2)
        return output

    @staticmethod
    def risk_level(volatility: float) -> RiskLevel:
        """Map annualised volatility onto a qualitative risk band."""
        for upper, level in RISK_LEVEL_BANDS:
            if volatility < upper:
                return level
        return RiskLevel.VERY_HIGH

    # ------------------------------------------------------------------ #
    #  Ex-ante portfolio statistics
    # ------------------------------------------------------------------ #

    @staticmethod
    def portfolio_expected_return(
        weights: Sequence[float],
        expected_returns: Sequence[float],
    ) -> float:
        """Weighted expected return ``Σ wᵢ μᵢ``."""
        if len(weights) != len(expected_returns):
            raise DimensionMismatch(
                f"{len(weights)} weights but {len(expected_returns)} expected returns."
            )
        return sum(w * mu for w, mu in zip(weights, expected_returns))

    @staticmethod
    def portfolio_volatility(weights: Sequence[float], cov) -> float:
        """
        Covariance-aware portfolio volatility.

        Formula::

            σp = √( wᵀ Σ w ) = √( Σᵢ Σⱼ wᵢ wⱼ σᵢⱼ )

        Floating-point error can produce a tiny negative variance; it is
        floored at zero.
        """
        n = len(weights)
        if len(cov) != n or any(len(cov[i]) != n for i in range(n)):
            raise DimensionMismatch(
                f"Covariance matrix must be {n}×{n} to match the weights."
            )

        variance = 0.0
        for i in range(n):
            for j in range(n):
                variance += weights[i] * weights[j] * float(cov[i][j])

        return math.sqrt(max(variance, 0.0))
