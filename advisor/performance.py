from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Sequence

import numpy as np

from advisor.config import RISK_FREE_RATE, TRADING_DAYS
from advisor.errors import DimensionMismatch, InsufficientData, ValidationError


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Summary statistics of one backtest.

    ``total_return``, ``annualized_return``, ``volatility``,
    ``max_drawdown`` and ``win_rate`` are percentages (``25.0`` = 25%);
    ``sharpe_ratio`` and ``sortino_ratio`` are plain ratios.
    """

    total_return: float
    annualized_return: float
    volatility: float
    sharpe_ratio: float
    sortino_ratio: float
    max_drawdown: float
    win_rate: float

    def as_dict(self) -> dict:
        return asdict(self)


class PerformanceAnalyzer:
    """
    Computes performance metrics from a daily portfolio return path.

    Only static methods are exposed — no shared state.  Ratios fall back to
    ``0.0`` when their denominator is zero; empty inputs raise
    :class:`InsufficientData` instead of producing NaN.
    """

    # ------------------------------------------------------------------
    # Convenience: compute all metrics at once
    # ------------------------------------------------------------------

    @staticmethod
    def analyze(
        portfolio_returns: Sequence[float],
        value_path: Sequence[float],
        risk_free_rate: float = RISK_FREE_RATE,
    ) -> PerformanceMetrics:
        """
        Compute every metric for one backtest.

        Parameters
        ----------
        portfolio_returns:
            Daily portfolio returns (length T).
        value_path:
            Compounded values (length T + 1), ``value_path[0]`` > 0.
        risk_free_rate:
            Annual risk-free rate as a decimal.

        Raises
        ------
        InsufficientData
            Either sequence is empty.
        DimensionMismatch
            ``len(value_path) != len(portfolio_returns) + 1``.
        """
        returns = PerformanceAnalyzer._as_array(portfolio_returns, "portfolio returns")
        values = PerformanceAnalyzer._as_array(value_path, "value path")
        if values.size != returns.size + 1:
            raise DimensionMismatch(
                f"Value path has {values.size} points but {returns.size} daily "
                f"returns were given (expected {returns.size + 1})."
            )

        annualized = PerformanceAnalyzer.compute_annualized_return(returns)
        volatility = PerformanceAnalyzer.compute_volatility(returns)

        return PerformanceMetrics(
            total_return=PerformanceAnalyzer.compute_total_return(values) * 100,
            annualized_return=annualized * 100,
            volatility=volatility * 100,
            sharpe_ratio=PerformanceAnalyzer.compute_sharpe(
                annualized, volatility, risk_free_rate
            ),
            sortino_ratio=PerformanceAnalyzer.compute_sortino(returns, risk_free_rate),
            max_drawdown=PerformanceAnalyzer.compute_max_drawdown(values) * 100,
            win_rate=PerformanceAnalyzer.compute_win_rate(returns) * 100,
        )

    # ------------------------------------------------------------------
    # Metric calculators (decimals, not percentages)
    # ------------------------------------------------------------------

    @staticmethod
    def compute_total_return(value_path: Sequence[float]) -> float:
        """``last / first − 1``."""
        values = PerformanceAnalyzer._as_array(value_path, "value path")
        if values[0] <= 0:
            raise ValidationError(
                f"Value path must start at a positive value, got {values[0]}."
            )
        return float(values[-1] / values[0] - 1.0)

    @staticmethod
    def compute_annualized_return(portfolio_returns: Sequence[float]) -> float:
        """Arithmetic annualisation: ``mean(daily) × 252``."""
        returns = PerformanceAnalyzer._as_array(portfolio_returns, "portfolio returns")
        return float(returns.mean()) * TRADING_DAYS

    @staticmethod
    def compute_volatility(portfolio_returns: Sequence[float]) -> float:
        """
        Annualised volatility = √(population variance × 252).

        A constant series has volatility exactly ``0.0``.
        """
        returns = PerformanceAnalyzer._as_array(portfolio_returns, "portfolio returns")
        if np.ptp(returns) == 0.0:
            return 0.0
        return math.sqrt(float(returns.var()) * TRADING_DAYS)

    @staticmethod
    def compute_sharpe(
        annualized_return: float,
        volatility: float,
        risk_free_rate: float = RISK_FREE_RATE,
    ) -> float:
        """
        Sharpe = (annualised return − Rf) / annualised volatility.

        Returns ``0.0`` when volatility is zero.
        """
        if volatility == 0.0:
            return 0.0
        return (annualized_return - risk_free_rate) / volatility

    @staticmethod
    def compute_sortino(
        portfolio_returns: Sequence[float],
        risk_free_rate: float = RISK_FREE_RATE,
    ) -> float:
        """
        Sortino = (annualised return − Rf) / downside volatility.

        Formula::

            downside   = returns[returns < 0]
            sigma_down = sqrt( mean(downside**2) × 252 )

        Returns ``0.0`` when there are no negative days.
        """
        returns = PerformanceAnalyzer._as_array(portfolio_returns, "portfolio returns")
        downside = returns[returns < 0]
        if downside.size == 0:
            return 0.0

        downside_vol = math.sqrt(float((downside ** 2).mean()) * TRADING_DAYS)
        if downside_vol == 0.0:
            return 0.0

        annualized = PerformanceAnalyzer.compute_annualized_return(returns)
        return (annualized - risk_free_rate) / downside_vol

    @staticmethod
    def compute_max_drawdown(value_path: Sequence[float]) -> float:
        """
        Maximum peak-to-trough decline of the value path.

        Formula::

            MDD = max_t( (peak_t − value_t) / peak_t ),  peak_t = max(value_0..t)

        Returns
        -------
        float
            Positive decimal in [0, 1]; ``0.25`` means a 25% decline.
        """
        values = PerformanceAnalyzer._as_array(value_path, "value path")
        if values[0] <= 0:
            raise ValidationError(
                f"Value path must start at a positive value, got {values[0]}."
            )
        running_peak = np.maximum.accumulate(values)
        drawdowns = (running_peak - values) / running_peak
        return float(drawdowns.max())

    @staticmethod
    def compute_win_rate(portfolio_returns: Sequence[float]) -> float:
        """Fraction of days with a strictly positive return."""
        returns = PerformanceAnalyzer._as_array(portfolio_returns, "portfolio returns")
        return float(np.count_nonzero(returns > 0)) / returns.size

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _as_array(values: Sequence[float], label: str) -> np.ndarray:
        array = np.asarray(values, dtype=float)
        if array.size == 0:
            raise InsufficientData(f"Cannot compute metrics from empty {label}.")
        if not np.all(np.isfinite(array)):
            raise ValidationError(f"The {label} contain non-finite values.")
        return array
