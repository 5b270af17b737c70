"""
advisor/portfolio.py
--------------------
Single entry point of the engine: symbols + risk tolerance → weights,
backtest value path and performance metrics.

The function owns no data access.  The caller injects
``return_series_for`` (live prices, CSV history or a synthetic generator),
so the same routine serves every shell (CLI, server, notebook).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from advisor.backtest import BacktestSimulator
from advisor.config import DEFAULT_CORRELATION, RISK_FREE_RATE
from advisor.covariance import CovarianceEstimator, CovarianceMatrix
from advisor.enums import OptimizationMethod
from advisor.errors import ValidationError
from advisor.optimizer import WeightConstraints, WeightOptimizer
from advisor.performance import PerformanceAnalyzer, PerformanceMetrics
from advisor.return_series import ReturnSeries

logger = logging.getLogger(__name__)

ReturnSeriesFor = Callable[[str], ReturnSeries]


@dataclass(frozen=True)
class PortfolioAnalysis:
    """Everything one analysis request produces; request-scoped and immutable."""

    symbols: tuple
    risk_tolerance: int
    series: tuple
    covariance: CovarianceMatrix
    weights: tuple
    portfolio_returns: tuple
    value_path: tuple
    metrics: PerformanceMetrics

    def weight_of(self, symbol: str) -> float:
        """Weight assigned to *symbol* (case-insensitive)."""
        symbol = symbol.upper()
        for s, w in zip(self.symbols, self.weights):
            if s == symbol:
                return w
        raise KeyError(symbol)

    @property
    def uses_simulated_data(self) -> bool:
        return any(s.is_simulated for s in self.series)


def analyze_portfolio(
    symbols: Sequence[str],
    risk_tolerance: int,
    return_series_for: ReturnSeriesFor,
    constraints: Optional[WeightConstraints] = None,
    *,
    method: OptimizationMethod = OptimizationMethod.GRADIENT,
    correlation_fallback: float = DEFAULT_CORRELATION,
    risk_free_rate: float = RISK_FREE_RATE,
    horizon: Optional[int] = None,
) -> PortfolioAnalysis:
    """
    Optimize, backtest and score a portfolio.

    Pipeline::

        return_series_for(symbol) for each symbol
            → CovarianceEstimator.estimate
            → WeightOptimizer.optimize
            → BacktestSimulator.run
            → PerformanceAnalyzer.analyze

    Parameters
    ----------
    symbols:
        At least two distinct ticker symbols (stripped and upper-cased).
    risk_tolerance:
        Integer in [1, 10].
    return_series_for:
        Callable returning the ``ReturnSeries`` of one symbol.
    constraints:
        Optional box constraints; ``WeightConstraints()`` when omitted.
    method:
        Optimizer variant.
    correlation_fallback:
        Correlation assumed for misaligned return series.
    risk_free_rate:
        Annual hurdle used by the Sharpe and Sortino ratios.
    horizon:
        Optional trailing window (days) for the backtest.

    Raises
    ------
    ValidationError
        Bad symbols or risk tolerance, or misaligned series
        (``DimensionMismatch``).
    InsufficientData
        A series is empty or shorter than *horizon*.
    """
    cleaned = _clean_symbols(symbols)
    # Validate before any data is requested
    WeightOptimizer.risk_aversion(risk_tolerance)

    series: List[ReturnSeries] = [return_series_for(s) for s in cleaned]

    covariance = CovarianceEstimator.estimate(series, correlation_fallback)
    weights = WeightOptimizer.optimize(
        [s.expected_return for s in series],
        covariance,
        risk_tolerance,
        constraints=constraints,
        method=method,
    )
    backtest = BacktestSimulator.run(series, weights, horizon=horizon)
    metrics = PerformanceAnalyzer.analyze(
        backtest.portfolio_returns, backtest.value_path, risk_free_rate
    )

    logger.info(
        "Analyzed %d symbols at risk tolerance %d: total return %.2f%%, Sharpe %.2f",
        len(cleaned), risk_tolerance, metrics.total_return, metrics.sharpe_ratio,
    )

    return PortfolioAnalysis(
        symbols=tuple(cleaned),
        risk_tolerance=int(risk_tolerance),
        series=tuple(series),
        covariance=covariance,
        weights=tuple(weights),
        portfolio_returns=backtest.portfolio_returns,
        value_path=backtest.value_path,
        metrics=metrics,
    )


def _clean_symbols(symbols: Sequence[str]) -> List[str]:
    """Strip and upper-case symbols; reject blanks, duplicates and short lists."""
    if isinstance(symbols, str):
        raise ValidationError("Symbols must be a sequence of strings, not one string.")

    cleaned = []
    for raw in symbols:
        symbol = str(raw).strip().upper()
        if not symbol:
            raise ValidationError("Blank ticker symbol in the symbol list.")
        if symbol in cleaned:
            raise ValidationError(f"Duplicate ticker symbol: {symbol}.")
        cleaned.append(symbol)

    if len(cleaned) < 2:
        raise ValidationError(
            f"At least 2 symbols are required for a portfolio, got {len(cleaned)}."
        )
    return cleaned
