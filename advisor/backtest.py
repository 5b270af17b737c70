"""
advisor/backtest.py
-------------------
Historical replay of a fixed weight vector.

Design contract:
  - No optimization, no metric computation
  - Pure and deterministic: no randomness, no I/O
  - Misaligned inputs fail with DimensionMismatch; nothing is truncated
    silently and nothing is indexed out of range
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from advisor.config import INITIAL_VALUE
from advisor.errors import DimensionMismatch, InsufficientData, ValidationError
from advisor.return_series import ReturnSeries


@dataclass(frozen=True)
class BacktestResult:
    """Daily portfolio returns (length T) and the compounded value path (T + 1)."""

    portfolio_returns: tuple
    value_path: tuple

    @property
    def horizon(self) -> int:
        return len(self.portfolio_returns)


class BacktestSimulator:
    """
    Replay historical daily returns through a fixed set of weights.

    For each day ``t``::

        portfolio_return[t] = Σᵢ wᵢ · rᵢ[t]
        value[t + 1]        = value[t] · (1 + portfolio_return[t])

    with ``value[0] = 100``.
    """

    @staticmethod
    def run(
        series: Sequence[ReturnSeries],
        weights: Sequence[float],
        horizon: Optional[int] = None,
    ) -> BacktestResult:
        """Compute both the daily portfolio returns and the value path."""
        returns = BacktestSimulator.portfolio_returns(series, weights, horizon)
        return BacktestResult(
            portfolio_returns=tuple(returns),
            value_path=tuple(BacktestSimulator.compound(returns)),
        )

    @staticmethod
    def simulate(
        series: Sequence[ReturnSeries],
        weights: Sequence[float],
        horizon: Optional[int] = None,
    ) -> List[float]:
        """
        Return the value path (length T + 1, starting at 100).

        Parameters
        ----------
        series:
            One ``ReturnSeries`` per weight, all of the same length unless
            *horizon* is given.
        weights:
            Weight vector aligned with *series*.
        horizon:
            When set, only the trailing *horizon* days of every series are
            replayed.

        Raises
        ------
        DimensionMismatch
            ``len(series) != len(weights)``, or series lengths differ and
            no *horizon* is given.
        InsufficientData
            A series is shorter than *horizon*.
        """
        returns = BacktestSimulator.portfolio_returns(series, weights, horizon)
        return BacktestSimulator.compound(returns)

    @staticmethod
    def portfolio_returns(
        series: Sequence[ReturnSeries],
        weights: Sequence[float],
        horizon: Optional[int] = None,
    ) -> List[float]:
        """Weighted daily portfolio returns over the simulated window."""
        matrix = BacktestSimulator._aligned_returns(series, weights, horizon)
        w = np.asarray(weights, dtype=float)
        return (matrix @ w).tolist()

    @staticmethod
    def compound(portfolio_returns: Sequence[float]) -> List[float]:
        """Compound daily returns onto the normalised base value."""
        values = [INITIAL_VALUE]
        for r in portfolio_returns:
            values.append(values[-1] * (1.0 + r))
        return values

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _aligned_returns(
        series: Sequence[ReturnSeries],
        weights: Sequence[float],
        horizon: Optional[int],
    ) -> np.ndarray:
        """T×N matrix of daily returns, one column per asset."""
        if not series:
            raise InsufficientData("Cannot backtest an empty portfolio.")
        if len(series) != len(weights):
            raise DimensionMismatch(
                f"{len(series)} return series but {len(weights)} weights."
            )

        lengths = [len(s) for s in series]

        if horizon is None:
            if len(set(lengths)) != 1:
                detail = ", ".join(f"{s.symbol}={len(s)}" for s in series)
                raise DimensionMismatch(
                    f"Return series have different lengths ({detail}). "
                    "Pass a horizon to replay a common trailing window."
                )
            columns = [s.daily_returns for s in series]
        else:
            if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon < 1:
                raise ValidationError(
                    f"Backtest horizon must be a positive integer, got {horizon!r}."
                )
            short = [s.symbol for s in series if len(s) < horizon]
            if short:
                raise InsufficientData(
                    f"Series shorter than the {horizon}-day horizon: {short}."
                )
            columns = [s.daily_returns[-horizon:] for s in series]

        return np.column_stack([np.asarray(c, dtype=float) for c in columns])
