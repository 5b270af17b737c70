"""
advisor/return_series.py
------------------------
Per-symbol daily return series and its annualised statistics.

A ``ReturnSeries`` is created once per symbol per analysis request and is
immutable afterwards.  Derived statistics are computed on access, never
stored, so they can never drift from the underlying returns.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from advisor.config import TRADING_DAYS
from advisor.errors import InsufficientData, ValidationError


@dataclass(frozen=True)
class ReturnSeries:
    """
    Daily fractional returns for one symbol.

    Attributes
    ----------
    symbol : str
        Ticker symbol.
    daily_returns : tuple of float
        Ordered day-over-day returns (``0.01`` means +1%), never prices.
    current_price : float
        Latest available price.
    is_simulated : bool
        ``True`` when the series came from a synthetic generator rather
        than market data.
    """

    symbol: str
    daily_returns: tuple
    current_price: float = 0.0
    is_simulated: bool = False

    def __post_init__(self):
        returns = tuple(float(r) for r in self.daily_returns)
        if not returns:
            raise InsufficientData(
                f"Return series for {self.symbol!r} is empty."
            )
        if not all(math.isfinite(r) for r in returns):
            raise ValidationError(
                f"Return series for {self.symbol!r} contains non-finite values."
            )
        object.__setattr__(self, "daily_returns", returns)
        object.__setattr__(self, "current_price", float(self.current_price))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_prices(
        cls,
        symbol: str,
        prices: Sequence[float],
        is_simulated: bool = False,
    ) -> "ReturnSeries":
        """
        Build a series from an ordered price history.

        ``return[t] = (price[t] - price[t-1]) / price[t-1]``; the latest
        price becomes ``current_price``.

        Raises
        ------
        InsufficientData
            If fewer than two prices are supplied.
        ValidationError
            If any price used as a denominator is zero or negative.
        """
        values = np.asarray(prices, dtype=float)
        if values.size < 2:
            raise InsufficientData(
                f"Need at least 2 prices for {symbol!r}, got {values.size}."
            )
        if np.any(values[:-1] <= 0):
            raise ValidationError(
                f"Price history for {symbol!r} contains zero or negative prices."
            )
        returns = (values[1:] - values[:-1]) / values[:-1]
        return cls(
            symbol=symbol,
            daily_returns=tuple(returns.tolist()),
            current_price=float(values[-1]),
            is_simulated=is_simulated,
        )

    # ------------------------------------------------------------------
    # Derived statistics
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.daily_returns)

    @property
    def expected_return(self) -> float:
        """Annualised mean daily return: ``mean × 252``."""
        return float(np.mean(self.daily_returns)) * TRADING_DAYS

    @property
    def volatility(self) -> float:
        """
        Annualised population standard deviation: ``std × √252``.

        A constant series has volatility exactly ``0.0``.
        """
        returns = np.asarray(self.daily_returns)
        if np.ptp(returns) == 0.0:
            return 0.0
        return float(returns.std()) * math.sqrt(TRADING_DAYS)

    def as_series(self) -> pd.Series:
        """Daily returns as a ``pd.Series`` named after the symbol."""
        return pd.Series(self.daily_returns, name=self.symbol, dtype=float)
