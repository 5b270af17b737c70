"""
advisor/data_sources.py
-----------------------
Injectable ``return_series_for`` implementations.

The engine never fetches data itself.  Each class here is a callable
``symbol -> ReturnSeries`` that a shell passes to ``analyze_portfolio``:

* :class:`PriceHistorySource`   – adjusted-close history from CSV files
* :class:`SyntheticReturnSource` – seeded normal returns for demos/tests
* :class:`FallbackReturnSource`  – per-symbol fallback from one to another
"""

from __future__ import annotations

import glob
import hashlib
import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pandas as pd

from advisor.config import BACKTEST_HORIZON_DAYS, DEFAULT_START_DATE, TRADING_DAYS
from advisor.return_series import ReturnSeries

logger = logging.getLogger(__name__)

# Price columns accepted, in order of preference
_PRICE_COLUMNS = ("Adj Close", "adjClose", "Close", "close")


class PriceHistorySource:
    """
    Loads and caches per-symbol historical prices from a directory tree.

    File layout (either form)::

        <base>/<SYMBOL>.csv
        <base>/<SYMBOL>/<SYMBOL>_<YEAR>.csv

    Each CSV must contain a ``Date`` column and one price column
    (``Adj Close`` preferred, then ``adjClose``, ``Close``).
    """

    def __init__(
        self,
        base_path: str | Path,
        start_date: Optional[str] = DEFAULT_START_DATE,
        end_date: Optional[str] = None,
    ):
        self._base = Path(base_path)
        self._start = pd.Timestamp(start_date) if start_date else None
        self._end = pd.Timestamp(end_date) if end_date else None

    def __call__(self, symbol: str) -> ReturnSeries:
        """
        Return the ``ReturnSeries`` for *symbol* within the date window.

        Raises
        ------
        FileNotFoundError
            If no CSV file exists for the symbol.
        ValueError
            If the data is unreadable or has fewer than two prices in the
            window (``InsufficientData`` is a ``ValueError``).
        """
        df = self.load_prices(symbol)
        if self._start is not None:
            df = df[df["Date"] >= self._start]
        if self._end is not None:
            df = df[df["Date"] <= self._end]
        return ReturnSeries.from_prices(symbol.upper(), df["Price"].tolist())

    def load_prices(self, symbol: str) -> pd.DataFrame:
        """Full history as a ``Date``/``Price`` frame sorted by date (cached)."""
        return _load_cached(str(self._base), symbol.upper())


def _csv_files(base: Path, symbol: str) -> list[str]:
    single = base / f"{symbol}.csv"
    if single.is_file():
        return [str(single)]
    return sorted(glob.glob(str(base / symbol / f"{symbol}_*.csv")))


# ------------------------------------------------------------------
# Module-level cached loader; the key is (base, symbol) as plain strings
# ------------------------------------------------------------------

@lru_cache(maxsize=128)
def _load_cached(base: str, symbol: str) -> pd.DataFrame:
    csv_files = _csv_files(Path(base), symbol)
    if not csv_files:
        raise FileNotFoundError(f"No price history found for {symbol} in {base}")

    frames = []
    for path in csv_files:
        try:
            df = pd.read_csv(path, parse_dates=["Date"])
        except (OSError, ValueError, pd.errors.ParserError) as exc:
            logger.warning("Skipping unreadable price file %s: %s", path, exc)
            continue
        # Header-only files carry nothing
        if len(df) > 0:
            frames.append(df)

    if not frames:
        raise ValueError(f"All CSV files for {symbol} are empty or unreadable.")

    combined = pd.concat(frames, ignore_index=True)
    price_col = next((c for c in _PRICE_COLUMNS if c in combined.columns), None)
    if price_col is None:
        raise ValueError(
            f"CSV for {symbol} has no price column; expected one of {_PRICE_COLUMNS}."
        )

    prices = combined[["Date", price_col]].rename(columns={price_col: "Price"})
    prices["Date"] = pd.to_datetime(prices["Date"], utc=True).dt.tz_localize(None)
    prices = prices.dropna().drop_duplicates(subset="Date", keep="last")
    prices = prices.sort_values("Date").reset_index(drop=True)
    return prices


class SyntheticReturnSource:
    """
    Generates normally-distributed daily returns per symbol.

    Profiles follow a few well-known names (TSLA more volatile, NVDA and
    GOOGL higher drift); everything else gets the default profile.  With a
    *seed*, each symbol's series is reproducible and independent of the
    order in which symbols are requested.
    """

    BASE_VOLATILITY: dict = {"TSLA": 0.40, "AAPL": 0.25}
    BASE_RETURN: dict = {"NVDA": 0.15, "GOOGL": 0.12}
    DEFAULT_VOLATILITY: float = 0.30
    DEFAULT_RETURN: float = 0.10

    def __init__(self, seed: Optional[int] = None, days: int = BACKTEST_HORIZON_DAYS):
        if days < 1:
            raise ValueError(f"days must be positive, got {days}.")
        self._seed = seed
        self._days = days

    def __call__(self, symbol: str) -> ReturnSeries:
        symbol = symbol.upper()
        vol = self.BASE_VOLATILITY.get(symbol, self.DEFAULT_VOLATILITY)
        drift = self.BASE_RETURN.get(symbol, self.DEFAULT_RETURN)

        rng = self._rng_for(symbol)
        returns = rng.normal(
            loc=drift / TRADING_DAYS,
            scale=vol / math.sqrt(TRADING_DAYS),
            size=self._days,
        )
        return ReturnSeries(
            symbol=symbol,
            daily_returns=tuple(returns.tolist()),
            current_price=float(rng.uniform(50.0, 350.0)),
            is_simulated=True,
        )

    def _rng_for(self, symbol: str) -> np.random.Generator:
        if self._seed is None:
            return np.random.default_rng()
        digest = hashlib.sha256(symbol.encode()).digest()
        return np.random.default_rng([self._seed, int.from_bytes(digest[:8], "big")])


class FallbackReturnSource:
    """
    Try *primary* first; on a data error use *fallback* for that symbol.

    Typical use wraps a ``PriceHistorySource`` with a
    ``SyntheticReturnSource`` so one missing file does not abort the whole
    analysis.  Substitutions are logged at WARNING.
    """

    def __init__(
        self,
        primary: Callable[[str], ReturnSeries],
        fallback: Callable[[str], ReturnSeries],
    ):
        self._primary = primary
        self._fallback = fallback

    def __call__(self, symbol: str) -> ReturnSeries:
        try:
            return self._primary(symbol)
        except (FileNotFoundError, ValueError) as exc:
            logger.warning("Using simulated data for %s: %s", symbol, exc)
            return self._fallback(symbol)
