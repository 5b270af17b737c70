"""
advisor/covariance.py
---------------------
Pure covariance estimation: return series → annualised covariance matrix.

Design contract:
  - No optimization, no simulation
  - Fully deterministic and stateless (all methods are @staticmethod)
  - The matrix is recomputed per call and never mutated afterwards
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from advisor.config import DEFAULT_CORRELATION
from advisor.errors import ValidationError
from advisor.return_series import ReturnSeries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CovarianceMatrix:
    """
    Symmetric N×N annualised covariance matrix.

    ``values[i][j]`` is indexed in the same order as ``symbols``.  Both
    arrays are read-only; ``correlations`` keeps the pairwise correlation
    actually used for each off-diagonal entry (1.0 on the diagonal).
    """

    symbols: tuple
    values: np.ndarray
    correlations: np.ndarray

    def __len__(self) -> int:
        return len(self.symbols)

    def __getitem__(self, index):
        return self.values[index]

    def as_frame(self) -> pd.DataFrame:
        """Covariance matrix labelled by symbol on both axes."""
        return pd.DataFrame(
            self.values, index=list(self.symbols), columns=list(self.symbols)
        )


class CovarianceEstimator:
    """
    Build a covariance matrix from per-symbol return series.

    Diagonal entries are ``volatility(i)²``.  Off-diagonal entries are
    ``corr(i, j) × volatility(i) × volatility(j)`` where ``corr`` is the
    Pearson correlation of the two daily return series when they align, or
    a fixed fallback constant when they do not.
    """

    @staticmethod
    def estimate(
        series: Sequence[ReturnSeries],
        correlation_fallback: float = DEFAULT_CORRELATION,
    ) -> CovarianceMatrix:
        """
        Estimate the annualised covariance matrix for *series*.

        Parameters
        ----------
        series:
            At least two ``ReturnSeries``; output ordering follows input.
        correlation_fallback:
            Correlation assumed for pairs whose return series differ in
            length or are missing.  Must lie in [-1, 1].

        Raises
        ------
        ValidationError
            If fewer than two series are given or the fallback is out of
            range.
        """
        if len(series) < 2:
            raise ValidationError(
                f"Covariance estimation needs at least 2 return series, "
                f"got {len(series)}."
            )
        if not -1.0 <= correlation_fallback <= 1.0:
            raise ValidationError(
                f"Correlation fallback must be within [-1, 1], "
                f"got {correlation_fallback}."
            )

        n = len(series)
        vols = [s.volatility for s in series]
        values = np.zeros((n, n), dtype=float)
        correlations = np.eye(n, dtype=float)

        for i in range(n):
            values[i, i] = vols[i] ** 2
            for j in range(i + 1, n):
                corr = CovarianceEstimator.correlation(
                    series[i].daily_returns,
                    series[j].daily_returns,
                    correlation_fallback,
                )
                cov = corr * vols[i] * vols[j]
                # Fill both halves from one value so symmetry is exact
                values[i, j] = values[j, i] = cov
                correlations[i, j] = correlations[j, i] = corr

        values.setflags(write=False)
        correlations.setflags(write=False)

        return CovarianceMatrix(
            symbols=tuple(s.symbol for s in series),
            values=values,
            correlations=correlations,
        )

    @staticmethod
    def correlation(
        x: Optional[Sequence[float]],
        y: Optional[Sequence[float]],
        fallback: float = DEFAULT_CORRELATION,
    ) -> float:
        """
        Pearson correlation of two daily return sequences.

        Formula::

            corr = Σ(xₖ − x̄)(yₖ − ȳ) / √( Σ(xₖ − x̄)² · Σ(yₖ − ȳ)² )

        Returns
        -------
        float
            Value in [-1, 1].  ``0.0`` when either series is constant
            (zero denominator).  *fallback* when either series is missing,
            empty, or the two lengths differ.
        """
        if x is None or y is None or len(x) == 0 or len(x) != len(y):
            logger.debug(
                "Return series do not align; using fallback correlation %.3f",
                fallback,
            )
            return float(fallback)

        a = np.asarray(x, dtype=float)
        b = np.asarray(y, dtype=float)
        # A constant series has a zero denominator; rounding in the mean
        # would otherwise leave tiny non-zero deviations
        if np.ptp(a) == 0.0 or np.ptp(b) == 0.0:
            return 0.0

        dx = a - a.mean()
        dy = b - b.mean()

        numerator = float(np.dot(dx, dy))
        denominator = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
        if denominator == 0.0:
            return 0.0

        # Rounding can push |corr| a hair past 1
        return max(-1.0, min(1.0, numerator / denominator))
