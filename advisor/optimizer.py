"""
advisor/optimizer.py
--------------------
Pure transformation engine: expected returns + covariance → portfolio weights.

Design contract:
  - No covariance estimation
  - No simulation, no metric computation
  - No data-source dependency
  - Fully deterministic and stateless (all methods are @staticmethod)
  - Never raises for numerically degenerate input; falls back to equal weight
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from advisor.config import (
    DEFAULT_MAX_WEIGHT,
    DEFAULT_MIN_WEIGHT,
    GRADIENT_ITERATIONS,
    LEARNING_RATE,
    MAX_RISK_TOLERANCE,
    MIN_RISK_TOLERANCE,
)
from advisor.enums import OptimizationMethod
from advisor.errors import DimensionMismatch, ValidationError

logger = logging.getLogger(__name__)

_TOLERANCE = 1e-12


@dataclass(frozen=True)
class WeightConstraints:
    """Per-position box constraints: every weight within [min_weight, max_weight]."""

    min_weight: float = DEFAULT_MIN_WEIGHT
    max_weight: float = DEFAULT_MAX_WEIGHT

    def __post_init__(self):
        lo, hi = self.min_weight, self.max_weight
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise ValidationError("Weight constraints must be finite numbers.")
        if lo < 0.0 or hi > 1.0 or lo > hi:
            raise ValidationError(
                f"Weight constraints must satisfy 0 <= min_weight <= max_weight <= 1 "
                f"(got min_weight={lo}, max_weight={hi})."
            )

    def feasible_for(self, n: int) -> "WeightConstraints":
        """
        Return bounds that a fully-invested portfolio of *n* assets can meet.

        ``n × max_weight < 1`` or ``n × min_weight > 1`` cannot sum to 1;
        the offending bound is relaxed to ``1/n``.
        """
        lo, hi = self.min_weight, self.max_weight
        equal = 1.0 / n
        if n * hi < 1.0:
            hi = equal
        if n * lo > 1.0:
            lo = equal
        if (lo, hi) != (self.min_weight, self.max_weight):
            logger.warning(
                "Weight bounds [%.4f, %.4f] are infeasible for %d assets; "
                "using [%.4f, %.4f]",
                self.min_weight, self.max_weight, n, lo, hi,
            )
            return WeightConstraints(min_weight=lo, max_weight=hi)
        return self


class WeightOptimizer:
    """
    Produce a risk-adjusted, long-only, fully-invested weight vector.

    Supports two algorithms (see :class:`OptimizationMethod`):
        ``GRADIENT``  – constrained gradient ascent on the mean-variance
                        objective ``wᵀμ − λ·wᵀΣw`` (default)
        ``HEURISTIC`` – closed-form score ``μ/σ − λ·σ`` per asset

    The risk-aversion coefficient ``λ = (11 − risk_tolerance) / 10`` maps a
    tolerance of 1 to 1.0 (most averse) and 10 to 0.1 (least averse).

    All outputs are ≥ 0, sum to 1, and respect the (feasible) box
    constraints.
    """

    DEFAULT_METHOD: OptimizationMethod = OptimizationMethod.GRADIENT

    # ------------------------------------------------------------------ #
    #  Public entry point
    # ------------------------------------------------------------------ #

    @staticmethod
    def optimize(
        expected_returns: Sequence[float],
        cov,
        risk_tolerance: int,
        constraints: Optional[WeightConstraints] = None,
        method: OptimizationMethod = OptimizationMethod.GRADIENT,
        learning_rate: float = LEARNING_RATE,
        iterations: int = GRADIENT_ITERATIONS,
    ) -> List[float]:
        """
        Optimize portfolio weights.

        Parameters
        ----------
        expected_returns:
            Annualised expected return per asset.
        cov:
            N×N covariance matrix (``CovarianceMatrix``, ndarray or nested
            lists) in the same asset order.
        risk_tolerance:
            Integer in [1, 10].
        constraints:
            Box constraints; defaults to ``WeightConstraints()``
            (``[0.01, 0.40]``).  Relaxed to ``1/N`` when infeasible.
        method:
            ``OptimizationMethod.GRADIENT`` or ``OptimizationMethod.HEURISTIC``.

        Returns
        -------
        List[float]
            Weights aligned with *expected_returns*.

        Raises
        ------
        ValidationError
            Empty input, bad risk tolerance or unknown method.
        DimensionMismatch
            Covariance matrix shape does not match the return vector.
        """
        mu = np.asarray(expected_returns, dtype=float)
        n = mu.size
        if n == 0:
            raise ValidationError("Cannot optimize an empty portfolio.")

        sigma = np.asarray(getattr(cov, "values", cov), dtype=float)
        if sigma.shape != (n, n):
            raise DimensionMismatch(
                f"Covariance matrix has shape {sigma.shape} but {n} expected "
                f"returns were provided."
            )

        risk_aversion = WeightOptimizer.risk_aversion(risk_tolerance)

        if n == 1:
            return [1.0]

        bounds = (constraints or WeightConstraints()).feasible_for(n)

        if method == OptimizationMethod.GRADIENT:
            weights = WeightOptimizer._gradient_ascent(
                mu, sigma, risk_aversion, bounds, learning_rate, iterations
            )
        elif method == OptimizationMethod.HEURISTIC:
            weights = WeightOptimizer._heuristic(mu, sigma, risk_aversion)
        else:
            raise ValidationError(
                f"Unknown optimization method: {method!r}. "
                f"Choose from {[m.value for m in OptimizationMethod]}."
            )

        if not np.all(np.isfinite(weights)):
            logger.warning("Optimizer produced non-finite weights; using equal weighting")
            return WeightOptimizer._equal(n)

        weights = WeightOptimizer._apply_constraints(weights, bounds)
        logger.debug(
            "Optimized %d weights with %s (risk_aversion=%.2f)",
            n, method.value, risk_aversion,
        )
        return weights

    @staticmethod
    def risk_aversion(risk_tolerance: int) -> float:
        """
        Map a 1–10 risk tolerance to the risk-aversion coefficient.

        Raises
        ------
        ValidationError
            If *risk_tolerance* is not an integer in [1, 10].
        """
        if isinstance(risk_tolerance, bool) or not isinstance(risk_tolerance, (int, np.integer)):
            raise ValidationError(
                f"Risk tolerance must be an integer, got {risk_tolerance!r}."
            )
        if not MIN_RISK_TOLERANCE <= risk_tolerance <= MAX_RISK_TOLERANCE:
            raise ValidationError(
                f"Risk tolerance must be between {MIN_RISK_TOLERANCE} and "
                f"{MAX_RISK_TOLERANCE}, got {risk_tolerance}."
            )
        return (11 - int(risk_tolerance)) / 10

    # ------------------------------------------------------------------ #
    #  Algorithms
    # ------------------------------------------------------------------ #

    @staticmethod
    def _gradient_ascent(
        mu: np.ndarray,
        sigma: np.ndarray,
        risk_aversion: float,
        bounds: WeightConstraints,
        learning_rate: float,
        iterations: int,
    ) -> np.ndarray:
        """
        Fixed-schedule gradient ascent from equal weights.

        Each iteration::

            gᵢ  = μᵢ − 2λ Σⱼ wⱼ Σᵢⱼ
            wᵢ ← clip(wᵢ + η·gᵢ, min_weight, max_weight)
            w  ← w / Σw

        Clamping can move the sum away from 1, so the vector is
        renormalised before the next gradient step.
        """
        n = mu.size
        w = np.full(n, 1.0 / n)
        with np.errstate(over="ignore", invalid="ignore"):
            for _ in range(iterations):
                gradient = mu - 2.0 * risk_aversion * (sigma @ w)
                w = np.clip(w + learning_rate * gradient,
                            bounds.min_weight, bounds.max_weight)
                w = WeightOptimizer._normalize(w)
        return w

    @staticmethod
    def _heuristic(
        mu: np.ndarray,
        sigma: np.ndarray,
        risk_aversion: float,
    ) -> np.ndarray:
        """
        Score each asset by ``max(0, μᵢ/σᵢ − λ·σᵢ)`` and weight by score.

        Zero-volatility assets produce undefined ratios and score 0.
        Falls back to equal weighting when every score is zero.
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            risk = np.sqrt(np.clip(np.diag(sigma), 0.0, None))
            scores = mu / risk - risk_aversion * risk
        scores = np.where(np.isfinite(scores), np.maximum(scores, 0.0), 0.0)
        return WeightOptimizer._normalize(scores)

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _apply_constraints(
        weights: Sequence[float],
        bounds: WeightConstraints,
    ) -> List[float]:
        """
        Project *weights* onto ``{w : Σw = 1, lo ≤ wᵢ ≤ hi}``.

        Weights are clipped into the box first.  The remaining gap to a
        total of 1 is then spread over each weight in proportion to its
        slack: the room up to the cap when the total is short, the room
        down to the floor when it is over.  Bounds that passed
        :meth:`WeightConstraints.feasible_for` always leave at least as
        much slack as the gap (``n·hi ≥ 1 ≥ n·lo``), so one step lands on
        the constrained simplex; the loop only mops up rounding.
        """
        lo, hi = bounds.min_weight, bounds.max_weight
        w = np.clip(np.asarray(weights, dtype=float), lo, hi)

        for _ in range(3):
            gap = 1.0 - float(w.sum())
            if abs(gap) <= _TOLERANCE:
                break
            slack = (hi - w) if gap > 0 else (w - lo)
            slack = np.clip(slack, 0.0, None)
            total_slack = float(slack.sum())
            if total_slack <= 0.0:
                break
            w = np.clip(w + gap * slack / total_slack, lo, hi)

        return w.tolist()

    @staticmethod
    def _normalize(values: np.ndarray) -> np.ndarray:
        """Scale *values* so they sum to 1.0. Falls back to equal weight."""
        total = float(np.sum(values))
        if total > 0 and math.isfinite(total):
            return values / total
        return np.full(values.size, 1.0 / values.size)

    @staticmethod
    def _equal(n: int) -> List[float]:
        return [1.0 / n] * n
