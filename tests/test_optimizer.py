"""
tests/test_optimizer.py
-----------------------
Unit tests for WeightOptimizer.

Test coverage:
    Risk-aversion mapping and risk-tolerance validation
    Simplex + box invariants for both methods over random inputs
    Equal-weight fallback for degenerate input
    Direction of allocation (risk tolerance, variance)
    Bounds projection when the cap and the floor bind at once
    Constraint validation and relaxation of infeasible bounds
    Error handling (dimension mismatch, unknown method, empty input)
"""

import unittest

import numpy as np

from advisor.covariance import CovarianceEstimator
from advisor.enums import OptimizationMethod
from advisor.errors import DimensionMismatch, ValidationError
from advisor.optimizer import WeightConstraints, WeightOptimizer
from advisor.return_series import ReturnSeries

METHODS = (OptimizationMethod.GRADIENT, OptimizationMethod.HEURISTIC)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _cov_from_vols(vols, corr=0.3):
    """Constant-correlation covariance matrix."""
    v = np.asarray(vols, dtype=float)
    cov = np.outer(v, v) * corr
    np.fill_diagonal(cov, v ** 2)
    return cov


def _random_problem(seed: int, n: int):
    rng = np.random.default_rng(seed)
    series = [
        ReturnSeries(f"S{i}", tuple(rng.normal(rng.uniform(-0.001, 0.002),
                                               rng.uniform(0.005, 0.04), 252)))
        for i in range(n)
    ]
    cov = CovarianceEstimator.estimate(series)
    return [s.expected_return for s in series], cov


# ===========================================================================
# 1. Risk aversion
# ===========================================================================

class TestRiskAversion(unittest.TestCase):

    def test_linear_mapping_endpoints(self):
        self.assertEqual(WeightOptimizer.risk_aversion(1), 1.0)
        self.assertEqual(WeightOptimizer.risk_aversion(10), 0.1)
        self.assertEqual(WeightOptimizer.risk_aversion(6), 0.5)

    def test_out_of_range_rejected(self):
        for bad in (0, 11, -3):
            with self.assertRaises(ValidationError):
                WeightOptimizer.risk_aversion(bad)

    def test_non_integer_rejected(self):
        for bad in (5.5, "5", None, True):
            with self.assertRaises(ValidationError):
                WeightOptimizer.risk_aversion(bad)

    def test_optimize_rejects_bad_tolerance(self):
        with self.assertRaises(ValidationError):
            WeightOptimizer.optimize([0.1, 0.1], _cov_from_vols([0.2, 0.2]), 12)


# ===========================================================================
# 2. Weight invariants
# ===========================================================================

class TestInvariants(unittest.TestCase):

    def _assert_valid(self, weights, n, lo, hi):
        self.assertEqual(len(weights), n)
        self.assertAlmostEqual(sum(weights), 1.0, delta=1e-9)
        for w in weights:
            self.assertFalse(np.isnan(w))
            self.assertGreaterEqual(w, 0.0)
            self.assertGreaterEqual(w, lo - 1e-12)
            self.assertLessEqual(w, hi + 1e-12)

    def test_simplex_and_bounds_over_random_inputs(self):
        for seed in range(12):
            n = 3 + seed % 6
            mu, cov = _random_problem(seed, n)
            for method in METHODS:
                for tolerance in (1, 4, 7, 10):
                    weights = WeightOptimizer.optimize(mu, cov, tolerance, method=method)
                    self._assert_valid(weights, n, 0.01, 0.40)

    def test_custom_constraints_respected(self):
        constraints = WeightConstraints(min_weight=0.05, max_weight=0.30)
        for seed in range(6):
            mu, cov = _random_problem(100 + seed, 5)
            for method in METHODS:
                weights = WeightOptimizer.optimize(mu, cov, 8, constraints, method=method)
                self._assert_valid(weights, 5, 0.05, 0.30)

    def test_unconstrained_bounds_allow_zero(self):
        constraints = WeightConstraints(min_weight=0.0, max_weight=1.0)
        mu = [-0.2, 0.1, 0.1]
        weights = WeightOptimizer.optimize(
            mu, _cov_from_vols([0.2, 0.2, 0.2]), 5, constraints,
            method=OptimizationMethod.HEURISTIC,
        )
        self.assertEqual(weights[0], 0.0)
        self._assert_valid(weights, 3, 0.0, 1.0)

    def test_single_asset_gets_everything(self):
        self.assertEqual(WeightOptimizer.optimize([0.1], [[0.04]], 5), [1.0])


# ===========================================================================
# 3. Degenerate inputs
# ===========================================================================

class TestFallbacks(unittest.TestCase):

    def test_zero_return_zero_volatility_gives_equal_weights(self):
        n = 4
        for method in METHODS:
            weights = WeightOptimizer.optimize([0.0] * n, np.zeros((n, n)), 5, method=method)
            for w in weights:
                self.assertAlmostEqual(w, 1 / n, places=12)

    def test_all_negative_scores_give_equal_weights(self):
        weights = WeightOptimizer.optimize(
            [-0.1] * 4, _cov_from_vols([0.2] * 4), 1,
            method=OptimizationMethod.HEURISTIC,
        )
        for w in weights:
            self.assertAlmostEqual(w, 0.25, places=12)

    def test_nan_returns_fall_back_to_equal_weights(self):
        for method in METHODS:
            weights = WeightOptimizer.optimize(
                [float("nan")] * 3, _cov_from_vols([0.2] * 3), 5, method=method
            )
            for w in weights:
                self.assertAlmostEqual(w, 1 / 3, places=12)

    def test_does_not_raise_for_zero_volatility_asset(self):
        cov = _cov_from_vols([0.0, 0.2, 0.3])
        for method in METHODS:
            weights = WeightOptimizer.optimize([0.05, 0.1, 0.2], cov, 5, method=method)
            self.assertAlmostEqual(sum(weights), 1.0, delta=1e-9)


# ===========================================================================
# 4. Allocation direction
# ===========================================================================

class TestDirection(unittest.TestCase):

    MU = [0.05, 0.10, 0.30]
    VOLS = [0.10, 0.20, 0.50]

    def test_heuristic_scores(self):
        # scores at λ=1: 0.4, 0.3, 0.1 → 0.5, 0.375, 0.125
        weights = WeightOptimizer.optimize(
            self.MU, _cov_from_vols(self.VOLS), 1,
            WeightConstraints(0.0, 1.0), method=OptimizationMethod.HEURISTIC,
        )
        self.assertAlmostEqual(weights[0], 0.5, places=9)
        self.assertAlmostEqual(weights[1], 0.375, places=9)
        self.assertAlmostEqual(weights[2], 0.125, places=9)

    def test_higher_tolerance_favours_high_return_asset(self):
        cov = _cov_from_vols(self.VOLS)
        free = WeightConstraints(0.0, 1.0)
        for method in METHODS:
            cautious = WeightOptimizer.optimize(self.MU, cov, 1, free, method=method)
            bold = WeightOptimizer.optimize(self.MU, cov, 10, free, method=method)
            self.assertGreaterEqual(bold[2], cautious[2])

    def test_gradient_prefers_lower_variance_for_equal_returns(self):
        weights = WeightOptimizer.optimize(
            [0.1, 0.1], _cov_from_vols([0.1, 0.3], corr=0.0), 1,
            WeightConstraints(0.0, 1.0),
        )
        self.assertGreater(weights[0], weights[1])

    def test_deterministic(self):
        mu, cov = _random_problem(7, 5)
        a = WeightOptimizer.optimize(mu, cov, 6)
        b = WeightOptimizer.optimize(mu, cov, 6)
        self.assertEqual(a, b)


# ===========================================================================
# 5. Cap and floor binding together
# ===========================================================================

class TestBindingBounds(unittest.TestCase):

    TIGHT = WeightConstraints(min_weight=0.3, max_weight=0.4)

    def _assert_on_simplex(self, weights, lo, hi):
        self.assertAlmostEqual(sum(weights), 1.0, delta=1e-9)
        for w in weights:
            self.assertGreaterEqual(w, lo - 1e-12)
            self.assertLessEqual(w, hi + 1e-12)

    def test_capped_weight_gives_way_to_floors(self):
        weights = WeightOptimizer._apply_constraints([0.6, 0.399, 0.001], self.TIGHT)
        self._assert_on_simplex(weights, 0.3, 0.4)
        self.assertEqual(weights[2], 0.3)
        self.assertGreater(weights[0], weights[1])

    def test_tight_bounds_through_optimize(self):
        mu = [0.124, 0.0838, 0.0042]
        cov = np.diag([0.04, 0.04, 0.04])
        for method in METHODS:
            weights = WeightOptimizer.optimize(mu, cov, 10, self.TIGHT, method=method)
            self._assert_on_simplex(weights, 0.3, 0.4)

    def test_many_floors_shrink_the_capped_weights(self):
        weights = WeightOptimizer._apply_constraints(
            [0.5, 0.45] + [0.05 / 23] * 23, WeightConstraints()
        )
        self._assert_on_simplex(weights, 0.01, 0.40)

    def test_two_positive_scores_among_twenty_five(self):
        n = 25
        mu = [0.3, 0.3] + [-0.1] * (n - 2)
        cov = np.diag([0.04] * n)
        for method in METHODS:
            weights = WeightOptimizer.optimize(mu, cov, 10, method=method)
            self.assertEqual(len(weights), n)
            self._assert_on_simplex(weights, 0.01, 0.40)

        # heuristic scores are [s, s, 0, ...]: 23 floors leave 0.77 for the pair
        weights = WeightOptimizer.optimize(mu, cov, 10, method=OptimizationMethod.HEURISTIC)
        self.assertAlmostEqual(weights[0], 0.385, places=9)
        self.assertAlmostEqual(weights[1], 0.385, places=9)
        for w in weights[2:]:
            self.assertAlmostEqual(w, 0.01, places=12)

    def test_large_random_portfolios(self):
        for seed in range(4):
            mu, cov = _random_problem(200 + seed, 30)
            for method in METHODS:
                weights = WeightOptimizer.optimize(mu, cov, 9, method=method)
                self._assert_on_simplex(weights, 0.01, 0.40)


# ===========================================================================
# 6. Constraints and errors
# ===========================================================================

class TestConstraints(unittest.TestCase):

    def test_invalid_constraints_rejected(self):
        for lo, hi in ((0.5, 0.4), (-0.1, 0.4), (0.0, 1.5), (float("nan"), 0.4)):
            with self.assertRaises(ValidationError):
                WeightConstraints(lo, hi)

    def test_default_cap_relaxed_for_two_assets(self):
        with self.assertLogs("advisor.optimizer", level="WARNING"):
            weights = WeightOptimizer.optimize(
                [0.3, 0.05], _cov_from_vols([0.2, 0.2]), 10
            )
        self.assertAlmostEqual(weights[0], 0.5, places=9)
        self.assertAlmostEqual(weights[1], 0.5, places=9)

    def test_floor_relaxed_when_too_high(self):
        relaxed = WeightConstraints(0.4, 0.5).feasible_for(3)
        self.assertAlmostEqual(relaxed.min_weight, 1 / 3)
        self.assertEqual(relaxed.max_weight, 0.5)

    def test_feasible_constraints_unchanged(self):
        c = WeightConstraints()
        self.assertIs(c.feasible_for(5), c)

    def test_dimension_mismatch(self):
        with self.assertRaises(DimensionMismatch):
            WeightOptimizer.optimize([0.1, 0.2, 0.3], _cov_from_vols([0.2, 0.2]), 5)

    def test_empty_input_rejected(self):
        with self.assertRaises(ValidationError):
            WeightOptimizer.optimize([], np.zeros((0, 0)), 5)

    def test_unknown_method_rejected(self):
        with self.assertRaises(ValidationError):
            WeightOptimizer.optimize([0.1] * 3, _cov_from_vols([0.2] * 3), 5, method="magic")


if __name__ == "__main__":
    unittest.main()
