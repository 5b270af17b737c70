"""
advisor/config.py
-----------------
Shared financial configuration constants.

Keeping these separate from advisor/constants.py (which holds display
constants) keeps a clean boundary: this file owns the tunable numeric
parameters of the optimization and backtesting engine.
"""

# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------
# Trading days per year, used to annualise daily means and variances.

TRADING_DAYS: int = 252

# ---------------------------------------------------------------------------
# Risk-free rate
# ---------------------------------------------------------------------------
# Annual risk-free rate used as the hurdle for Sharpe and Sortino ratios.

RISK_FREE_RATE: float = 0.02   # 2% p.a.

# ---------------------------------------------------------------------------
# Covariance estimation
# ---------------------------------------------------------------------------
# Pairwise correlation assumed when two return series cannot be aligned
# (different lengths or missing data).

DEFAULT_CORRELATION: float = 0.3

# ---------------------------------------------------------------------------
# Weight optimizer
# ---------------------------------------------------------------------------
# Box constraints applied to every position, plus the fixed schedule of the
# gradient-ascent optimizer.  The iteration count is bounded so the optimizer
# can run on a request thread without a watchdog.

DEFAULT_MIN_WEIGHT: float = 0.01
DEFAULT_MAX_WEIGHT: float = 0.40
LEARNING_RATE: float = 0.01
GRADIENT_ITERATIONS: int = 1000

# Accepted risk-tolerance range (1 = most averse, 10 = least averse)
MIN_RISK_TOLERANCE: int = 1
MAX_RISK_TOLERANCE: int = 10

# ---------------------------------------------------------------------------
# Backtest
# ---------------------------------------------------------------------------

INITIAL_VALUE: float = 100.0        # normalised value path base
BACKTEST_HORIZON_DAYS: int = 252    # one trading year

# ---------------------------------------------------------------------------
# Price history
# ---------------------------------------------------------------------------

DEFAULT_START_DATE: str = "2023-01-01"
