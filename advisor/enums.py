from enum import Enum


class OptimizationMethod(Enum):
    """Weight optimizer variants."""
    GRADIENT = "gradient"     # constrained gradient ascent, covariance-aware
    HEURISTIC = "heuristic"   # closed-form return/risk scoring


class RiskLevel(Enum):
    """Qualitative risk band derived from annualised volatility."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very high"


class Priority(Enum):
    """Ordering of advisory recommendations (higher value shown first)."""
    LOW = 1
    MEDIUM = 2
    HIGH = 3
