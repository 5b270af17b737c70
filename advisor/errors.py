"""
advisor/errors.py
-----------------
Exception hierarchy for the portfolio engine.

Every error derives from ``ValueError`` so callers that already guard data
loading and metric computation with ``except ValueError`` keep working.
Numerically degenerate inputs (zero variance, zero scores) are *not* errors;
they are absorbed by fallback policies inside the engine.
"""


class AdvisorError(ValueError):
    """Base class for all engine errors."""


class ValidationError(AdvisorError):
    """Structurally invalid input: symbol count, risk tolerance, constraints."""


class DimensionMismatch(ValidationError):
    """Sequences that must be aligned have different lengths."""


class InsufficientData(AdvisorError):
    """A return series or value path is empty or too short."""
