from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from advisor.config import MAX_RISK_TOLERANCE, MIN_RISK_TOLERANCE
from advisor.enums import OptimizationMethod
from advisor.errors import ValidationError
from advisor.optimizer import WeightConstraints

_SEPARATORS = re.compile(r"[,\s]+")


def parse_symbols(text: str) -> List[str]:
    """
    Split a user-entered stock pool into upper-case symbols.

    Accepts commas and/or whitespace as separators, e.g.
    ``"aapl, msft nvda"`` → ``["AAPL", "MSFT", "NVDA"]``.  Empty tokens are
    dropped; order of first appearance is kept and repeats are removed.
    """
    symbols: List[str] = []
    for token in _SEPARATORS.split(text or ""):
        token = token.strip().upper()
        if token and token not in symbols:
            symbols.append(token)
    return symbols


@dataclass
class AnalysisRequest:
    """
    Holds everything a single analysis needs from the user.

    Replaces ambient UI state with explicit data: a shell builds one of
    these, validates it, and hands it to the engine.
    """

    symbols: List[str] = field(default_factory=list)
    risk_tolerance: int = 5
    investment: float = 10_000.0
    constraints: Optional[WeightConstraints] = None
    method: OptimizationMethod = OptimizationMethod.GRADIENT

    @classmethod
    def from_text(cls, stock_pool: str, risk_tolerance: int, investment: float, **kwargs):
        return cls(symbols=parse_symbols(stock_pool), risk_tolerance=risk_tolerance,
                   investment=investment, **kwargs)

    def validate(self) -> "AnalysisRequest":
        """Raise ``ValidationError`` for anything the engine would reject."""
        if len(self.symbols) < 2:
            raise ValidationError("Please enter at least 2 stock symbols to analyze.")
        if not MIN_RISK_TOLERANCE <= self.risk_tolerance <= MAX_RISK_TOLERANCE:
            raise ValidationError(
                f"Risk tolerance must be between {MIN_RISK_TOLERANCE} and "
                f"{MAX_RISK_TOLERANCE}."
            )
        if not self.investment or self.investment <= 0:
            raise ValidationError("Investment amount must be a positive number.")
        return self
