"""
Bracket Tables & Progressive Tax
================================
Immutable bracket tables and the single progressive tax function shared by
every jurisdiction strategy.

Brackets use a continuous [lower, upper) convention: the width of a bracket is
``upper - lower`` and the next bracket starts exactly where the previous one
ends. An upper bound of ``None`` means unbounded.

Main entry point:
    compute_tax(taxable_amount, table) -> ProgressiveResult
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from errors import ConfigurationError


@dataclass(frozen=True)
class Bracket:
    """A contiguous income range taxed at a single marginal rate."""

    lower: float
    upper: Optional[float]
    rate: float

    @property
    def is_unbounded(self) -> bool:
        return self.upper is None

    def amount_in(self, taxable_amount: float) -> float:
        """Portion of ``taxable_amount`` that falls inside this bracket."""
        upper = math.inf if self.upper is None else self.upper
        return max(0.0, min(taxable_amount, upper) - self.lower)

    def to_dict(self) -> dict:
        return {"lower": self.lower, "upper": self.upper, "rate": self.rate}


@dataclass(frozen=True)
class BracketAllocation:
    """How much of a taxable amount fell into one bracket, and the tax on it."""

    lower: float
    upper: Optional[float]
    rate: float
    amount_taxed: float
    tax: float

    def to_dict(self) -> dict:
        return {
            "lower": self.lower,
            "upper": self.upper,
            "rate": self.rate,
            "amount_taxed": self.amount_taxed,
            "tax": self.tax,
        }


BracketSpec = Union[Bracket, Sequence]


class BracketTable:
    """
    Ordered, validated, immutable sequence of brackets.

    Accepts Bracket instances or (lower, upper, rate) tuples. Raises
    ConfigurationError when the table is empty, does not start at 0, has gaps
    or overlaps, is unsorted, has a rate outside [0, 1], or does not end with
    exactly one unbounded bracket.
    """

    __slots__ = ("_brackets", "name")

    def __init__(self, brackets: Iterable[BracketSpec], name: str = ""):
        self.name = name
        self._brackets = tuple(
            b if isinstance(b, Bracket) else Bracket(float(b[0]), _opt_float(b[1]), float(b[2]))
            for b in brackets
        )
        self._validate()

    def _validate(self) -> None:
        label = f"Bracket table '{self.name}'" if self.name else "Bracket table"
        if not self._brackets:
            raise ConfigurationError(f"{label} is empty")
        if self._brackets[0].lower != 0:
            raise ConfigurationError(f"{label} must start at 0, got {self._brackets[0].lower}")

        last_index = len(self._brackets) - 1
        for i, bracket in enumerate(self._brackets):
            if not 0.0 <= bracket.rate <= 1.0:
                raise ConfigurationError(f"{label}: rate {bracket.rate} outside [0, 1]")
            if bracket.is_unbounded:
                if i != last_index:
                    raise ConfigurationError(f"{label}: only the last bracket may be unbounded")
                continue
            if bracket.upper <= bracket.lower:
                raise ConfigurationError(
                    f"{label}: bracket {i} upper {bracket.upper} <= lower {bracket.lower}"
                )
            if i == last_index:
                raise ConfigurationError(f"{label}: last bracket must be unbounded")
            nxt = self._brackets[i + 1]
            if nxt.lower != bracket.upper:
                raise ConfigurationError(
                    f"{label}: bracket {i + 1} starts at {nxt.lower}, expected {bracket.upper}"
                )

    def __iter__(self):
        return iter(self._brackets)

    def __len__(self) -> int:
        return len(self._brackets)

    def __getitem__(self, index: int) -> Bracket:
        return self._brackets[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, BracketTable):
            return NotImplemented
        return self._brackets == other._brackets

    def __hash__(self) -> int:
        return hash(self._brackets)

    def __repr__(self) -> str:
        return f"BracketTable(name={self.name!r}, brackets={len(self._brackets)})"

    def rate_for(self, taxable_amount: float) -> float:
        """Rate of the highest bracket ``taxable_amount`` reaches; 0 if nothing is taxed."""
        rate = 0.0
        for bracket in self._brackets:
            if bracket.amount_in(taxable_amount) > 0:
                rate = bracket.rate
            else:
                break
        return rate

    def to_list(self) -> list[dict]:
        return [b.to_dict() for b in self._brackets]


def _opt_float(value) -> Optional[float]:
    if value is None or value == math.inf:
        return None
    return float(value)


@dataclass(frozen=True)
class ProgressiveResult:
    """Outcome of running a taxable amount through a bracket table."""

    total_tax: float
    allocations: tuple
    marginal_rate: float


def compute_tax(taxable_amount: float, table: BracketTable) -> ProgressiveResult:
    """
    Apply progressive tax brackets.

    Each bracket taxes ``max(0, min(taxable, upper) - lower)`` at its rate.
    A non-positive taxable amount yields zero tax and zero allocations.
    Allocations are returned for every bracket so the full table can be shown.
    """
    taxable = max(0.0, float(taxable_amount))
    total = 0.0
    allocations = []
    for bracket in table:
        amount = bracket.amount_in(taxable)
        tax = amount * bracket.rate
        total += tax
        allocations.append(
            BracketAllocation(
                lower=bracket.lower,
                upper=bracket.upper,
                rate=bracket.rate,
                amount_taxed=amount,
                tax=tax,
            )
        )
    return ProgressiveResult(
        total_tax=total,
        allocations=tuple(allocations),
        marginal_rate=table.rate_for(taxable),
    )


def scale_table(table: BracketTable, factor: float, name: str = "") -> BracketTable:
    """Return a copy of ``table`` with every bound multiplied by ``factor``."""
    return BracketTable(
        [
            Bracket(
                b.lower * factor,
                None if b.upper is None else b.upper * factor,
                b.rate,
            )
            for b in table
        ],
        name=name or table.name,
    )
