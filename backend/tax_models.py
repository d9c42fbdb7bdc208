"""
Tax Data Models
===============
Value objects flowing into and out of the tax engine:

  - TaxCalculationParams: what the caller asks for
  - TaxBreakdown: the normalized result every strategy returns
  - Deduction: informational description of an available deduction
  - TaxCalculationData: the record handed to the persistence layer
  - Scenario*: what-if comparison results

Monetary values are full-precision floats in the input currency; rates are
fractions (0.2 == 20%). Nothing here is mutated after creation.
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from config import CURRENCY_CODE_PATTERN
from errors import InvalidInputError

_CURRENCY_RE = re.compile(CURRENCY_CODE_PATTERN)

COMPONENT_FIELDS = (
    "federal_or_national_tax",
    "regional_tax",
    "local_tax",
    "social_contributions",
    "health_contributions",
    "other_deductions",
)


@dataclass(frozen=True)
class Deduction:
    """A deduction or allowance a jurisdiction offers (informational only)."""

    name: str
    description: str
    cap_amount: Optional[float]  # None when uncapped
    kind: str = "fixed"  # "fixed" | "percentage"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "cap_amount": self.cap_amount,
            "kind": self.kind,
        }


@dataclass(frozen=True)
class TaxCalculationParams:
    """
    Input to the facade.

    ``jurisdiction_params`` is an open mapping; each strategy reads only the
    keys it understands. Codes are normalized to upper case.
    """

    gross_income: float
    currency_code: str
    jurisdiction_code: str
    jurisdiction_params: Mapping[str, Any] = field(default_factory=dict)
    allow_fallback: bool = True

    def __post_init__(self):
        if isinstance(self.gross_income, bool) or not isinstance(self.gross_income, (int, float)):
            raise InvalidInputError("gross_income must be a number")
        if not isinstance(self.currency_code, str) or not isinstance(self.jurisdiction_code, str):
            raise InvalidInputError("currency_code and jurisdiction_code must be strings")
        if not isinstance(self.allow_fallback, bool):
            raise InvalidInputError("allow_fallback must be a boolean")

        currency = self.currency_code.strip().upper()
        if not _CURRENCY_RE.match(currency):
            raise InvalidInputError(
                f"currency_code '{self.currency_code}' is not a three-letter currency code"
            )
        jurisdiction = self.jurisdiction_code.strip().upper()
        if not jurisdiction:
            raise InvalidInputError("jurisdiction_code is required")

        params = self.jurisdiction_params if self.jurisdiction_params is not None else {}
        if not isinstance(params, Mapping):
            raise InvalidInputError("jurisdiction_params must be a mapping")

        object.__setattr__(self, "gross_income", float(self.gross_income))
        object.__setattr__(self, "currency_code", currency)
        object.__setattr__(self, "jurisdiction_code", jurisdiction)
        object.__setattr__(self, "jurisdiction_params", MappingProxyType(dict(params)))

    def with_overrides(self, **overrides) -> "TaxCalculationParams":
        """Copy with some fields replaced; jurisdiction params are merged, not replaced."""
        extra = overrides.pop("jurisdiction_params", None)
        if extra is not None and not isinstance(extra, Mapping):
            raise InvalidInputError("jurisdiction_params must be a mapping")
        if extra:
            merged = dict(self.jurisdiction_params)
            merged.update(extra)
            overrides["jurisdiction_params"] = merged
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaxCalculationParams":
        """Build params from a decoded JSON payload."""
        if not isinstance(data, Mapping):
            raise InvalidInputError("Request body must be a JSON object")
        missing = [k for k in ("gross_income", "currency_code", "jurisdiction_code") if k not in data]
        if missing:
            raise InvalidInputError(f"Missing required field(s): {', '.join(missing)}")
        allow_fallback = data.get("allow_fallback", True)
        if not isinstance(allow_fallback, bool):
            raise InvalidInputError("allow_fallback must be a boolean")
        return cls(
            gross_income=data["gross_income"],
            currency_code=data["currency_code"],
            jurisdiction_code=data["jurisdiction_code"],
            jurisdiction_params=data.get("jurisdiction_params") or {},
            allow_fallback=allow_fallback,
        )


@dataclass(frozen=True)
class TaxBreakdown:
    """
    Normalized tax result.

    ``total_tax`` is the sum of the six component fields; strategies build
    breakdowns through ``JurisdictionStrategy._assemble`` which guarantees it.
    """

    jurisdiction_code: str
    currency_code: str
    gross_income: float
    taxable_income: float
    federal_or_national_tax: float
    regional_tax: float
    local_tax: float
    social_contributions: float
    health_contributions: float
    other_deductions: float
    total_tax: float
    marginal_rate: float
    effective_rate: float
    explanatory_note: str
    allocations: tuple = ()
    is_fallback: bool = False

    @property
    def net_income(self) -> float:
        return self.gross_income - self.total_tax

    def to_dict(self) -> dict:
        """Full-precision dict for JSON responses; rounding is left to the client."""
        data = {
            "jurisdiction_code": self.jurisdiction_code,
            "currency_code": self.currency_code,
            "gross_income": self.gross_income,
            "taxable_income": self.taxable_income,
        }
        for name in COMPONENT_FIELDS:
            data[name] = getattr(self, name)
        data.update(
            {
                "total_tax": self.total_tax,
                "net_income": self.net_income,
                "marginal_rate": self.marginal_rate,
                "effective_rate": self.effective_rate,
                "explanatory_note": self.explanatory_note,
                "is_fallback": self.is_fallback,
                "allocations": [a.to_dict() for a in self.allocations],
            }
        )
        return data


@dataclass(frozen=True)
class TaxCalculationData:
    """Record exchanged with the persistence layer for save/favorite/export."""

    jurisdiction: str
    gross_income: float
    currency_code: str
    computed_tax: float
    net_income: float
    effective_rate: float
    timestamp: str
    freeform_note: str = ""
    id: Optional[int] = None
    is_favorite: bool = False

    @classmethod
    def from_breakdown(cls, breakdown: TaxBreakdown, note: str = "") -> "TaxCalculationData":
        return cls(
            jurisdiction=breakdown.jurisdiction_code,
            gross_income=breakdown.gross_income,
            currency_code=breakdown.currency_code,
            computed_tax=breakdown.total_tax,
            net_income=breakdown.net_income,
            effective_rate=breakdown.effective_rate,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            freeform_note=note or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "jurisdiction": self.jurisdiction,
            "gross_income": self.gross_income,
            "currency_code": self.currency_code,
            "computed_tax": self.computed_tax,
            "net_income": self.net_income,
            "effective_rate": self.effective_rate,
            "timestamp": self.timestamp,
            "freeform_note": self.freeform_note,
            "is_favorite": self.is_favorite,
        }


# ─── Scenario comparison ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScenarioVariant:
    name: str
    params: TaxCalculationParams


@dataclass(frozen=True)
class ScenarioDelta:
    """Variant minus base."""

    net_income: float
    total_tax: float
    effective_rate: float

    @classmethod
    def between(cls, base: TaxBreakdown, variant: TaxBreakdown) -> "ScenarioDelta":
        return cls(
            net_income=variant.net_income - base.net_income,
            total_tax=variant.total_tax - base.total_tax,
            effective_rate=variant.effective_rate - base.effective_rate,
        )

    def to_dict(self) -> dict:
        return {
            "net_income": self.net_income,
            "total_tax": self.total_tax,
            "effective_rate": self.effective_rate,
        }


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    result: TaxBreakdown
    delta: ScenarioDelta

    def to_dict(self) -> dict:
        return {"name": self.name, "result": self.result.to_dict(), "delta": self.delta.to_dict()}


@dataclass(frozen=True)
class ScenarioComparison:
    base: TaxBreakdown
    variants: tuple = ()

    def to_dict(self) -> dict:
        return {
            "base": self.base.to_dict(),
            "variants": [v.to_dict() for v in self.variants],
        }
