"""
Jurisdiction Parameters
=======================
One typed parameter class per jurisdiction. The open ``jurisdiction_params``
mapping is parsed into these at the strategy boundary; unknown keys are
ignored and missing keys fall back to the defaults declared in VALIDATORS.

Usage:
    params = USParams.from_mapping({"filing_status": "married", "state": "ny"})
    params.state  # "NY"
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Optional

import tax_data as td
from errors import InvalidInputError
from validators import (
    ParamValidator,
    age_validator,
    amount_validator,
    code_validator,
    dependents_validator,
    flag_validator,
    validate_params,
)


class JurisdictionParams:
    """Mixin: builds a frozen params dataclass from an open mapping."""

    VALIDATORS: ClassVar[list] = []

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]):
        return cls(**validate_params(raw, cls.VALIDATORS))


@dataclass(frozen=True)
class EmptyParams(JurisdictionParams):
    """For strategies that take no parameters."""

    VALIDATORS: ClassVar[list] = []


@dataclass(frozen=True)
class USParams(JurisdictionParams):
    filing_status: str = "single"
    state: str = "CA"
    city: Optional[str] = None
    retirement_contributions: float = 0.0
    hsa_contributions: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        ParamValidator(
            name="filing_status",
            param_type=str,
            default="single",
            valid_values=set(td.US_FEDERAL_BRACKETS),
            normalize=lambda v: v.strip().lower(),
        ),
        ParamValidator(
            name="state",
            param_type=str,
            default="CA",
            normalize=lambda v: v.strip().upper(),
            error_msg="state must be a two-letter state code",
        ),
        code_validator("city", default=None),
        amount_validator("retirement_contributions"),
        amount_validator("hsa_contributions"),
        amount_validator("other_deductions"),
    ]

    def __post_init__(self):
        # state codes are open-ended (unknown states use the default rate),
        # but they must at least look like one
        if len(self.state) != 2 or not self.state.isalpha():
            raise InvalidInputError("state must be a two-letter state code")


@dataclass(frozen=True)
class CAParams(JurisdictionParams):
    province: str = "ON"
    rrsp_contributions: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        code_validator("province", default="ON", valid_values=set(td.CA_PROVINCES)),
        amount_validator("rrsp_contributions"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class UKParams(JurisdictionParams):
    student_loan_plan: str = "none"
    is_scotland: bool = False
    pension_contributions: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        ParamValidator(
            name="student_loan_plan",
            param_type=str,
            default="none",
            valid_values=set(td.UK_STUDENT_LOAN_PLANS) | {"none"},
            normalize=lambda v: v.strip().lower(),
        ),
        flag_validator("is_scotland"),
        amount_validator("pension_contributions"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class AUParams(JurisdictionParams):
    has_private_health: bool = False
    is_family: bool = False
    super_contributions: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        flag_validator("has_private_health"),
        flag_validator("is_family"),
        amount_validator("super_contributions"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class DEParams(JurisdictionParams):
    is_church_member: bool = False
    church_tax_rate: float = td.DE_DEFAULT_CHURCH_TAX_RATE
    has_children: bool = False
    age: int = 30
    insurance_premiums: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        flag_validator("is_church_member"),
        ParamValidator(
            name="church_tax_rate",
            param_type=float,
            default=td.DE_DEFAULT_CHURCH_TAX_RATE,
            valid_values=set(td.DE_CHURCH_TAX_RATES),
            error_msg="church_tax_rate must be 0.08 or 0.09",
        ),
        flag_validator("has_children"),
        age_validator(default=30),
        amount_validator("insurance_premiums"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class FRParams(JurisdictionParams):
    family_parts: float = 1.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        ParamValidator(
            name="family_parts",
            param_type=float,
            default=1.0,
            min_val=1,
            max_val=10,
            error_msg="family_parts must be between 1 and 10",
        ),
        amount_validator("other_deductions"),
    ]

    def __post_init__(self):
        if (self.family_parts * 2) % 1 != 0:
            raise InvalidInputError("family_parts must be a multiple of 0.5")


@dataclass(frozen=True)
class BRParams(JurisdictionParams):
    dependents: int = 0
    has_health_plan: bool = False
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        dependents_validator(),
        flag_validator("has_health_plan"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class ZAParams(JurisdictionParams):
    age: int = 30
    has_medical_aid: bool = False
    medical_aid_dependents: int = 0
    retirement_contributions: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        age_validator(default=30),
        flag_validator("has_medical_aid"),
        dependents_validator("medical_aid_dependents"),
        amount_validator("retirement_contributions"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class INParams(JurisdictionParams):
    regime: str = "new"
    age: int = 30
    is_resident: bool = True
    has_hra: bool = False
    section_80c: float = 0.0
    section_80d: float = 0.0
    other_deductions: float = 0.0

    VALIDATORS: ClassVar[list] = [
        ParamValidator(
            name="regime",
            param_type=str,
            default="new",
            valid_values={"new", "old"},
            normalize=lambda v: v.strip().lower(),
            error_msg="regime must be 'new' or 'old'",
        ),
        age_validator(default=30),
        flag_validator("is_resident", default=True),
        flag_validator("has_hra"),
        amount_validator("section_80c"),
        amount_validator("section_80d"),
        amount_validator("other_deductions"),
    ]


@dataclass(frozen=True)
class SGParams(JurisdictionParams):
    age: int = 30
    is_resident: bool = True

    VALIDATORS: ClassVar[list] = [
        age_validator(default=30),
        flag_validator("is_resident", default=True),
    ]
