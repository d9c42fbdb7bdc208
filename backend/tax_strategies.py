"""
Jurisdiction Tax Strategies
===========================
One strategy class per modeled jurisdiction, plus a generic fallback.

Every strategy follows the same pipeline (JurisdictionStrategy.calculate):
    1. validate gross income and currency
    2. parse the open parameter mapping into the jurisdiction's params class
    3. _compute(): deductions -> progressive brackets -> rebates -> flat
       contributions and surcharges, collected in a TaxComponents
    4. _assemble(): clamp negatives, cap the total at gross income, derive
       total and effective rate

All amounts are annual and in the jurisdiction's local currency.
"""

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Mapping, Optional, Type

import tax_data as td
from brackets import BracketTable, compute_tax, scale_table
from config import CLAMP_ORDER, CURRENCY_CODE_PATTERN, FALLBACK_BRACKETS, FALLBACK_CODE, get_logger
from errors import InvalidInputError
from jurisdiction_params import (
    AUParams,
    BRParams,
    CAParams,
    DEParams,
    EmptyParams,
    FRParams,
    INParams,
    JurisdictionParams,
    SGParams,
    UKParams,
    USParams,
    ZAParams,
)
from tax_models import COMPONENT_FIELDS, Deduction, TaxBreakdown

logger = get_logger(__name__)

_CURRENCY_RE = re.compile(CURRENCY_CODE_PATTERN)


def effective_rate(total_tax: float, gross_income: float) -> float:
    """total_tax / gross_income, or 0 when there is no income."""
    if gross_income <= 0:
        return 0.0
    return total_tax / gross_income


def apply_rebate(tax: float, rebate: float) -> float:
    """Subtract a rebate or credit from a tax amount, never going below zero."""
    return max(0.0, tax - rebate)


def capped_deduction(amount: float, cap: float, label: str, notes: List[str]) -> float:
    """Limit a claimed deduction to its cap; a reduced claim is recorded in ``notes``."""
    if amount > cap:
        notes.append(f"{label} capped at {cap:,.0f}.")
        return float(cap)
    return amount


@dataclass
class TaxComponents:
    """Mutable accumulator a strategy fills in during _compute()."""

    taxable_income: float = 0.0
    federal_or_national_tax: float = 0.0
    regional_tax: float = 0.0
    local_tax: float = 0.0
    social_contributions: float = 0.0
    health_contributions: float = 0.0
    other_deductions: float = 0.0
    marginal_rate: float = 0.0
    allocations: tuple = ()
    notes: List[str] = field(default_factory=list)


class JurisdictionStrategy(ABC):
    """
    Base class for a jurisdiction's tax algorithm.

    Subclasses set ``code``, ``name``, ``currency`` and ``params_type`` and
    implement ``bracket_table()`` and ``_compute()``.
    """

    code: ClassVar[str] = ""
    name: ClassVar[str] = ""
    currency: ClassVar[Optional[str]] = None  # None accepts any currency
    params_type: ClassVar[Type[JurisdictionParams]] = EmptyParams
    is_fallback: ClassVar[bool] = False

    @property
    def jurisdiction_code(self) -> str:
        return self.code

    @abstractmethod
    def bracket_table(self) -> BracketTable:
        """The primary income-tax table, for display."""

    def available_deductions(self) -> List[Deduction]:
        return []

    def describe(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "currency": self.currency,
            "is_fallback": self.is_fallback,
        }

    def validate_input(self, gross_income: Any, currency_code: Any) -> float:
        if isinstance(gross_income, bool) or not isinstance(gross_income, (int, float)):
            raise InvalidInputError("gross_income must be a number")
        if not math.isfinite(gross_income) or gross_income <= 0:
            raise InvalidInputError("gross_income must be a positive number")
        if not isinstance(currency_code, str) or not _CURRENCY_RE.match(currency_code.upper()):
            raise InvalidInputError(f"Invalid currency code: {currency_code!r}")
        if self.currency is not None and currency_code.upper() != self.currency:
            raise InvalidInputError(
                f"{self.name} calculations require {self.currency}, got {currency_code.upper()}"
            )
        return float(gross_income)

    def parse_params(self, jurisdiction_params: Optional[Mapping[str, Any]]) -> JurisdictionParams:
        return self.params_type.from_mapping(jurisdiction_params)

    def calculate(
        self,
        gross_income: float,
        currency_code: str,
        jurisdiction_params: Optional[Mapping[str, Any]] = None,
    ) -> TaxBreakdown:
        """
        Compute the tax breakdown for one gross income.

        Raises:
            InvalidInputError: non-positive income, wrong currency, or a
                malformed jurisdiction parameter.
        """
        gross = self.validate_input(gross_income, currency_code)
        params = self.parse_params(jurisdiction_params)
        logger.debug("Calculating %s tax on %.2f %s with %s", self.code, gross, currency_code, params)
        parts = self._compute(gross, params)
        return self._assemble(gross, currency_code.upper(), parts)

    @abstractmethod
    def _compute(self, gross: float, params: JurisdictionParams) -> TaxComponents:
        ...

    def _assemble(self, gross: float, currency_code: str, parts: TaxComponents) -> TaxBreakdown:
        values = {name: max(0.0, getattr(parts, name)) for name in COMPONENT_FIELDS}
        notes = list(parts.notes)

        total = sum(values.values())
        if total > gross:
            excess = total - gross
            for name in CLAMP_ORDER:
                cut = min(values[name], excess)
                values[name] -= cut
                excess -= cut
                if excess <= 0:
                    break
            total = sum(values.values())
            notes.append("Total tax capped at gross income.")

        return TaxBreakdown(
            jurisdiction_code=self.code,
            currency_code=currency_code,
            gross_income=gross,
            taxable_income=max(0.0, parts.taxable_income),
            total_tax=total,
            marginal_rate=parts.marginal_rate,
            effective_rate=effective_rate(total, gross),
            explanatory_note=" ".join(notes),
            allocations=tuple(parts.allocations),
            is_fallback=self.is_fallback,
            **values,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# UNITED STATES
# ═══════════════════════════════════════════════════════════════════════════════


class USStrategy(JurisdictionStrategy):
    code = "US"
    name = "United States"
    currency = "USD"
    params_type = USParams

    def bracket_table(self) -> BracketTable:
        return td.US_FEDERAL_BRACKETS["single"]

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction(
                "standard_deduction",
                "Federal standard deduction (single filer amount shown)",
                td.US_STANDARD_DEDUCTION["single"],
            ),
            Deduction(
                "retirement_contributions",
                "Pre-tax 401(k) contributions, reduce federal and state taxable income",
                td.US_RETIREMENT_CONTRIBUTION_CAP,
            ),
            Deduction(
                "hsa_contributions",
                "Health Savings Account contributions, reduce federal and state taxable income",
                td.US_HSA_CONTRIBUTION_CAP,
            ),
            Deduction("other_deductions", "Other eligible federal deductions", None),
        ]

    def _compute(self, gross: float, params: USParams) -> TaxComponents:
        status = params.filing_status
        notes = [f"Federal tax for filing status '{status}'."]
        pre_tax = capped_deduction(
            params.retirement_contributions, td.US_RETIREMENT_CONTRIBUTION_CAP, "Retirement contributions", notes
        ) + capped_deduction(params.hsa_contributions, td.US_HSA_CONTRIBUTION_CAP, "HSA contributions", notes)
        agi = gross - min(pre_tax, gross)
        taxable = max(0.0, agi - td.US_STANDARD_DEDUCTION[status] - params.other_deductions)

        federal = compute_tax(taxable, td.US_FEDERAL_BRACKETS[status])
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=federal.total_tax,
            marginal_rate=federal.marginal_rate,
            allocations=federal.allocations,
            notes=notes,
        )

        # State
        state = params.state
        state_taxable = max(0.0, agi - td.US_STATE_DEDUCTIONS.get(state, 0))
        if state in td.US_STATE_BRACKETS:
            parts.regional_tax = compute_tax(state_taxable, td.US_STATE_BRACKETS[state]).total_tax
        elif state in td.US_STATE_FLAT_RATES:
            parts.regional_tax = agi * td.US_STATE_FLAT_RATES[state]
        else:
            parts.regional_tax = agi * td.US_DEFAULT_STATE_RATE
            parts.notes.append(
                f"State '{state}' is not modeled; a {td.US_DEFAULT_STATE_RATE:.0%} flat rate was used."
            )

        # Local
        if params.city == "NYC" and state == "NY":
            parts.local_tax = compute_tax(state_taxable, td.US_NYC_BRACKETS).total_tax
        elif params.city:
            parts.notes.append(f"No local tax modeled for city '{params.city}'.")

        # FICA is levied on wages before retirement deferrals
        parts.social_contributions = min(gross, td.US_SS_WAGE_BASE) * td.US_SS_RATE
        threshold = td.US_ADDITIONAL_MEDICARE_THRESHOLD[status]
        parts.health_contributions = (
            gross * td.US_MEDICARE_RATE
            + max(0.0, gross - threshold) * td.US_ADDITIONAL_MEDICARE_RATE
        )
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# CANADA
# ═══════════════════════════════════════════════════════════════════════════════


def ontario_health_premium(income: float) -> float:
    """Ontario Health Premium: a base amount plus a capped phase-in per band."""
    for floor, ceiling, base, rate, band_cap in td.CA_ONTARIO_HEALTH_PREMIUM:
        if income <= floor:
            return 0.0
        if ceiling is None or income <= ceiling:
            return base + min(band_cap, (income - floor) * rate)
    return 0.0


class CAStrategy(JurisdictionStrategy):
    code = "CA"
    name = "Canada"
    currency = "CAD"
    params_type = CAParams

    def bracket_table(self) -> BracketTable:
        return td.CA_FEDERAL_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction(
                "basic_personal_amount",
                "Federal non-refundable credit at the lowest federal rate",
                td.CA_FEDERAL_PERSONAL_AMOUNT,
            ),
            Deduction(
                "ontario_basic_personal_amount",
                "Ontario non-refundable credit at the lowest Ontario rate",
                td.CA_ONTARIO_PERSONAL_AMOUNT,
            ),
            Deduction("rrsp_contributions", "RRSP contributions (annual limit)", td.CA_RRSP_CONTRIBUTION_CAP),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: CAParams) -> TaxComponents:
        notes = []
        deductions = capped_deduction(
            params.rrsp_contributions, td.CA_RRSP_CONTRIBUTION_CAP, "RRSP contributions", notes
        ) + params.other_deductions
        taxable = gross - min(deductions, gross)

        federal = compute_tax(taxable, td.CA_FEDERAL_BRACKETS)
        federal_credit = td.CA_FEDERAL_PERSONAL_AMOUNT * td.CA_FEDERAL_BRACKETS[0].rate
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=apply_rebate(federal.total_tax, federal_credit),
            marginal_rate=federal.marginal_rate,
            allocations=federal.allocations,
            notes=notes,
        )

        province = params.province
        if province == "ON":
            ontario = compute_tax(taxable, td.CA_ONTARIO_BRACKETS)
            ontario_credit = td.CA_ONTARIO_PERSONAL_AMOUNT * td.CA_ONTARIO_BRACKETS[0].rate
            basic = apply_rebate(ontario.total_tax, ontario_credit)
            surtax = sum(max(0.0, basic - threshold) * rate for threshold, rate in td.CA_ONTARIO_SURTAX)
            parts.regional_tax = basic + surtax
            parts.health_contributions = ontario_health_premium(taxable)
            parts.notes.append("Ontario tax includes surtax and the Ontario Health Premium.")
        else:
            parts.regional_tax = taxable * td.CA_PROVINCIAL_FLAT_RATES[province]
            parts.notes.append(f"Province {province} uses a flat effective rate.")

        cpp_earnings = max(0.0, min(gross, td.CA_CPP_MAX_EARNINGS) - td.CA_CPP_BASIC_EXEMPTION)
        parts.social_contributions = (
            cpp_earnings * td.CA_CPP_RATE + min(gross, td.CA_EI_MAX_EARNINGS) * td.CA_EI_RATE
        )
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# UNITED KINGDOM
# ═══════════════════════════════════════════════════════════════════════════════


def uk_personal_allowance(adjusted_income: float) -> float:
    """Personal allowance, reduced by 1 for every 2 of income above the taper start."""
    reduction = max(0.0, adjusted_income - td.UK_PA_TAPER_START) / 2
    return max(0.0, td.UK_PERSONAL_ALLOWANCE - reduction)


class UKStrategy(JurisdictionStrategy):
    code = "UK"
    name = "United Kingdom"
    currency = "GBP"
    params_type = UKParams

    def bracket_table(self) -> BracketTable:
        return td.UK_INCOME_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction(
                "personal_allowance",
                "Tax-free allowance, tapered away above £100,000",
                td.UK_PERSONAL_ALLOWANCE,
            ),
            Deduction(
                "pension_contributions",
                "Relief on pension contributions, up to the annual allowance",
                td.UK_PENSION_ANNUAL_ALLOWANCE,
            ),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: UKParams) -> TaxComponents:
        notes = []
        relief = capped_deduction(
            params.pension_contributions, td.UK_PENSION_ANNUAL_ALLOWANCE, "Pension contributions", notes
        ) + params.other_deductions
        adjusted = gross - min(relief, gross)
        allowance = uk_personal_allowance(adjusted)
        taxable = max(0.0, adjusted - allowance)

        table = td.UK_SCOTTISH_BRACKETS if params.is_scotland else td.UK_INCOME_BRACKETS
        income_tax = compute_tax(taxable, table)
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=income_tax.total_tax,
            marginal_rate=income_tax.marginal_rate,
            allocations=income_tax.allocations,
            notes=notes,
        )
        parts.notes.append(f"{table.name} bands applied after a personal allowance of {allowance:,.0f}.")

        parts.social_contributions = compute_tax(gross, td.UK_NI_BRACKETS).total_tax

        if params.student_loan_plan != "none":
            threshold, rate = td.UK_STUDENT_LOAN_PLANS[params.student_loan_plan]
            parts.other_deductions = max(0.0, gross - threshold) * rate
            parts.notes.append(f"Student loan repayments under {params.student_loan_plan}.")
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# AUSTRALIA
# ═══════════════════════════════════════════════════════════════════════════════


def medicare_levy_surcharge_rate(income: float, is_family: bool) -> float:
    rate = 0.0
    for single_threshold, family_threshold, tier_rate in td.AU_MLS_TIERS:
        threshold = family_threshold if is_family else single_threshold
        if income > threshold:
            rate = tier_rate
    return rate


class AUStrategy(JurisdictionStrategy):
    code = "AU"
    name = "Australia"
    currency = "AUD"
    params_type = AUParams

    def bracket_table(self) -> BracketTable:
        return td.AU_INCOME_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction(
                "super_contributions",
                "Concessional (pre-tax) superannuation contributions",
                td.AU_SUPER_CONCESSIONAL_CAP,
            ),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: AUParams) -> TaxComponents:
        notes = []
        deductions = capped_deduction(
            params.super_contributions, td.AU_SUPER_CONCESSIONAL_CAP, "Super contributions", notes
        ) + params.other_deductions
        taxable = gross - min(deductions, gross)

        income_tax = compute_tax(taxable, td.AU_INCOME_BRACKETS)
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=income_tax.total_tax,
            marginal_rate=income_tax.marginal_rate,
            allocations=income_tax.allocations,
            notes=notes,
        )
        parts.health_contributions = taxable * td.AU_MEDICARE_LEVY_RATE

        if not params.has_private_health:
            surcharge_rate = medicare_levy_surcharge_rate(taxable, params.is_family)
            if surcharge_rate:
                parts.health_contributions += taxable * surcharge_rate
                parts.notes.append(
                    f"Medicare levy surcharge of {surcharge_rate:.2%} applies without private hospital cover."
                )
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# GERMANY
# ═══════════════════════════════════════════════════════════════════════════════


class DEStrategy(JurisdictionStrategy):
    code = "DE"
    name = "Germany"
    currency = "EUR"
    params_type = DEParams

    def bracket_table(self) -> BracketTable:
        return td.DE_INCOME_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction("employee_allowance", "Flat allowance for work-related expenses", td.DE_EMPLOYEE_ALLOWANCE),
            Deduction(
                "social_insurance",
                "Employee social and health insurance contributions are deducted from taxable income",
                td.DE_PENSION_CAP * (td.DE_PENSION_RATE + td.DE_UNEMPLOYMENT_RATE),
            ),
            Deduction(
                "insurance_premiums",
                "Private insurance premiums beyond the statutory contributions",
                td.DE_INSURANCE_DEDUCTION_CAP,
            ),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: DEParams) -> TaxComponents:
        social = min(gross, td.DE_PENSION_CAP) * (td.DE_PENSION_RATE + td.DE_UNEMPLOYMENT_RATE)
        care_rate = td.DE_CARE_RATE
        if not params.has_children and params.age >= td.DE_CARE_CHILDLESS_MIN_AGE:
            care_rate += td.DE_CARE_CHILDLESS_SURCHARGE
        health = min(gross, td.DE_HEALTH_CAP) * (td.DE_HEALTH_RATE + care_rate)

        notes = []
        claimed = capped_deduction(
            params.insurance_premiums, td.DE_INSURANCE_DEDUCTION_CAP, "Insurance premiums", notes
        ) + params.other_deductions
        taxable = max(0.0, gross - td.DE_EMPLOYEE_ALLOWANCE - social - health - claimed)
        income_tax = compute_tax(taxable, td.DE_INCOME_BRACKETS)
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=income_tax.total_tax,
            social_contributions=social,
            health_contributions=health,
            marginal_rate=income_tax.marginal_rate,
            allocations=income_tax.allocations,
            notes=notes,
        )

        if income_tax.total_tax > td.DE_SOLI_THRESHOLD:
            parts.other_deductions += income_tax.total_tax * td.DE_SOLI_RATE
            parts.notes.append("Solidarity surcharge applied.")
        if params.is_church_member:
            parts.other_deductions += income_tax.total_tax * params.church_tax_rate
            parts.notes.append(f"Church tax at {params.church_tax_rate:.0%} of income tax.")
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# FRANCE
# ═══════════════════════════════════════════════════════════════════════════════


class FRStrategy(JurisdictionStrategy):
    code = "FR"
    name = "France"
    currency = "EUR"
    params_type = FRParams

    def bracket_table(self) -> BracketTable:
        return td.FR_INCOME_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction(
                "professional_abatement",
                "10% abatement for professional expenses, with a floor and a cap",
                td.FR_PROFESSIONAL_ABATEMENT_MAX,
                kind="percentage",
            ),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: FRParams) -> TaxComponents:
        abatement = min(
            max(gross * td.FR_PROFESSIONAL_ABATEMENT_RATE, td.FR_PROFESSIONAL_ABATEMENT_MIN),
            td.FR_PROFESSIONAL_ABATEMENT_MAX,
            gross,
        )
        taxable = max(0.0, gross - abatement - params.other_deductions)
        parts_count = params.family_parts

        # quotient familial: tax one part, multiply back
        per_part = compute_tax(taxable / parts_count, td.FR_INCOME_BRACKETS)
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=per_part.total_tax * parts_count,
            marginal_rate=per_part.marginal_rate,
            allocations=per_part.allocations,
        )
        parts.notes.append(
            f"Income tax computed per family part ({parts_count:g} parts); allocations are per part."
        )

        parts.social_contributions = (
            min(gross, td.FR_SOCIAL_CEILING) * td.FR_SOCIAL_CAPPED_RATE
            + gross * td.FR_SOCIAL_UNCAPPED_RATE
        )
        parts.other_deductions = gross * td.FR_CSG_BASE_FACTOR * td.FR_CSG_CRDS_RATE
        parts.notes.append("CSG/CRDS reported under other deductions.")
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# BRAZIL
# ═══════════════════════════════════════════════════════════════════════════════

BR_IRPF_ANNUAL_BRACKETS = scale_table(td.BR_IRPF_MONTHLY_BRACKETS, 12, "Brazil IRPF (annualized)")
BR_INSS_ANNUAL_BRACKETS = scale_table(td.BR_INSS_MONTHLY_BRACKETS, 12, "Brazil INSS (annualized)")


class BRStrategy(JurisdictionStrategy):
    code = "BR"
    name = "Brazil"
    currency = "BRL"
    params_type = BRParams

    def bracket_table(self) -> BracketTable:
        return BR_IRPF_ANNUAL_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction(
                "inss",
                "INSS contributions are deducted before IRPF (annual ceiling shown)",
                compute_tax(td.BR_INSS_MONTHLY_BRACKETS[-1].lower * 12, BR_INSS_ANNUAL_BRACKETS).total_tax,
                kind="percentage",
            ),
            Deduction(
                "dependents",
                "Per-dependent deduction (annual amount shown)",
                td.BR_DEPENDENT_DEDUCTION_MONTHLY * 12,
            ),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: BRParams) -> TaxComponents:
        inss = compute_tax(gross, BR_INSS_ANNUAL_BRACKETS).total_tax
        dependent_deduction = params.dependents * td.BR_DEPENDENT_DEDUCTION_MONTHLY * 12
        taxable = max(0.0, gross - inss - dependent_deduction - params.other_deductions)

        irpf = compute_tax(taxable, BR_IRPF_ANNUAL_BRACKETS)
        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=irpf.total_tax,
            social_contributions=inss,
            marginal_rate=irpf.marginal_rate,
            allocations=irpf.allocations,
        )
        parts.notes.append("Monthly IRPF and INSS tables annualized (x12).")
        if params.has_health_plan:
            parts.health_contributions = gross * td.BR_HEALTH_PLAN_RATE
            parts.notes.append("Private health plan contribution included.")
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# SOUTH AFRICA
# ═══════════════════════════════════════════════════════════════════════════════


def za_rebate(age: int) -> float:
    rebate = td.ZA_PRIMARY_REBATE
    if age >= 65:
        rebate += td.ZA_SECONDARY_REBATE
    if age >= 75:
        rebate += td.ZA_TERTIARY_REBATE
    return float(rebate)


def za_medical_credit(dependents: int) -> float:
    """Annual medical scheme fees tax credit for the main member plus dependents."""
    monthly = td.ZA_MEDICAL_CREDIT_MAIN
    if dependents >= 1:
        monthly += td.ZA_MEDICAL_CREDIT_FIRST_DEPENDENT
        monthly += (dependents - 1) * td.ZA_MEDICAL_CREDIT_ADDITIONAL
    return monthly * 12.0


class ZAStrategy(JurisdictionStrategy):
    code = "ZA"
    name = "South Africa"
    currency = "ZAR"
    params_type = ZAParams

    def bracket_table(self) -> BracketTable:
        return td.ZA_INCOME_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction("primary_rebate", "Rebate for all taxpayers", td.ZA_PRIMARY_REBATE),
            Deduction("secondary_rebate", "Additional rebate from age 65", td.ZA_SECONDARY_REBATE),
            Deduction("tertiary_rebate", "Additional rebate from age 75", td.ZA_TERTIARY_REBATE),
            Deduction(
                "medical_credit",
                "Medical scheme fees credit for the main member (annual)",
                td.ZA_MEDICAL_CREDIT_MAIN * 12,
            ),
            Deduction(
                "retirement_contributions",
                "Retirement annuity fund contributions",
                td.ZA_RETIREMENT_DEDUCTION_CAP,
            ),
            Deduction("other_deductions", "Other eligible deductions", None),
        ]

    def _compute(self, gross: float, params: ZAParams) -> TaxComponents:
        notes = []
        deductions = capped_deduction(
            params.retirement_contributions, td.ZA_RETIREMENT_DEDUCTION_CAP, "Retirement contributions", notes
        ) + params.other_deductions
        taxable = gross - min(deductions, gross)

        income_tax = compute_tax(taxable, td.ZA_INCOME_BRACKETS)
        tax = apply_rebate(income_tax.total_tax, za_rebate(params.age))
        if params.has_medical_aid:
            tax = apply_rebate(tax, za_medical_credit(params.medical_aid_dependents))

        parts = TaxComponents(
            taxable_income=taxable,
            federal_or_national_tax=tax,
            marginal_rate=income_tax.marginal_rate,
            allocations=income_tax.allocations,
            notes=notes,
        )
        parts.social_contributions = min(gross, td.ZA_UIF_CEILING_MONTHLY * 12) * td.ZA_UIF_RATE
        parts.notes.append("Age rebates are cumulative; UIF capped at the monthly ceiling.")
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# INDIA
# ═══════════════════════════════════════════════════════════════════════════════


def india_surcharge_rate(taxable: float, regime: str) -> float:
    rate = 0.0
    for threshold, tier_rate in td.IN_SURCHARGE_TIERS:
        if taxable > threshold:
            rate = tier_rate
            break
    if regime == "new":
        rate = min(rate, td.IN_NEW_REGIME_MAX_SURCHARGE)
    return rate


class INStrategy(JurisdictionStrategy):
    code = "IN"
    name = "India"
    currency = "INR"
    params_type = INParams

    def bracket_table(self) -> BracketTable:
        return td.IN_NEW_REGIME_BRACKETS

    def available_deductions(self) -> List[Deduction]:
        return [
            Deduction("standard_deduction", "Standard deduction (new regime amount shown)", td.IN_STANDARD_DEDUCTION["new"]),
            Deduction("section_80c", "Old regime: investments under section 80C", td.IN_80C_CAP),
            Deduction("section_80d", "Old regime: health insurance premiums (higher cap for seniors)", td.IN_80D_CAP),
            Deduction("hra", "Old regime: house rent allowance exemption", td.IN_HRA_CAP, kind="percentage"),
            Deduction("other_deductions", "Old regime: other eligible deductions", None),
        ]

    def _old_regime_table(self, age: int) -> BracketTable:
        if age >= td.IN_SUPER_SENIOR_AGE:
            return td.IN_OLD_REGIME_BRACKETS["super_senior"]
        if age >= td.IN_SENIOR_AGE:
            return td.IN_OLD_REGIME_BRACKETS["senior"]
        return td.IN_OLD_REGIME_BRACKETS["general"]

    def _compute(self, gross: float, params: INParams) -> TaxComponents:
        regime = params.regime
        deductions = td.IN_STANDARD_DEDUCTION[regime]
        notes = []

        if regime == "old":
            table = self._old_regime_table(params.age)
            cap_80d = td.IN_80D_SENIOR_CAP if params.age >= td.IN_SENIOR_AGE else td.IN_80D_CAP
            deductions += capped_deduction(params.section_80c, td.IN_80C_CAP, "Section 80C", notes)
            deductions += capped_deduction(params.section_80d, cap_80d, "Section 80D", notes)
            deductions += params.other_deductions
            if params.has_hra:
                deductions += min(gross * td.IN_HRA_RATE, td.IN_HRA_CAP)
        else:
            # the new regime allows only the standard deduction
            table = td.IN_NEW_REGIME_BRACKETS

        taxable = max(0.0, gross - deductions)
        slab = compute_tax(taxable, table)
        tax = slab.total_tax

        parts = TaxComponents(
            taxable_income=taxable,
            marginal_rate=slab.marginal_rate,
            allocations=slab.allocations,
            notes=notes,
        )
        parts.notes.append(f"{table.name} slabs.")

        limit, max_rebate = td.IN_REBATE_87A[regime]
        if params.is_resident and taxable <= limit:
            tax = apply_rebate(tax, max_rebate)
            parts.notes.append("Section 87A rebate applied.")

        surcharge = tax * india_surcharge_rate(taxable, regime)
        cess = (tax + surcharge) * td.IN_CESS_RATE
        parts.federal_or_national_tax = tax
        parts.other_deductions = surcharge + cess
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# SINGAPORE
# ═══════════════════════════════════════════════════════════════════════════════


def cpf_rate(age: int) -> float:
    for max_age, rate in td.SG_CPF_RATES:
        if max_age is None or age <= max_age:
            return rate
    return 0.0


class SGStrategy(JurisdictionStrategy):
    code = "SG"
    name = "Singapore"
    currency = "SGD"
    params_type = SGParams

    def bracket_table(self) -> BracketTable:
        return td.SG_RESIDENT_BRACKETS

    def _compute(self, gross: float, params: SGParams) -> TaxComponents:
        resident = compute_tax(gross, td.SG_RESIDENT_BRACKETS)
        parts = TaxComponents(
            taxable_income=gross,
            federal_or_national_tax=resident.total_tax,
            marginal_rate=resident.marginal_rate,
            allocations=resident.allocations,
        )

        if params.is_resident:
            wage_ceiling = td.SG_CPF_ORDINARY_WAGE_CEILING_MONTHLY * 12
            parts.social_contributions = min(gross, wage_ceiling) * cpf_rate(params.age)
            return parts

        flat = gross * td.SG_NON_RESIDENT_FLAT_RATE
        if flat > resident.total_tax:
            parts.federal_or_national_tax = flat
            parts.marginal_rate = td.SG_NON_RESIDENT_FLAT_RATE
        parts.notes.append("Non-resident: higher of the 15% flat rate and resident rates; no CPF.")
        return parts


# ═══════════════════════════════════════════════════════════════════════════════
# FALLBACK
# ═══════════════════════════════════════════════════════════════════════════════


class FallbackStrategy(JurisdictionStrategy):
    """Generic two-bracket approximation for jurisdictions without a strategy."""

    code = FALLBACK_CODE
    name = "Generic approximation"
    currency = None
    is_fallback = True

    def __init__(self, table: Optional[BracketTable] = None):
        self._table = table or BracketTable(FALLBACK_BRACKETS, name="Generic")

    def bracket_table(self) -> BracketTable:
        return self._table

    def _compute(self, gross: float, params: EmptyParams) -> TaxComponents:
        result = compute_tax(gross, self._table)
        return TaxComponents(
            taxable_income=gross,
            federal_or_national_tax=result.total_tax,
            marginal_rate=result.marginal_rate,
            allocations=result.allocations,
            notes=["Jurisdiction not modeled; generic approximation used."],
        )


def default_strategies() -> List[JurisdictionStrategy]:
    """Fresh instances of every built-in jurisdiction strategy."""
    return [
        USStrategy(),
        CAStrategy(),
        UKStrategy(),
        AUStrategy(),
        DEStrategy(),
        FRStrategy(),
        BRStrategy(),
        ZAStrategy(),
        INStrategy(),
        SGStrategy(),
    ]
