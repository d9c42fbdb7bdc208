"""
Tests for the TaxCalculator facade, scenario comparison and request params.

Run with: cd backend && python -m pytest tests/ -v
"""

import sys
from pathlib import Path

# Ensure backend directory is on path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from errors import InvalidInputError, UnsupportedJurisdictionError
from registry import StrategyRegistry
from tax_calculator import TaxCalculator
from tax_models import ScenarioVariant, TaxCalculationData, TaxCalculationParams


@pytest.fixture
def calculator():
    return TaxCalculator(StrategyRegistry())


class TestCalculate:
    def test_dispatches_to_registered_strategy(self, calculator):
        """A registered code is dispatched to its strategy, not the fallback."""
        result = calculator.calculate(TaxCalculationParams(50_000, "GBP", "uk"))
        assert result.jurisdiction_code == "UK"
        assert result.federal_or_national_tax == pytest.approx(7_486)
        assert not result.is_fallback

    def test_passes_jurisdiction_params(self, calculator):
        """Jurisdiction params change the result."""
        ruk = calculator.calculate(TaxCalculationParams(60_000, "GBP", "UK"))
        scot = calculator.calculate(TaxCalculationParams(60_000, "GBP", "UK", {"is_scotland": True}))
        assert scot.total_tax != ruk.total_tax

    def test_fallback_for_unknown_jurisdiction(self, calculator):
        """Unknown codes use the generic fallback but keep the requested code and currency."""
        result = calculator.calculate(TaxCalculationParams(50_000, "NOK", "NO"))
        assert result.is_fallback
        assert result.jurisdiction_code == "NO"
        assert result.currency_code == "NOK"
        assert result.total_tax == pytest.approx(9_500)

    def test_no_fallback_when_disallowed(self, calculator):
        """allow_fallback=False makes an unknown code an error."""
        with pytest.raises(UnsupportedJurisdictionError):
            calculator.calculate(TaxCalculationParams(50_000, "NOK", "NO", allow_fallback=False))

    def test_no_fallback_configured(self):
        """A calculator built without a fallback rejects unknown codes."""
        calculator = TaxCalculator(StrategyRegistry(), fallback=None)
        with pytest.raises(UnsupportedJurisdictionError):
            calculator.calculate(TaxCalculationParams(50_000, "NOK", "NO"))

    def test_strategy_errors_pass_through(self, calculator):
        """Strategy validation errors reach the caller unchanged."""
        with pytest.raises(InvalidInputError):
            calculator.calculate(TaxCalculationParams(50_000, "EUR", "US"))
        with pytest.raises(InvalidInputError):
            calculator.calculate(TaxCalculationParams(-1, "USD", "US"))

    def test_registry_changes_are_visible(self):
        """Unregistering a code takes effect on the next calculation."""
        registry = StrategyRegistry()
        calculator = TaxCalculator(registry)
        registry.unregister("AU")
        result = calculator.calculate(TaxCalculationParams(100_000, "AUD", "AU"))
        assert result.is_fallback


class TestCompareScenarios:
    def test_deltas_are_variant_minus_base(self, calculator):
        """Each delta is the variant result minus the base result."""
        base = TaxCalculationParams(80_000, "USD", "US", {"state": "CA"})
        variants = [
            ScenarioVariant("move_to_texas", base.with_overrides(jurisdiction_params={"state": "TX"})),
            ScenarioVariant("raise", base.with_overrides(gross_income=100_000)),
        ]
        comparison = calculator.compare_scenarios(base, variants)

        assert [v.name for v in comparison.variants] == ["move_to_texas", "raise"]
        for variant in comparison.variants:
            assert variant.delta.total_tax == pytest.approx(variant.result.total_tax - comparison.base.total_tax)
            assert variant.delta.net_income == pytest.approx(variant.result.net_income - comparison.base.net_income)
            assert variant.delta.effective_rate == pytest.approx(
                variant.result.effective_rate - comparison.base.effective_rate
            )
        assert comparison.variants[0].delta.total_tax < 0

    def test_cross_jurisdiction_variant(self, calculator):
        """A variant can switch jurisdiction and currency."""
        base = TaxCalculationParams(60_000, "GBP", "UK")
        comparison = calculator.compare_scenarios(
            base,
            [ScenarioVariant("australia", base.with_overrides(currency_code="AUD", jurisdiction_code="AU"))],
        )
        assert comparison.variants[0].result.jurisdiction_code == "AU"

    def test_no_variants(self, calculator):
        """With no variants only the base is computed."""
        comparison = calculator.compare_scenarios(TaxCalculationParams(60_000, "GBP", "UK"), [])
        assert comparison.variants == ()
        assert comparison.to_dict()["variants"] == []


class TestJurisdictionInfo:
    def test_list(self, calculator):
        """Listing describes all ten built-ins."""
        listing = calculator.list_jurisdictions()
        assert len(listing) == 10
        assert {"code": "IN", "name": "India", "currency": "INR", "is_fallback": False} in listing

    def test_info(self, calculator):
        """Info includes open-ended top brackets and deductions."""
        info = calculator.jurisdiction_info("za")
        assert info["currency"] == "ZAR"
        assert info["brackets"][0] == {"lower": 0.0, "upper": 237_100.0, "rate": 0.18}
        assert info["brackets"][-1]["upper"] is None
        assert any(d["name"] == "primary_rebate" for d in info["deductions"])

    def test_info_unknown(self, calculator):
        """Info for an unknown code raises UnsupportedJurisdictionError."""
        with pytest.raises(UnsupportedJurisdictionError):
            calculator.jurisdiction_info("XX")


class TestCalculationParams:
    def test_codes_normalized(self):
        """Codes are stripped and upper-cased."""
        params = TaxCalculationParams(1_000, " usd", "us ")
        assert params.currency_code == "USD"
        assert params.jurisdiction_code == "US"

    @pytest.mark.parametrize("currency", ["US", "DOLLARS", "U$D", ""])
    def test_bad_currency(self, currency):
        """Currency codes must be three letters."""
        with pytest.raises(InvalidInputError):
            TaxCalculationParams(1_000, currency, "US")

    def test_gross_must_be_number(self):
        """Strings and bools are not incomes."""
        with pytest.raises(InvalidInputError):
            TaxCalculationParams("1000", "USD", "US")
        with pytest.raises(InvalidInputError):
            TaxCalculationParams(True, "USD", "US")

    def test_params_are_read_only(self):
        """jurisdiction_params cannot be mutated after construction."""
        params = TaxCalculationParams(1_000, "USD", "US", {"state": "TX"})
        with pytest.raises(TypeError):
            params.jurisdiction_params["state"] = "CA"

    def test_with_overrides_merges_params(self):
        """Override params merge into the base params without touching the base."""
        base = TaxCalculationParams(1_000, "USD", "US", {"state": "TX", "filing_status": "married"})
        variant = base.with_overrides(jurisdiction_params={"state": "NY"})
        assert dict(variant.jurisdiction_params) == {"state": "NY", "filing_status": "married"}
        assert dict(base.jurisdiction_params)["state"] == "TX"

    @pytest.mark.parametrize("flag", ["no", 0, None])
    def test_allow_fallback_must_be_bool(self, flag):
        """allow_fallback is type-checked on construction and on overrides."""
        with pytest.raises(InvalidInputError, match="allow_fallback"):
            TaxCalculationParams(1_000, "USD", "US", allow_fallback=flag)
        base = TaxCalculationParams(1_000, "USD", "US")
        with pytest.raises(InvalidInputError, match="allow_fallback"):
            base.with_overrides(allow_fallback=flag)

    def test_from_dict_requires_fields(self):
        """from_dict names the missing required fields."""
        with pytest.raises(InvalidInputError, match="currency_code"):
            TaxCalculationParams.from_dict({"gross_income": 1_000, "jurisdiction_code": "US"})

    def test_from_dict(self):
        """from_dict reads allow_fallback and defaults params to empty."""
        params = TaxCalculationParams.from_dict(
            {"gross_income": 1_000, "currency_code": "usd", "jurisdiction_code": "us", "allow_fallback": False}
        )
        assert params.allow_fallback is False
        assert params.jurisdiction_params == {}


class TestCalculationData:
    def test_from_breakdown(self, calculator):
        """A breakdown becomes an unsaved record with a UTC timestamp."""
        breakdown = calculator.calculate(TaxCalculationParams(75_000, "SGD", "SG"))
        record = TaxCalculationData.from_breakdown(breakdown, "bonus year")
        assert record.jurisdiction == "SG"
        assert record.computed_tax == breakdown.total_tax
        assert record.net_income == pytest.approx(75_000 - breakdown.total_tax)
        assert record.freeform_note == "bonus year"
        assert record.id is None
        assert record.timestamp.endswith("+00:00")

    def test_breakdown_to_dict_is_full_precision(self, calculator):
        """to_dict keeps full precision for JSON."""
        breakdown = calculator.calculate(TaxCalculationParams(75_321.37, "AUD", "AU"))
        data = breakdown.to_dict()
        assert data["total_tax"] == breakdown.total_tax
        assert data["net_income"] == breakdown.net_income
        assert len(data["allocations"]) == 5
