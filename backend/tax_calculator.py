"""
Tax Calculator Facade
=====================
Single entry point for callers: resolves the jurisdiction strategy through an
injected StrategyRegistry, falls back to a generic approximation when allowed,
and runs what-if scenario comparisons.

Usage:
    calculator = TaxCalculator(StrategyRegistry())
    breakdown = calculator.calculate(
        TaxCalculationParams(95_000, "USD", "US", {"filing_status": "married"})
    )
"""

from dataclasses import replace
from typing import Iterable, List, Optional

from config import get_logger
from errors import UnsupportedJurisdictionError
from registry import StrategyRegistry
from tax_models import (
    ScenarioComparison,
    ScenarioDelta,
    ScenarioResult,
    ScenarioVariant,
    TaxBreakdown,
    TaxCalculationParams,
)
from tax_strategies import FallbackStrategy, JurisdictionStrategy

logger = get_logger(__name__)

_DEFAULT_FALLBACK = object()


class TaxCalculator:
    def __init__(self, registry: StrategyRegistry, fallback=_DEFAULT_FALLBACK):
        """
        Args:
            registry: Where jurisdiction strategies are looked up.
            fallback: Strategy used for unregistered jurisdictions when the
                caller allows it. Defaults to FallbackStrategy(); pass None to
                disable fallback entirely.
        """
        self.registry = registry
        self.fallback: Optional[JurisdictionStrategy] = (
            FallbackStrategy() if fallback is _DEFAULT_FALLBACK else fallback
        )

    def calculate(self, params: TaxCalculationParams) -> TaxBreakdown:
        """
        Compute a tax breakdown.

        Raises:
            UnsupportedJurisdictionError: no strategy for the jurisdiction and
                fallback is disallowed or unavailable.
            InvalidInputError: propagated unchanged from the strategy.
        """
        code = params.jurisdiction_code
        try:
            strategy = self.registry.get(code)
        except UnsupportedJurisdictionError:
            if not params.allow_fallback or self.fallback is None:
                raise
            logger.info("No strategy for %s; using %s", code, type(self.fallback).__name__)
            result = self.fallback.calculate(
                params.gross_income, params.currency_code, params.jurisdiction_params
            )
            return replace(result, jurisdiction_code=code)

        return strategy.calculate(params.gross_income, params.currency_code, params.jurisdiction_params)

    def compare_scenarios(
        self,
        base_params: TaxCalculationParams,
        variants: Iterable[ScenarioVariant],
    ) -> ScenarioComparison:
        """Calculate the base and every variant; each delta is variant minus base."""
        base = self.calculate(base_params)
        results = []
        for variant in variants:
            result = self.calculate(variant.params)
            results.append(ScenarioResult(variant.name, result, ScenarioDelta.between(base, result)))
        return ScenarioComparison(base=base, variants=tuple(results))

    def list_jurisdictions(self) -> List[dict]:
        return [strategy.describe() for strategy in self.registry.strategies()]

    def jurisdiction_info(self, code: str) -> dict:
        """Describe one registered jurisdiction with its brackets and deductions."""
        strategy = self.registry.get(code)
        info = strategy.describe()
        info["brackets"] = strategy.bracket_table().to_list()
        info["deductions"] = [d.to_dict() for d in strategy.available_deductions()]
        return info
