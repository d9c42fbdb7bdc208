"""
Error taxonomy for the tax engine.

InvalidInputError and UnsupportedJurisdictionError are caller errors and are
recoverable by fixing the request. ConfigurationError signals broken tax data
and should surface at startup, when strategies are registered.
"""


class TaxEngineError(Exception):
    """Base class for all tax engine errors."""


class InvalidInputError(TaxEngineError, ValueError):
    """Non-positive income, currency mismatch, or a malformed parameter value."""


class UnsupportedJurisdictionError(TaxEngineError, LookupError):
    """No strategy is registered for a jurisdiction and fallback is not allowed."""

    def __init__(self, jurisdiction_code: str):
        self.jurisdiction_code = jurisdiction_code
        super().__init__(f"No tax strategy registered for jurisdiction '{jurisdiction_code}'")


class ConfigurationError(TaxEngineError):
    """A bracket table or strategy definition violates its invariants."""
