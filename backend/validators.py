"""
Parameter Validation Module
===========================
Declarative validators for jurisdiction parameters and API payload fields.

Values arrive as already-typed primitives (JSON str/number/bool), so
validators check type, allowed values and numeric ranges but never coerce.

Usage:
    from validators import ParamValidator, validate_params

    FILING_STATUS = ParamValidator(
        name="filing_status",
        param_type=str,
        default="single",
        valid_values={"single", "married", "head_of_household"},
    )
    params = validate_params(raw_params, [FILING_STATUS])
    filing_status = params["filing_status"]
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Set, Union

from errors import InvalidInputError


@dataclass
class ParamValidator:
    """
    Declarative validator for a single parameter.

    Attributes:
        name: Parameter key in the incoming mapping
        param_type: Expected type (str, int, float, bool)
        default: Value used when the key is missing or None
        valid_values: Set of valid values (after normalization)
        min_val: Minimum value (for int/float)
        max_val: Maximum value (for int/float)
        normalize: Optional callable applied before checking valid_values
        error_msg: Custom error message
    """
    name: str
    param_type: type
    default: Any = None
    valid_values: Optional[Set[Any]] = None
    min_val: Optional[Union[int, float]] = None
    max_val: Optional[Union[int, float]] = None
    normalize: Optional[Callable[[Any], Any]] = None
    error_msg: Optional[str] = None

    def _type_ok(self, value: Any) -> bool:
        # bool is an int subclass; never accept it where a number is expected
        if self.param_type is bool:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self.param_type is float:
            return isinstance(value, (int, float))
        return isinstance(value, self.param_type)

    def validate(self, args: Mapping[str, Any]) -> Any:
        """
        Validate a parameter from ``args``.

        Returns:
            The validated (and normalized) value, or the default when missing.

        Raises:
            InvalidInputError: wrong type, disallowed value, or out of range.
        """
        raw = args.get(self.name)
        if raw is None:
            return self.default

        if not self._type_ok(raw):
            msg = self.error_msg or f"'{self.name}' must be a valid {self.param_type.__name__}"
            raise InvalidInputError(msg)

        # NaN slips past every range comparison below
        if isinstance(raw, float) and not math.isfinite(raw):
            raise InvalidInputError(f"{self.name} must be a finite number")

        value = self.normalize(raw) if self.normalize else raw

        if self.valid_values is not None and value not in self.valid_values:
            options = ", ".join(f"'{v}'" for v in sorted(self.valid_values, key=str))
            msg = self.error_msg or f"{self.name} must be one of: {options}"
            raise InvalidInputError(msg)

        if self.min_val is not None and value < self.min_val:
            msg = self.error_msg or f"{self.name} must be >= {self.min_val}"
            raise InvalidInputError(msg)

        if self.max_val is not None and value > self.max_val:
            msg = self.error_msg or f"{self.name} must be <= {self.max_val}"
            raise InvalidInputError(msg)

        return value


def validate_params(
    args: Optional[Mapping[str, Any]],
    validators: list[ParamValidator],
) -> dict:
    """
    Validate multiple parameters at once. Keys without a validator are ignored.

    Returns:
        dict mapping each validator's name to its validated value

    Raises:
        InvalidInputError on the first failing parameter
    """
    args = args or {}
    if not isinstance(args, Mapping):
        raise InvalidInputError("jurisdiction parameters must be a mapping")
    return {v.name: v.validate(args) for v in validators}


# ═══════════════════════════════════════════════════════════════════════════════
# PREDEFINED VALIDATORS
# Parameters shared by several jurisdictions
# ═══════════════════════════════════════════════════════════════════════════════


def age_validator(default: int = 30) -> ParamValidator:
    """Create an age validator with a jurisdiction-specific default."""
    return ParamValidator(
        name="age",
        param_type=int,
        default=default,
        min_val=0,
        max_val=130,
        error_msg="age must be a whole number between 0 and 130",
    )


def dependents_validator(name: str = "dependents", max_val: int = 20) -> ParamValidator:
    """Create a non-negative dependents-count validator."""
    return ParamValidator(
        name=name,
        param_type=int,
        default=0,
        min_val=0,
        max_val=max_val,
        error_msg=f"{name} must be a whole number between 0 and {max_val}",
    )


def flag_validator(name: str, default: bool = False) -> ParamValidator:
    """Create a boolean flag validator."""
    return ParamValidator(name=name, param_type=bool, default=default)


def amount_validator(name: str, max_val: Optional[float] = None) -> ParamValidator:
    """Create a non-negative money amount validator (defaults to 0)."""
    return ParamValidator(
        name=name,
        param_type=float,
        default=0.0,
        min_val=0,
        max_val=max_val,
    )


def code_validator(name: str, default: str, valid_values: Optional[Set[str]] = None) -> ParamValidator:
    """Create an upper-cased region/state code validator."""
    return ParamValidator(
        name=name,
        param_type=str,
        default=default,
        valid_values=valid_values,
        normalize=lambda v: v.strip().upper(),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# QUERY STRING HELPERS
# Query-string values always arrive as text, so these parse rather than check
# ═══════════════════════════════════════════════════════════════════════════════


def parse_optional_int(args: Mapping[str, str], name: str, min_val: Optional[int] = None) -> Optional[int]:
    """Parse an optional integer query parameter, raising InvalidInputError if malformed."""
    raw = args.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be an integer")
    if min_val is not None and value < min_val:
        raise InvalidInputError(f"{name} must be >= {min_val}")
    return value


def parse_flag(args: Mapping[str, str], name: str) -> bool:
    """True for 'true', '1' or 'yes' (any case); False when absent."""
    return str(args.get(name, "")).strip().lower() in ("true", "1", "yes")
