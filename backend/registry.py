"""
Strategy Registry
=================
Maps jurisdiction codes to JurisdictionStrategy instances.

Reads are lock-free: the registry holds an immutable snapshot dict that is
replaced wholesale on every mutation (copy-on-write under a lock), so a
concurrent calculate() always sees a consistent mapping.

Usage:
    registry = StrategyRegistry()          # pre-populated with the built-ins
    registry.get("us").calculate(85_000, "USD")
    registry.register(MyStrategy())        # replaces any existing entry
"""

import re
import threading
from types import MappingProxyType
from typing import Iterable, Optional, Set

from brackets import BracketTable
from config import CURRENCY_CODE_PATTERN, get_logger
from errors import ConfigurationError, UnsupportedJurisdictionError
from tax_strategies import JurisdictionStrategy, default_strategies

logger = get_logger(__name__)

_CURRENCY_RE = re.compile(CURRENCY_CODE_PATTERN)


def _normalize(code: str) -> str:
    return code.strip().upper() if isinstance(code, str) else ""


class StrategyRegistry:
    """Thread-safe jurisdiction code -> strategy lookup."""

    def __init__(self, strategies: Optional[Iterable[JurisdictionStrategy]] = None):
        """
        Args:
            strategies: Strategies to register. Defaults to every built-in
                jurisdiction; pass an empty list for an empty registry.
        """
        self._lock = threading.Lock()
        self._strategies = MappingProxyType({})
        if strategies is None:
            strategies = default_strategies()
        for strategy in strategies:
            self.register(strategy)

    @staticmethod
    def _check(strategy: JurisdictionStrategy) -> str:
        """Validate a strategy before it becomes visible; returns its normalized code."""
        if not isinstance(strategy, JurisdictionStrategy):
            raise ConfigurationError(f"{strategy!r} is not a JurisdictionStrategy")
        code = _normalize(strategy.jurisdiction_code)
        if not code:
            raise ConfigurationError(f"{type(strategy).__name__} has no jurisdiction code")
        if strategy.currency is not None and not _CURRENCY_RE.match(strategy.currency):
            raise ConfigurationError(f"{code}: invalid currency code {strategy.currency!r}")
        table = strategy.bracket_table()
        if not isinstance(table, BracketTable):
            raise ConfigurationError(f"{code}: bracket_table() must return a BracketTable")
        return code

    def register(self, strategy: JurisdictionStrategy) -> None:
        """Add or replace the strategy for its jurisdiction code."""
        code = self._check(strategy)
        with self._lock:
            updated = dict(self._strategies)
            replaced = code in updated
            updated[code] = strategy
            self._strategies = MappingProxyType(updated)
        logger.info("%s strategy for %s (%s)", "Replaced" if replaced else "Registered", code, type(strategy).__name__)

    def unregister(self, code: str) -> bool:
        """Remove a strategy. Returns False if nothing was registered under ``code``."""
        code = _normalize(code)
        with self._lock:
            if code not in self._strategies:
                return False
            updated = dict(self._strategies)
            del updated[code]
            self._strategies = MappingProxyType(updated)
        logger.info("Unregistered strategy for %s", code)
        return True

    def get(self, code: str) -> JurisdictionStrategy:
        """
        Look up the strategy for ``code`` (case-insensitive).

        Raises:
            UnsupportedJurisdictionError: nothing registered for the code.
        """
        strategy = self._strategies.get(_normalize(code))
        if strategy is None:
            raise UnsupportedJurisdictionError(code)
        return strategy

    def has(self, code: str) -> bool:
        return _normalize(code) in self._strategies

    def list_codes(self) -> Set[str]:
        return set(self._strategies)

    def strategies(self) -> list:
        """Registered strategies sorted by code."""
        snapshot = self._strategies
        return [snapshot[code] for code in sorted(snapshot)]

    def __len__(self) -> int:
        return len(self._strategies)

    def __contains__(self, code: str) -> bool:
        return self.has(code)
