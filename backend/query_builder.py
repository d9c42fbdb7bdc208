"""
Query Builder Module
====================
Query construction for saved-calculation lookups with optional filters.

Usage:
    qb = QueryBuilder("SELECT * FROM saved_calculations")
    qb.add_filter("jurisdiction = ?", jurisdiction)
    qb.add_filter("is_favorite = ?", 1 if favorites_only else None)
    qb.order_by("timestamp DESC, id DESC").limit(50)
    query, params = qb.build()
    cursor.execute(query, params)
"""

from typing import Any, List, Optional, Tuple


class QueryBuilder:
    """
    Fluent SELECT builder. Filters whose value is None (or an empty string)
    are skipped, so optional request arguments can be passed straight in.
    """

    def __init__(self, base_query: str):
        self.base_query = base_query.strip()
        self.filters: List[Tuple[str, Any]] = []
        self._order_clause: Optional[str] = None
        self._limit: Optional[int] = None

    def add_filter(self, condition: str, value: Any) -> "QueryBuilder":
        """
        Add a WHERE condition with a single ``?`` placeholder.

        Returns:
            self for method chaining
        """
        if value is None or value == "":
            return self
        self.filters.append((condition, value))
        return self

    def order_by(self, clause: str) -> "QueryBuilder":
        self._order_clause = clause
        return self

    def limit(self, n: Optional[int]) -> "QueryBuilder":
        self._limit = n
        return self

    def build(self) -> Tuple[str, List[Any]]:
        """
        Returns:
            (query_string, params_list) ready for cursor.execute()
        """
        parts = [self.base_query]
        params: List[Any] = []

        for i, (condition, value) in enumerate(self.filters):
            parts.append(f"{'WHERE' if i == 0 else 'AND'} {condition}")
            params.append(value)

        if self._order_clause:
            parts.append(f"ORDER BY {self._order_clause}")

        if self._limit is not None:
            parts.append("LIMIT ?")
            params.append(int(self._limit))

        return " ".join(parts), params
