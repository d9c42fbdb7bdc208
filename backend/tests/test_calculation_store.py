"""
Tests for saved-calculation persistence (sqlite) and CSV export (pandas).

Run with: cd backend && python -m pytest tests/ -v
"""

import sys
from pathlib import Path

# Ensure backend directory is on path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd
import pytest

from calculation_store import EXPORT_COLUMNS, CalculationStore
from query_builder import QueryBuilder
from tax_models import TaxCalculationData


def make_record(jurisdiction="US", gross=100_000.0, tax=20_000.0, note="", timestamp="2024-05-01T12:00:00+00:00"):
    return TaxCalculationData(
        jurisdiction=jurisdiction,
        gross_income=gross,
        currency_code="USD",
        computed_tax=tax,
        net_income=gross - tax,
        effective_rate=tax / gross,
        timestamp=timestamp,
        freeform_note=note,
    )


@pytest.fixture
def store(tmp_path):
    return CalculationStore(tmp_path / "calculations.db")


class TestQueryBuilder:
    def test_no_filters(self):
        """Without filters the base query is unchanged."""
        query, params = QueryBuilder("SELECT * FROM saved_calculations").build()
        assert query == "SELECT * FROM saved_calculations"
        assert params == []

    def test_skips_empty_values(self):
        """None and empty filter values are skipped."""
        qb = QueryBuilder("SELECT * FROM t")
        qb.add_filter("a = ?", None).add_filter("b = ?", "").add_filter("c = ?", 3)
        query, params = qb.build()
        assert query == "SELECT * FROM t WHERE c = ?"
        assert params == [3]

    def test_order_and_limit(self):
        """Filters are ANDed, then ORDER BY and a parameterized LIMIT."""
        query, params = (
            QueryBuilder("SELECT * FROM t")
            .add_filter("a = ?", 1)
            .add_filter("b = ?", 2)
            .order_by("id DESC")
            .limit(10)
            .build()
        )
        assert query == "SELECT * FROM t WHERE a = ? AND b = ? ORDER BY id DESC LIMIT ?"
        assert params == [1, 2, 10]


class TestCalculationStore:
    def test_save_assigns_id(self, store):
        """Saving assigns an id and the record reads back unchanged."""
        saved = store.save(make_record(note="first"))
        assert saved.id is not None
        assert saved.freeform_note == "first"
        assert saved.is_favorite is False
        assert store.get(saved.id) == saved

    def test_get_missing(self, store):
        """An unknown id returns None."""
        assert store.get(999) is None

    def test_list_newest_first(self, store):
        """Listing is newest first."""
        old = store.save(make_record(timestamp="2024-01-01T00:00:00+00:00"))
        new = store.save(make_record(timestamp="2024-06-01T00:00:00+00:00"))
        assert [r.id for r in store.list()] == [new.id, old.id]

    def test_list_filters(self, store):
        """Listing filters by jurisdiction, favorites and limit."""
        us = store.save(make_record("US"))
        store.save(make_record("UK"))
        store.set_favorite(us.id, True)

        assert [r.jurisdiction for r in store.list(jurisdiction="uk")] == ["UK"]
        assert [r.id for r in store.list(favorites_only=True)] == [us.id]
        assert len(store.list(limit=1)) == 1

    def test_set_favorite(self, store):
        """Favorite toggles both ways; unknown ids return None."""
        saved = store.save(make_record())
        assert store.set_favorite(saved.id, True).is_favorite is True
        assert store.set_favorite(saved.id, False).is_favorite is False
        assert store.set_favorite(12345, True) is None

    def test_delete(self, store):
        """Delete removes the record and reports whether it existed."""
        saved = store.save(make_record())
        assert store.delete(saved.id) is True
        assert store.get(saved.id) is None
        assert store.delete(saved.id) is False

    def test_export_csv_text(self, store):
        """CSV text has the export header and quotes commas."""
        store.save(make_record("US", note="with, comma"))
        store.save(make_record("UK"))
        csv_text = store.export_csv()
        lines = csv_text.strip().splitlines()
        assert lines[0] == ",".join(EXPORT_COLUMNS)
        assert len(lines) == 3
        assert '"with, comma"' in csv_text

    def test_export_csv_file(self, store, tmp_path):
        """CSV written to a file reads back with pandas."""
        store.save(make_record("US", gross=80_000.0, tax=16_000.0))
        out = store.export_csv(tmp_path / "export.csv")
        df = pd.read_csv(out)
        assert list(df.columns) == EXPORT_COLUMNS
        assert df.loc[0, "effective_rate"] == pytest.approx(0.2)

    def test_export_empty(self, store):
        """An empty store exports an empty frame with the export columns."""
        df = store.to_dataframe()
        assert df.empty
        assert list(df.columns) == EXPORT_COLUMNS
