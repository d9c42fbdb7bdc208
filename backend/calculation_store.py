"""
Saved Calculation Store
=======================
SQLite persistence for TaxCalculationData records: save, look up, list with
filters, toggle favorites, delete, and export to CSV.

The schema is created lazily on first use, so a fresh database path works
without a separate setup step.
"""

from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from config import DB_PATH, get_db, get_logger
from database import create_database
from query_builder import QueryBuilder
from tax_models import TaxCalculationData

logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "id",
    "timestamp",
    "jurisdiction",
    "currency_code",
    "gross_income",
    "computed_tax",
    "net_income",
    "effective_rate",
    "is_favorite",
    "freeform_note",
]


def _row_to_record(row) -> TaxCalculationData:
    return TaxCalculationData(
        id=row["id"],
        jurisdiction=row["jurisdiction"],
        gross_income=row["gross_income"],
        currency_code=row["currency_code"],
        computed_tax=row["computed_tax"],
        net_income=row["net_income"],
        effective_rate=row["effective_rate"],
        timestamp=row["timestamp"],
        freeform_note=row["freeform_note"] or "",
        is_favorite=bool(row["is_favorite"]),
    )


class CalculationStore:
    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = db_path or DB_PATH
        self._initialized = False

    def _ensure_schema(self) -> None:
        if not self._initialized:
            create_database(self.db_path)
            self._initialized = True

    def save(self, record: TaxCalculationData) -> TaxCalculationData:
        """Insert a record and return it with its new id."""
        self._ensure_schema()
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO saved_calculations (
                    jurisdiction, gross_income, currency_code, computed_tax,
                    net_income, effective_rate, timestamp, freeform_note, is_favorite
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    record.jurisdiction,
                    record.gross_income,
                    record.currency_code,
                    record.computed_tax,
                    record.net_income,
                    record.effective_rate,
                    record.timestamp,
                    record.freeform_note,
                    int(record.is_favorite),
                ),
            )
            new_id = cursor.lastrowid

        logger.info("Saved %s calculation #%d", record.jurisdiction, new_id)
        return self.get(new_id)

    def get(self, calculation_id: int) -> Optional[TaxCalculationData]:
        self._ensure_schema()
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM saved_calculations WHERE id = ?", (calculation_id,))
            row = cursor.fetchone()
        return _row_to_record(row) if row else None

    def list(
        self,
        jurisdiction: Optional[str] = None,
        favorites_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[TaxCalculationData]:
        """Saved calculations, newest first."""
        self._ensure_schema()
        qb = QueryBuilder("SELECT * FROM saved_calculations")
        qb.add_filter("jurisdiction = ?", jurisdiction.strip().upper() if jurisdiction else None)
        qb.add_filter("is_favorite = ?", 1 if favorites_only else None)
        qb.order_by("timestamp DESC, id DESC").limit(limit)
        query, params = qb.build()

        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    def set_favorite(self, calculation_id: int, is_favorite: bool) -> Optional[TaxCalculationData]:
        """Returns the updated record, or None if the id does not exist."""
        self._ensure_schema()
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE saved_calculations SET is_favorite = ? WHERE id = ?",
                (int(is_favorite), calculation_id),
            )
            updated = cursor.rowcount
        if not updated:
            return None
        logger.info("Calculation #%d favorite=%s", calculation_id, is_favorite)
        return self.get(calculation_id)

    def delete(self, calculation_id: int) -> bool:
        self._ensure_schema()
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM saved_calculations WHERE id = ?", (calculation_id,))
            deleted = cursor.rowcount
        if deleted:
            logger.info("Deleted calculation #%d", calculation_id)
        return bool(deleted)

    def to_dataframe(self, jurisdiction: Optional[str] = None, favorites_only: bool = False) -> pd.DataFrame:
        records = self.list(jurisdiction=jurisdiction, favorites_only=favorites_only)
        return pd.DataFrame([r.to_dict() for r in records], columns=EXPORT_COLUMNS)

    def export_csv(self, path=None, jurisdiction: Optional[str] = None, favorites_only: bool = False):
        """
        Export saved calculations as CSV.

        Args:
            path: File to write. When None, the CSV text is returned instead.
        """
        df = self.to_dataframe(jurisdiction=jurisdiction, favorites_only=favorites_only)
        if path is None:
            return df.to_csv(index=False)
        df.to_csv(path, index=False)
        logger.info("Exported %d calculations to %s", len(df), path)
        return path
