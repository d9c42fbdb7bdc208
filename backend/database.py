"""
Database setup for the Tax Calculator
"""

from config import DB_PATH, get_db, get_logger

logger = get_logger(__name__)


def create_database(db_path=None):
    """Create the database schema"""
    db_path = db_path or DB_PATH

    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # Saved calculations table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS saved_calculations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                jurisdiction TEXT NOT NULL,
                gross_income REAL NOT NULL,
                currency_code TEXT NOT NULL,
                computed_tax REAL NOT NULL,
                net_income REAL NOT NULL,
                effective_rate REAL NOT NULL,
                timestamp TEXT NOT NULL,
                freeform_note TEXT DEFAULT '',
                is_favorite INTEGER DEFAULT 0
            )
        """)

        # ─── Indexes ─────────────────────────────────────────────────────────

        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_saved_calculations_jurisdiction ON saved_calculations(jurisdiction)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_saved_calculations_favorite ON saved_calculations(is_favorite)"
        )

    logger.info("Database created at: %s", db_path)


if __name__ == "__main__":
    create_database()
