"""
SQL DDL statements for all application tables.
Tables are created in dependency order so foreign keys resolve correctly.

The CHECK constraints repeat the business invariants so that a bug in the
service layer cannot persist an oversold record.
"""
from stock_tracker.db.database import get_connection

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    email             TEXT    NOT NULL UNIQUE,
    username          TEXT    NOT NULL UNIQUE,
    hashed_password   TEXT    NOT NULL,
    is_active         INTEGER NOT NULL DEFAULT 1,
    created_at        TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at        TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_STOCKS_TABLE = """
CREATE TABLE IF NOT EXISTS stocks (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id           INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    item_name          TEXT    NOT NULL CHECK(length(item_name) > 0),
    quantity_received  INTEGER NOT NULL CHECK(quantity_received >= 0),
    quantity_sold      INTEGER NOT NULL DEFAULT 0
                               CHECK(quantity_sold >= 0
                                     AND quantity_sold <= quantity_received),
    unit_price         REAL    NOT NULL CHECK(unit_price >= 0),
    selling_price      REAL             CHECK(selling_price >= 0),
    week               INTEGER NOT NULL CHECK(week >= 1),
    year               INTEGER NOT NULL,
    created_at         TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at         TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_STOCKS_OWNER_PERIOD_INDEX = """
CREATE INDEX IF NOT EXISTS ix_stocks_owner_period
    ON stocks (owner_id, year, week);
"""

ALL_STATEMENTS = [
    CREATE_USERS_TABLE,
    CREATE_STOCKS_TABLE,
    CREATE_STOCKS_OWNER_PERIOD_INDEX,
]


def create_tables() -> None:
    """Create all tables and indexes (safe on every restart)."""
    conn = get_connection()
    try:
        cursor = conn.cursor()
        for ddl in ALL_STATEMENTS:
            cursor.execute(ddl)
        conn.commit()
    finally:
        conn.close()
