"""
Repository layer for StockRecord persistence.
All SQL for the `stocks` table lives here.

Every query takes the owner id: records are never read or written outside
the scope of the user they belong to.
"""
import sqlite3
from datetime import datetime, timezone
from typing import Optional
import logging

from stock_tracker.models.stock import StockRecord
from stock_tracker.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class StockRepository:
    """Data access layer for weekly stock records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing StockRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_for_owner(self, stock_id: int, owner_id: int) -> Optional[StockRecord]:
        """Return the record with *stock_id* if it belongs to *owner_id*."""
        logger.trace("Fetching stock id=%s owner_id=%s", stock_id, owner_id)
        row = self._conn.execute(
            "SELECT * FROM stocks WHERE id = ? AND owner_id = ?",
            (stock_id, owner_id),
        ).fetchone()
        return StockRecord.from_row(row) if row else None

    @log_db_timing
    def list_for_owner(self, owner_id: int) -> list[StockRecord]:
        """Return every record of *owner_id* in insertion order."""
        logger.trace("Listing stocks owner_id=%s", owner_id)
        rows = self._conn.execute(
            "SELECT * FROM stocks WHERE owner_id = ? ORDER BY id", (owner_id,)
        ).fetchall()
        return [StockRecord.from_row(r) for r in rows]

    @log_db_timing
    def filter_for_owner(
        self,
        owner_id: int,
        year: int,
        week: Optional[int] = None,
        start_week: Optional[int] = None,
        end_week: Optional[int] = None,
    ) -> list[StockRecord]:
        """
        Return the owner's records for *year*, ascending by week.

        A complete ``start_week``/``end_week`` pair selects the inclusive
        range and wins over ``week``; a lone ``week`` selects that week only.
        """
        clauses = ["owner_id = ?", "year = ?"]
        params: list = [owner_id, year]

        if start_week is not None and end_week is not None:
            clauses.append("week BETWEEN ? AND ?")
            params.extend([start_week, end_week])
        elif week is not None:
            clauses.append("week = ?")
            params.append(week)

        sql = f"SELECT * FROM stocks WHERE {' AND '.join(clauses)} ORDER BY week, id"
        logger.trace("Filtering stocks: %s %s", sql, params)
        rows = self._conn.execute(sql, params).fetchall()
        return [StockRecord.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def add(
        self,
        owner_id: int,
        item_name: str,
        quantity_received: int,
        unit_price: float,
        week: int,
        year: int,
        selling_price: Optional[float] = None,
    ) -> StockRecord:
        """Insert a new record with nothing sold yet and return it."""
        logger.info("Creating stock record owner_id=%s item=%s", owner_id, item_name)
        now = datetime.now(tz=timezone.utc).isoformat()
        cursor = self._conn.execute(
            """
            INSERT INTO stocks (
                owner_id, item_name, quantity_received, quantity_sold,
                unit_price, selling_price, week, year, created_at, updated_at
            )
            VALUES (?, ?, ?, 0, ?, ?, ?, ?, ?, ?)
            """,
            (
                owner_id,
                item_name,
                quantity_received,
                unit_price,
                selling_price,
                week,
                year,
                now,
                now,
            ),
        )
        return self.get_for_owner(cursor.lastrowid, owner_id)  # type: ignore[return-value]

    @log_db_timing
    def update_quantity_sold(
        self,
        stock_id: int,
        owner_id: int,
        quantity_sold: int,
    ) -> bool:
        """
        Set ``quantity_sold`` when it does not exceed what was received.

        The bound is part of the WHERE clause, so the check and the write
        happen in one statement. Returns False when no row was changed.
        """
        logger.info("Updating quantity sold stock id=%s", stock_id)
        now = datetime.now(tz=timezone.utc).isoformat()
        cursor = self._conn.execute(
            """
            UPDATE stocks
               SET quantity_sold = ?, updated_at = ?
             WHERE id = ? AND owner_id = ? AND quantity_received >= ?
            """,
            (quantity_sold, now, stock_id, owner_id, quantity_sold),
        )
        logger.info("Stock update affected %s rows", cursor.rowcount)
        return cursor.rowcount > 0
