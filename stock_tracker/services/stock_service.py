"""
Stock tracking service.

Business rules:
  - Every record belongs to the user who created it; reads and writes are
    always scoped to the caller.
  - New records start with nothing sold.
  - The sold quantity can only change through update_sales and can never
    exceed the received quantity. Violations are rejected, not clamped.
"""
import sqlite3
from typing import Optional
import logging

from stock_tracker.core.exceptions import NotFound, ValidationFailed
from stock_tracker.models.stock import StockRecord
from stock_tracker.repositories.stock_repository import StockRepository
from stock_tracker.schemas.stock import StockCreate, StockSalesUpdate

logger = logging.getLogger(__name__)

STOCK_NOT_FOUND = "Stock not found"
OVERSELL_MESSAGE = "Cannot sell more than received quantity"


class StockService:
    """Business logic for weekly stock records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing StockService")
        self._repo = StockRepository(conn)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_stocks(self, owner_id: int) -> list[StockRecord]:
        """Return all records of *owner_id*; callers decide the display order."""
        logger.info("Listing stocks owner_id=%s", owner_id)
        return self._repo.list_for_owner(owner_id)

    def filter_stocks(
        self,
        owner_id: int,
        year: int,
        week: Optional[int] = None,
        start_week: Optional[int] = None,
        end_week: Optional[int] = None,
    ) -> list[StockRecord]:
        """Return the owner's records of *year* narrowed by week or week range."""
        logger.info(
            "Filtering stocks owner_id=%s year=%s week=%s range=%s..%s",
            owner_id,
            year,
            week,
            start_week,
            end_week,
        )
        return self._repo.filter_for_owner(
            owner_id,
            year,
            week=week,
            start_week=start_week,
            end_week=end_week,
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def add_stock(self, data: StockCreate, owner_id: int) -> StockRecord:
        """Persist a new record owned by *owner_id*."""
        logger.info("Adding stock item=%s owner_id=%s", data.item_name, owner_id)
        record = self._repo.add(
            owner_id=owner_id,
            item_name=data.item_name,
            quantity_received=data.quantity_received,
            unit_price=data.unit_price,
            selling_price=data.selling_price,
            week=data.week,
            year=data.year,
        )
        logger.info("Stock record created id=%s", record.id)
        return record

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_sales(
        self, stock_id: int, data: StockSalesUpdate, owner_id: int
    ) -> StockRecord:
        """
        Record how many units of a stock line have been sold.

        Records owned by other users are reported as missing.
        """
        logger.info("Updating sales stock id=%s owner_id=%s", stock_id, owner_id)
        record = self._repo.get_for_owner(stock_id, owner_id)
        if record is None:
            logger.warning("Stock id=%s not found for owner_id=%s", stock_id, owner_id)
            raise NotFound(STOCK_NOT_FOUND)

        if not record.can_sell(data.quantity_sold):
            logger.warning(
                "Oversell rejected stock id=%s sold=%s received=%s",
                stock_id,
                data.quantity_sold,
                record.quantity_received,
            )
            raise ValidationFailed(OVERSELL_MESSAGE)

        if not self._repo.update_quantity_sold(stock_id, owner_id, data.quantity_sold):
            # quantity_received cannot change, so a miss here means the row vanished
            logger.warning("Stock id=%s disappeared during update", stock_id)
            raise NotFound(STOCK_NOT_FOUND)

        updated = self._repo.get_for_owner(stock_id, owner_id)
        logger.info("Stock sales updated id=%s sold=%s", stock_id, data.quantity_sold)
        return updated  # type: ignore[return-value]
