"""
Domain model representing a stocks row from the DB.

Each row is one weekly line item for a single owner: what was received,
what has been sold so far and at which prices, keyed by (week, year).
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class StockRecord:
    id: int
    owner_id: int
    item_name: str
    quantity_received: int
    quantity_sold: int
    unit_price: float
    week: int
    year: int
    created_at: datetime
    updated_at: datetime
    selling_price: Optional[float] = None

    @property
    def quantity_remaining(self) -> int:
        return self.quantity_received - self.quantity_sold

    def can_sell(self, quantity_sold: int) -> bool:
        """True when *quantity_sold* keeps the record within what was received."""
        return quantity_sold <= self.quantity_received

    @classmethod
    def from_row(cls, row) -> "StockRecord":
        """Build a StockRecord from a sqlite3.Row object."""
        logger.trace("Hydrating StockRecord from database row")
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            item_name=row["item_name"],
            quantity_received=row["quantity_received"],
            quantity_sold=row["quantity_sold"],
            unit_price=row["unit_price"],
            selling_price=row["selling_price"],
            week=row["week"],
            year=row["year"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
