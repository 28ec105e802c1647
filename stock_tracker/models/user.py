"""
Domain model (plain Python dataclass) representing a User row from the DB.
This is the internal representation used across service and repository layers.
"""
from dataclasses import dataclass
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


@dataclass
class User:
    id: int
    email: str
    username: str
    hashed_password: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "User":
        """Build a User from a sqlite3.Row object."""
        logger.trace("Hydrating User from database row")
        return cls(
            id=row["id"],
            email=row["email"],
            username=row["username"],
            hashed_password=row["hashed_password"],
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
