"""
Repository layer for User persistence.
All SQL for the `users` table lives here.
"""
import sqlite3
from typing import Optional
from datetime import datetime, timezone
import logging

from stock_tracker.models.user import User
from stock_tracker.core.logging_config import log_db_timing

logger = logging.getLogger(__name__)


class UserRepository:
    """Data access layer for user records."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing UserRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @log_db_timing
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Return a user by id or None if missing."""
        row = self._conn.execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def get_by_email(self, email: str) -> Optional[User]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE email = ?", (email,)
        ).fetchone()
        return User.from_row(row) if row else None

    @log_db_timing
    def get_by_username(self, username: str) -> Optional[User]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()
        return User.from_row(row) if row else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_db_timing
    def create(self, email: str, username: str, hashed_password: str) -> User:
        """Insert a new user row and return the created user."""
        logger.info("Creating user record username=%s", username)
        now = datetime.now(tz=timezone.utc).isoformat()
        cursor = self._conn.execute(
            """
            INSERT INTO users (email, username, hashed_password, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (email, username, hashed_password, now, now),
        )
        return self.get_by_id(cursor.lastrowid)  # type: ignore[return-value]
