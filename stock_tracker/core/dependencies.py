"""
FastAPI dependency injection helpers for database access and authentication.
"""
from typing import Generator, Optional
import logging

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from stock_tracker.core.exceptions import AuthenticationMissing
from stock_tracker.core.security import verify_access_token
from stock_tracker.db.database import get_db

logger = logging.getLogger(__name__)

# auto_error is off so a missing header maps onto our own error category.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# DB dependency
# ---------------------------------------------------------------------------

def db_dependency() -> Generator:
    """Yield a database connection for the duration of a request."""
    logger.trace("Creating database dependency connection")
    with get_db() as conn:
        yield conn


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

def get_current_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> int:
    """
    Verify the Bearer token and return the identity it carries.

    No database round trip happens here: the signed ``sub`` claim is the
    caller's identity for every stock query.
    """
    if not token:
        logger.warning("Request without bearer token")
        raise AuthenticationMissing()
    user_id = verify_access_token(token)
    logger.info("Authenticated user id=%s", user_id)
    return user_id
