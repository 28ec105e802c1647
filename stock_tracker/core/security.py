"""
Security utilities: password hashing and JWT creation/verification.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
import logging

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from stock_tracker.core.config import settings
from stock_tracker.core.exceptions import AuthenticationExpired, AuthenticationInvalid

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """Return the bcrypt hash of *plain_password*."""
    logger.trace("Hashing user password")
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if *plain_password* matches *hashed_password*."""
    logger.trace("Verifying password hash")
    return pwd_context.verify(plain_password, hashed_password)


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------

def create_access_token(
    user_id: int,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Build and sign an access token whose ``sub`` claim is the user id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(tz=timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + expires_delta,
    }
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    logger.info("Issued access token for user id=%s", user_id)
    return token


def decode_token(token: str) -> dict:
    """
    Decode and verify a JWT.

    Raises:
        jose.ExpiredSignatureError: if the ``exp`` claim has passed.
        jose.JWTError: for any other signature or format problem.
    """
    logger.trace("Decoding JWT token")
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def verify_access_token(token: str) -> int:
    """
    Verify *token* and return the user id it was issued for.

    Expiry is reported separately from every other failure so clients can
    tell a stale session from a forged or garbled token.
    """
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        logger.warning("Access token expired")
        raise AuthenticationExpired()
    except JWTError:
        logger.warning("Access token failed verification")
        raise AuthenticationInvalid()

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        logger.warning("Access token type mismatch")
        raise AuthenticationInvalid()

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        logger.warning("Access token carries an unusable subject")
        raise AuthenticationInvalid()
