"""
Account service: self-service registration, login and profile lookup.
"""
import sqlite3
import logging

from fastapi import HTTPException, status

from stock_tracker.core.exceptions import Conflict, NotFound
from stock_tracker.core.security import (
    create_access_token,
    hash_password,
    verify_password,
)
from stock_tracker.models.user import User
from stock_tracker.repositories.user_repository import UserRepository
from stock_tracker.schemas.token import AccessToken
from stock_tracker.schemas.user import UserCreate

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, conn: sqlite3.Connection) -> None:
        logger.trace("Initializing AuthService")
        self._user_repo = UserRepository(conn)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, data: UserCreate) -> User:
        """Create an account; email and username must both be unused."""
        logger.info("Registering user %s", data.username)
        if self._user_repo.get_by_email(data.email):
            logger.warning("Duplicate email registration attempt: %s", data.email)
            raise Conflict("Email is already registered")
        if self._user_repo.get_by_username(data.username):
            logger.warning("Duplicate username registration attempt: %s", data.username)
            raise Conflict("Username is already taken")

        try:
            user = self._user_repo.create(
                email=data.email,
                username=data.username,
                hashed_password=hash_password(data.password),
            )
        except sqlite3.IntegrityError as e:
            # a concurrent sign-up took the email or username after the checks above
            logger.warning("Registration for %s lost a uniqueness race: %s", data.username, e)
            raise Conflict("Email or username is already registered") from e
        logger.info("User registered id=%s", user.id)
        return user

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> AccessToken:
        """
        Validate credentials and issue an access token.
        Accepts either username or email in the *username* field.
        """
        logger.info("Authenticating user '%s'", username)
        user = (
            self._user_repo.get_by_username(username)
            or self._user_repo.get_by_email(username)
        )

        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Invalid login attempt for '%s'", username)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect username or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not user.is_active:
            logger.warning("Inactive user attempted login id=%s", user.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inactive user account",
            )

        logger.info("Login successful for user id=%s", user.id)
        return AccessToken(access_token=create_access_token(user.id))

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, user_id: int) -> User:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            logger.warning("Token subject id=%s has no account", user_id)
            raise NotFound("User not found")
        return user
