"""
Authentication endpoints:
  POST /auth/register       – Create an account (public)
  POST /auth/login          – OAuth2 password flow, returns an access token
  GET  /auth/me             – Return the currently authenticated user's profile
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
import logging

from stock_tracker.core.dependencies import db_dependency, get_current_user_id
from stock_tracker.schemas.token import AccessToken
from stock_tracker.schemas.user import UserCreate, UserResponse
from stock_tracker.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new account",
)
def register(data: UserCreate, conn=Depends(db_dependency)):
    """
    Sign up. Each account only ever sees its own stock records.

    Password rules: >= 8 characters, at least one uppercase letter and one digit.
    """
    logger.info("Registration requested for username=%s", data.username)
    service = AuthService(conn)
    return service.register(data)


@router.post(
    "/login",
    response_model=AccessToken,
    summary="Login with username/email and password (OAuth2 Password Flow)",
)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    conn=Depends(db_dependency),
):
    """
    Standard OAuth2 Password Flow endpoint.
    - **username**: your username *or* email address
    - **password**: your password
    """
    logger.info("Login requested for username=%s", form_data.username)
    service = AuthService(conn)
    return service.login(form_data.username, form_data.password)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
def get_me(
    conn=Depends(db_dependency),
    user_id: int = Depends(get_current_user_id),
):
    """Return the profile of the currently authenticated user."""
    logger.info("Returning profile for user id=%s", user_id)
    service = AuthService(conn)
    return service.get_profile(user_id)
