"""
HTTP client for the stock API used by the dashboard.
"""
from typing import Any, Optional
import logging

import requests

from stock_tracker.core.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request failed; ``status_code`` is None when no response arrived."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class StockApiClient:
    """Thin wrapper over ``requests`` that attaches the bearer token."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self.timeout = timeout or settings.CLIENT_TIMEOUT_SECONDS
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> str:
        """Exchange credentials for an access token and keep it for later calls."""
        data = self._request(
            "POST",
            "/auth/login",
            data={"username": username, "password": password},
            authenticated=False,
        )
        self.token = data["access_token"]
        return self.token

    def logout(self) -> None:
        self.token = None

    # ------------------------------------------------------------------
    # Stocks
    # ------------------------------------------------------------------

    def list_stocks(self) -> list[dict]:
        return self._request("GET", "/stocks/")

    def add_stock(self, payload: dict) -> dict:
        return self._request("POST", "/stocks/add", json=payload)

    def update_sales(self, stock_id: int, quantity_sold: int) -> dict:
        return self._request(
            "PUT",
            f"/stocks/update-sales/{stock_id}",
            json={"quantitySold": quantity_sold},
        )

    def filter_stocks(
        self,
        year: int,
        week: Optional[int] = None,
        start_week: Optional[int] = None,
        end_week: Optional[int] = None,
    ) -> list[dict]:
        params = {
            "year": year,
            "week": week,
            "startWeek": start_week,
            "endWeek": end_week,
        }
        return self._request(
            "GET",
            "/stocks/filter",
            params={k: v for k, v in params.items() if v is not None},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, authenticated: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if authenticated:
            if not self.token:
                raise ApiError("Not signed in", status_code=401)
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(f"Could not reach the server: {e}") from e

        if not response.ok:
            message = _error_message(response)
            logger.warning("%s %s -> %s %s", method, url, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise ApiError(
                "Unexpected response from the server", status_code=response.status_code
            ) from e


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        # FastAPI validation errors arrive as a list of dicts
        return "; ".join(
            str(item.get("msg", item)) if isinstance(item, dict) else str(item)
            for item in detail
        )
    return response.reason or f"HTTP {response.status_code}"
