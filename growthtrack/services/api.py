"""Thin REST client for the GrowthTrack backend.

Only the endpoints the timer screens log to are wrapped here; everything
goes through ``ApiClient.request``.
"""

from __future__ import annotations

import logging

import requests

from .storage import TokenStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """The backend could not be reached or rejected the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionExpired(ApiError):
    """401 from the backend.  The stored credentials have been cleared."""


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        tokens: TokenStore | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.tokens = tokens or TokenStore()
        self.timeout = timeout
        self._http = http or requests.Session()

    def close(self) -> None:
        self._http.close()

    def _headers(self, requires_auth: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if requires_auth:
            token = self.tokens.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body=None,
        requires_auth: bool = True,
    ):
        """Send one JSON request and return the decoded response body."""
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._http.request(
                method,
                url,
                headers=self._headers(requires_auth),
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ApiError(f"Network request failed: {exc}. URL: {url}") from exc

        if response.status_code == 401:
            self.tokens.clear()
            raise SessionExpired("Session expired. Please log in again.", 401)

        if not response.ok:
            try:
                data = response.json()
            except ValueError:
                data = {}
            message = "Request failed"
            if isinstance(data, dict):
                message = data.get("error") or data.get("message") or message
            raise ApiError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                f"Invalid response from server: {exc}. URL: {url}", response.status_code
            ) from exc

    # ── auth ──────────────────────────────────────────────────────────

    def login(self, email: str, password: str) -> dict:
        data = self.request(
            "/api/auth/login",
            method="POST",
            body={"email": email, "password": password},
            requires_auth=False,
        )
        if data and data.get("token"):
            self.tokens.set_token(data["token"])
            if data.get("user"):
                self.tokens.set_user(data["user"])
        return data

    def logout(self) -> None:
        self.tokens.clear()

    # ── session logs ──────────────────────────────────────────────────

    def log_workout(self, data: dict):
        return self.request("/api/workout", method="POST", body=data)

    def log_mental_health(self, data: dict):
        return self.request("/api/mental-health", method="POST", body=data)

    def log_pt_adherence(self, data: dict):
        return self.request("/api/pt-adherence", method="POST", body=data)
