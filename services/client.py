"""
Async client for the auth and favorites endpoints.

Every call goes to one configured base URL (``FAVORITES_API_URL``). The
client keeps the session token and the last known favorites list, which is
what ``is_favorite`` answers from.
"""
import os
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from dotenv import load_dotenv

from schemas.country import Country
from utils.errors import (
    AuthError,
    DuplicateError,
    GatewayError,
    InvalidCredentialsError,
    NotFoundError,
)

load_dotenv()

FAVORITES_API_URL = os.getenv("FAVORITES_API_URL", "http://localhost:8000/api")

logger = logging.getLogger(__name__)


class FavoritesClient:
    def __init__(
        self,
        base_url: str = FAVORITES_API_URL,
        *,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.user: Optional[Dict[str, Any]] = None
        self.favorites: List[Dict[str, Any]] = []
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=30.0)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _auth_headers(self) -> Dict[str, str]:
        if not self.token:
            raise AuthError("You must be logged in")
        return {"x-auth-token": self.token}

    async def _request(self, method: str, path: str, *, bad_request=DuplicateError, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s%s failed: %s", method, self.base_url, path, e)
            raise GatewayError(None, str(e)) from e

        if response.is_success:
            return response.json()

        try:
            message = response.json().get("message")
        except (ValueError, AttributeError):
            message = None
        if response.status_code == 400:
            raise bad_request(message)
        if response.status_code == 401:
            raise AuthError(message)
        if response.status_code == 404:
            raise NotFoundError(message)
        raise GatewayError(response.status_code, response.text)

    async def signup(self, username: str, password: str) -> None:
        await self._request("POST", "/signup", json={"username": username, "password": password})

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            "POST",
            "/login",
            bad_request=InvalidCredentialsError,
            json={"username": username, "password": password},
        )
        self.token = data["token"]
        self.user = data["user"]
        return self.user

    def logout(self) -> None:
        self.token = None
        self.user = None
        self.favorites = []

    async def current_user(self) -> Dict[str, Any]:
        try:
            self.user = await self._request("GET", "/user", headers=self._auth_headers())
        except AuthError:
            # stale or expired token
            self.logout()
            raise
        return self.user

    async def list_favorites(self) -> List[Dict[str, Any]]:
        self.favorites = await self._request("GET", "/favorites", headers=self._auth_headers())
        return self.favorites

    async def add_favorite(self, country: Country) -> Dict[str, Any]:
        favorite = await self._request(
            "POST",
            "/favorites",
            headers=self._auth_headers(),
            json={
                "countryCode": country.cca3,
                "countryName": country.name.common,
                "flagUrl": country.flag_url,
            },
        )
        self.favorites = self.favorites + [favorite]
        return favorite

    async def remove_favorite(self, country_code: str) -> None:
        country_code = country_code.strip().upper()
        await self._request(
            "DELETE", f"/favorites/{quote(country_code, safe='')}", headers=self._auth_headers()
        )
        self.favorites = [f for f in self.favorites if f["countryCode"].upper() != country_code]

    def is_favorite(self, country_code: str) -> bool:
        code = country_code.strip().upper()
        return any(f["countryCode"].upper() == code for f in self.favorites)

    async def aclose(self) -> None:
        await self._client.aclose()
