"""
Async client for the REST Countries API.
"""
import os
import logging
from typing import List, Optional
from urllib.parse import quote

import httpx
from dotenv import load_dotenv

from schemas.country import Country
from utils.errors import GatewayError

load_dotenv()

COUNTRIES_API_URL = os.getenv("COUNTRIES_API_URL", "https://restcountries.com/v3.1")
COUNTRIES_API_TIMEOUT = float(os.getenv("COUNTRIES_API_TIMEOUT", "30"))

logger = logging.getLogger(__name__)


class CountryGateway:
    """Read-only access to the country endpoints: all, name, region, alpha."""

    def __init__(
        self,
        base_url: str = COUNTRIES_API_URL,
        *,
        timeout: float = COUNTRIES_API_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    async def _get(self, path: str) -> List[Country]:
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as e:
            logger.error("Request to %s%s failed: %s", self.base_url, path, e)
            raise GatewayError(None, str(e)) from e

        if not response.is_success:
            logger.error(
                "Request to %s%s returned %s", self.base_url, path, response.status_code
            )
            raise GatewayError(response.status_code, response.text)

        try:
            data = response.json()
            # The alpha endpoint answers with an object for some lookups.
            if isinstance(data, dict):
                data = [data]
            return [Country.model_validate(item) for item in data]
        except ValueError as e:
            logger.error("Unreadable payload from %s%s: %s", self.base_url, path, e)
            raise GatewayError(response.status_code, response.text) from e

    async def all(self) -> List[Country]:
        return await self._get("/all")

    async def by_name(self, term: str) -> List[Country]:
        return await self._get(f"/name/{quote(term, safe='')}")

    async def by_region(self, region: str) -> List[Country]:
        return await self._get(f"/region/{quote(region, safe='')}")

    async def by_code(self, code: str) -> List[Country]:
        return await self._get(f"/alpha/{quote(code, safe='')}")

    async def aclose(self) -> None:
        await self._client.aclose()
