"""
Google Sheets values client.

Thin aiohttp wrapper over the Sheets v4 ``values`` endpoints. Token
minting is left to the caller: pass a static access token or an async
token provider.
"""
import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from core.application.interfaces import ISheetValuesClient
from core.domain.exceptions import GuestflowError
from guestflow_sdk.logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

TokenProvider = Callable[[], Awaitable[str]]


class SheetsApiError(GuestflowError):
    """Transport or API failure talking to Google Sheets."""

    retryable = True

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class GoogleSheetsClient(ISheetValuesClient):
    """Read and write spreadsheet ranges through the Sheets REST API."""

    def __init__(
        self,
        spreadsheet_id: str,
        access_token: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = 30.0,
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        """
        Initialize client.

        Args:
            spreadsheet_id: Spreadsheet ID from the sheet URL
            access_token: Static OAuth bearer token
            token_provider: Async callable returning a fresh bearer token;
                takes precedence over access_token
            api_base_url: Sheets API base URL
            timeout_seconds: Total timeout per request
            session_factory: aiohttp session factory
        """
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required")
        self.spreadsheet_id = spreadsheet_id
        self._access_token = access_token
        self._token_provider = token_provider
        self._base_url = api_base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session_factory = session_factory

    async def get_values(self, range_: str) -> list[list[str]]:
        url = f"{self._base_url}/{self.spreadsheet_id}/values/{quote(range_, safe='')}"
        data = await self._request("GET", url)
        return data.get("values", [])

    async def batch_update(self, data: list[dict[str, Any]]) -> None:
        if not data:
            return
        url = f"{self._base_url}/{self.spreadsheet_id}/values:batchUpdate"
        payload = {"valueInputOption": "RAW", "data": data}
        await self._request("POST", url, json=payload)
        logger.debug(f"Updated {len(data)} range(s) in spreadsheet {self.spreadsheet_id}")

    async def get_title(self) -> str:
        """Spreadsheet title; used to validate the connection at startup."""
        url = f"{self._base_url}/{self.spreadsheet_id}?fields=properties.title"
        data = await self._request("GET", url)
        return data.get("properties", {}).get("title", "")

    async def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = await self._token_provider() if self._token_provider else self._access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self, method: str, url: str, json: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        headers = await self._headers()
        try:
            async with self._session_factory(timeout=self._timeout) as session:
                async with session.request(method, url, json=json, headers=headers) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise SheetsApiError(
                            f"Sheets API error: {response.status} - {error_text[:300]}",
                            status=response.status,
                        )
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SheetsApiError(f"Sheets API request failed: {exc}") from exc
