"""Tests for GoogleSheetsClient."""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.infrastructure.record_store.sheets_client import GoogleSheetsClient, SheetsApiError

BASE_URL = "https://sheets.test/v4/spreadsheets"


def mock_session_factory(status: int = 200, payload=None, text: str = ""):
    """aiohttp.ClientSession stand-in returning one canned response."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload if payload is not None else {})
    response.text = AsyncMock(return_value=text)

    session = MagicMock()
    session.request.return_value.__aenter__.return_value = response

    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    return factory, session


def make_client(factory, **kwargs) -> GoogleSheetsClient:
    return GoogleSheetsClient(
        spreadsheet_id="sheet123",
        api_base_url=BASE_URL,
        session_factory=factory,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_get_values_returns_rows():
    factory, session = mock_session_factory(payload={"values": [["First Name"], ["Ana"]]})
    client = make_client(factory, access_token="token-1")

    rows = await client.get_values("Guests!1:2")

    assert rows == [["First Name"], ["Ana"]]
    method, url = session.request.call_args.args
    assert method == "GET"
    assert url == f"{BASE_URL}/sheet123/values/Guests%211%3A2"
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer token-1"


@pytest.mark.asyncio
async def test_get_values_without_values_key_is_empty():
    factory, _ = mock_session_factory(payload={"range": "Guests!A1:Z1000"})

    assert await make_client(factory).get_values("Guests") == []


@pytest.mark.asyncio
async def test_batch_update_posts_raw_values():
    factory, session = mock_session_factory(payload={"totalUpdatedCells": 1})
    client = make_client(factory)
    data = [{"range": "Guests!M2", "values": [["Completed"]]}]

    await client.batch_update(data)

    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == f"{BASE_URL}/sheet123/values:batchUpdate"
    assert session.request.call_args.kwargs["json"] == {"valueInputOption": "RAW", "data": data}


@pytest.mark.asyncio
async def test_batch_update_with_no_data_sends_nothing():
    factory, session = mock_session_factory()

    await make_client(factory).batch_update([])

    session.request.assert_not_called()


@pytest.mark.asyncio
async def test_token_provider_is_asked_for_every_request():
    factory, session = mock_session_factory(payload={"values": []})
    provider = AsyncMock(side_effect=["fresh-1", "fresh-2"])
    client = make_client(factory, access_token="stale", token_provider=provider)

    await client.get_values("Guests")
    await client.get_values("Guests")

    assert provider.await_count == 2
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer fresh-2"


@pytest.mark.asyncio
async def test_error_status_raises_sheets_api_error():
    factory, _ = mock_session_factory(status=403, text="PERMISSION_DENIED")

    with pytest.raises(SheetsApiError) as exc_info:
        await make_client(factory).get_values("Guests")

    assert exc_info.value.status == 403
    assert "PERMISSION_DENIED" in str(exc_info.value)
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_transport_error_raises_sheets_api_error():
    factory, session = mock_session_factory()
    session.request.side_effect = aiohttp.ClientConnectionError("connection refused")

    with pytest.raises(SheetsApiError, match="connection refused"):
        await make_client(factory).get_values("Guests")


@pytest.mark.asyncio
async def test_get_title():
    factory, _ = mock_session_factory(payload={"properties": {"title": "Guest Intake"}})

    assert await make_client(factory).get_title() == "Guest Intake"


def test_spreadsheet_id_is_required():
    with pytest.raises(ValueError):
        GoogleSheetsClient(spreadsheet_id="")
