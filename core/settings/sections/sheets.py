from typing import Optional

from pydantic import Field

from core.settings.base import GuestflowBaseSettings


class SheetsSettings(GuestflowBaseSettings):
    """
    Google Sheets record store settings.
    Loaded from .env file with exact variable name matching.
    """

    spreadsheet_id: str = Field(default="", alias="GOOGLE_SHEETS_SPREADSHEET_ID")
    sheet_name: str = Field(default="Guests", alias="GOOGLE_SHEET_NAME")
    access_token: Optional[str] = Field(default=None, alias="GOOGLE_SHEETS_ACCESS_TOKEN")
    api_base_url: str = Field(
        default="https://sheets.googleapis.com/v4/spreadsheets",
        alias="GOOGLE_SHEETS_API_BASE_URL",
    )
    request_timeout_seconds: float = Field(default=30.0, alias="GOOGLE_SHEETS_TIMEOUT")
