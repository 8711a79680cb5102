from pydantic import Field

from core.settings.base import GuestflowBaseSettings


class DatabaseSettings(GuestflowBaseSettings):
    """
    Database settings for the run lease and run history.
    Loaded from .env file with exact variable name matching.
    """

    database_url: str = Field(default="sqlite+aiosqlite:///./guestflow.db", alias="DB_DATABASE_URL")
    echo_sql: bool = Field(default=False, alias="DB_ECHO_SQL")
