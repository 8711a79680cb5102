# core/settings/app.py
from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.sections import (
    DatabaseSettings,
    PipelineSettings,
    PortalSettings,
    SheetsSettings,
)


class AppSettings(BaseModel):
    """
    Central application settings aggregator.
    Sections are loaded in get_app_settings() to prevent eager
    evaluation at import time.
    """

    model_config = ConfigDict(extra="ignore")

    sheets: SheetsSettings
    portal: PortalSettings
    pipeline: PipelineSettings
    database: DatabaseSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings(
        sheets=SheetsSettings(),
        portal=PortalSettings(),
        pipeline=PipelineSettings(),
        database=DatabaseSettings(),
    )
