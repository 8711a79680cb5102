# Settings package
from core.settings.app import AppSettings, get_app_settings
from core.settings.sections import (
    DatabaseSettings,
    PipelineSettings,
    PortalSettings,
    SheetsSettings,
)

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "PipelineSettings",
    "PortalSettings",
    "SheetsSettings",
    "get_app_settings",
]
