# Settings sections
from .database import DatabaseSettings
from .pipeline import PipelineSettings
from .portal import PortalSettings
from .sheets import SheetsSettings

__all__ = ["DatabaseSettings", "PipelineSettings", "PortalSettings", "SheetsSettings"]
