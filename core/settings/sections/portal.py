from pydantic import Field

from core.settings.base import GuestflowBaseSettings
from core.domain.value_objects import PortalCredentials


class PortalSettings(GuestflowBaseSettings):
    """
    Remote portal (Sakani) settings.
    Loaded from .env file with exact variable name matching.
    """

    email: str = Field(default="", alias="SAKANI_EMAIL")
    password: str = Field(default="", alias="SAKANI_PASSWORD", repr=False)
    property_id: str = Field(default="3005", alias="SAKANI_PROPERTY")
    login_url: str = Field(default="https://portal.sakani.ae/login", alias="SAKANI_LOGIN_URL")

    headless: bool = Field(default=True, alias="SAKANI_HEADLESS")
    slow_mo_ms: int = Field(default=250, alias="SAKANI_SLOW_MO_MS")
    default_timeout_seconds: float = Field(default=30.0, alias="SAKANI_TIMEOUT")
    step_timeout_seconds: float = Field(default=90.0, alias="SAKANI_STEP_TIMEOUT")
    confirmation_timeout_seconds: float = Field(default=15.0, alias="SAKANI_CONFIRMATION_TIMEOUT")
    diagnostics_dir: str = Field(default="./screenshots", alias="SAKANI_SCREENSHOT_PATH")

    @property
    def credentials(self) -> PortalCredentials:
        return PortalCredentials(email=self.email, password=self.password)
