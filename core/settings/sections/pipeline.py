from typing import Literal

from pydantic import Field

from core.settings.base import GuestflowBaseSettings


class PipelineSettings(GuestflowBaseSettings):
    """
    Orchestrator, retry and staging settings.
    Loaded from .env file with exact variable name matching.
    """

    max_attempts: int = Field(default=3, ge=1, alias="PIPELINE_MAX_ATTEMPTS")
    base_delay_seconds: float = Field(default=2.0, ge=0, alias="PIPELINE_BASE_DELAY")

    process_interval_seconds: float = Field(default=300.0, gt=0, alias="PIPELINE_PROCESS_INTERVAL")
    initial_delay_seconds: float = Field(default=5.0, ge=0, alias="PIPELINE_INITIAL_DELAY")

    download_dir: str = Field(default="./downloads/passports", alias="PIPELINE_DOWNLOAD_PATH")
    report_dir: str = Field(default="./logs", alias="PIPELINE_LOG_PATH")
    attachment_fetch_attempts: int = Field(default=2, ge=1, alias="PIPELINE_ATTACHMENT_ATTEMPTS")
    attachment_fetch_delay_seconds: float = Field(default=1.0, ge=0, alias="PIPELINE_ATTACHMENT_DELAY")
    attachment_timeout_seconds: float = Field(default=60.0, gt=0, alias="PIPELINE_ATTACHMENT_TIMEOUT")

    lock_backend: Literal["memory", "database"] = Field(default="memory", alias="PIPELINE_LOCK_BACKEND")
    lock_lease_seconds: float = Field(default=3600.0, gt=0, alias="PIPELINE_LOCK_LEASE")
    record_history: bool = Field(default=False, alias="PIPELINE_RECORD_HISTORY")
