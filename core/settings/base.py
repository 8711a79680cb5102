# core/settings/base.py
from pydantic_settings import BaseSettings

ENV_FILE = ".env"


class GuestflowBaseSettings(BaseSettings):
    """Shared loading rules: .env in the working directory, exact alias matching."""

    model_config = {
        "env_file": ENV_FILE,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
