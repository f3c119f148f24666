"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "Cobot Dashboard"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # --- Server ---
    dashboard_host: str = "0.0.0.0"
    dashboard_port: int = 3003
    static_dir: str | None = None  # directory with the widget's html/js, served at /

    # --- Cobot ---
    cobot_base_url: str = Field(min_length=1)
    cobot_access_token: str = Field(min_length=1)  # server-side only — never logged
    cobot_admin_url: str | None = None  # defaults to cobot_base_url

    # --- Display ---
    display_timezone: str = "Europe/Berlin"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("cobot_base_url", "cobot_admin_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value

    @property
    def admin_url(self) -> str:
        return self.cobot_admin_url or self.cobot_base_url


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
