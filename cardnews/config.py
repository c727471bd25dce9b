"""Application configuration loaded from environment variables."""

import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentProfile(BaseModel):
    """Attempt budgets and backoff delays for the current runtime environment."""

    file_access_attempts: int = Field(default=3, ge=1)
    file_access_base_delay: float = Field(default=0.5, ge=0)
    api_attempts: int = Field(default=3, ge=1)
    api_base_delay: float = Field(default=2.0, ge=0)


class Settings(BaseSettings):
    """Global application settings."""

    anthropic_api_key: Optional[str] = Field(
        default=None, description="Secret key for the Anthropic Messages API."
    )
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    anthropic_version: str = "2023-06-01"
    max_output_tokens: int = 4000
    input_char_budget: int = 4000
    request_timeout: float = 60.0

    private_root: str = str(Path(tempfile.gettempdir()) / "cardnews")
    history_path: str = "data/summaries.json"
    history_limit: int = 10
    usage_path: str = "data/usage.json"

    free_usage_limit: int = 2
    monthly_text_limit: int = 20
    monthly_image_limit: int = 10

    preview_length: int = 200
    max_file_size: int = 10 * 1024 * 1024

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    log_level: str = "INFO"
    profile: EnvironmentProfile = Field(default_factory=EnvironmentProfile)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def private_root_path(self) -> Path:
        return Path(self.private_root)

    @property
    def history_path_obj(self) -> Path:
        return Path(self.history_path)

    @property
    def usage_path_obj(self) -> Path:
        return Path(self.usage_path)


settings = Settings()
