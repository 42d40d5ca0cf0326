from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")

    assistant_api_url: str = Field(default="http://localhost:8000/api/assistant", alias="ASSISTANT_API_URL")
    assistant_request_timeout_seconds: float = Field(
        default=60.0,
        alias="ASSISTANT_REQUEST_TIMEOUT_SECONDS",
        gt=0,
    )
    assistant_mock_messages_file: str = Field(
        default="mock-data/assistant-messages.md",
        alias="ASSISTANT_MOCK_MESSAGES_FILE",
    )

    @property
    def enable_swagger(self) -> bool:
        return self.app_env.lower() == "local"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.app_env.lower() == "local" else "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
