from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MIN_TIMEOUT_MS = 5000


class AppSettings(BaseModel):
    """User-tunable request behaviour, stored with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    initial_timeout_ms: int = Field(25000, alias="initialTimeoutMs", ge=MIN_TIMEOUT_MS)
    retry_timeout_ms: int = Field(55000, alias="retryTimeoutMs", ge=MIN_TIMEOUT_MS)
    auto_retry: bool = Field(True, alias="autoRetry")
    default_query: str = Field("", alias="defaultQuery")

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True)


DEFAULT_SETTINGS = AppSettings()
