from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator

DEFAULT_UPSTREAM_URL = "https://api-va5v.onrender.com/generate-questions"
MAX_UPLOAD_BYTES = 15 * 1024 * 1024
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class UpstreamConfig(BaseModel):
    """The external question-generation API the relay forwards to."""

    url: str = Field(DEFAULT_UPSTREAM_URL, description="Upstream generate endpoint.")
    timeout_seconds: float = Field(30.0, gt=0)


class RelayConfig(BaseModel):
    """Bind address and CORS policy for the local relay service."""

    host: str = Field("127.0.0.1")
    port: int = Field(8080, ge=1, le=65535)
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    ping_message: str = Field("ping")


class DeliveryConfig(BaseModel):
    """Where clients look for a working backend, and in which order."""

    base_url: str = Field("http://127.0.0.1:8080", description="Origin hosting the relay and proxies.")
    relay_path: str = Field("/api/generate-questions")
    proxy_paths: List[str] = Field(
        default_factory=lambda: ["/.netlify/functions/proxy", "/api/proxy", "/proxy"]
    )
    include_external: bool = True
    probe_proxies: bool = True
    probe_timeout_ms: int = Field(2500, ge=100)

    @field_validator("relay_path", "proxy_paths")
    @classmethod
    def paths_are_absolute(cls, value):
        """Candidate paths are joined onto base_url and must start with a slash."""
        items = value if isinstance(value, list) else [value]
        for item in items:
            if not item.startswith("/"):
                raise ValueError(f"path must start with '/': {item!r}")
        return value


class UploadConfig(BaseModel):
    """Limits applied to submitted PDFs before any network call."""

    max_bytes: int = Field(MAX_UPLOAD_BYTES, ge=1)
    require_pdf: bool = True


class PathsConfig(BaseModel):
    """Filesystem layout for persisted settings, downloads, and the paper catalog."""

    settings_file: Path = Field(Path("data/settings.json"))
    downloads_dir: Path = Field(Path("data/downloads"))
    catalog_dir: Path = Field(Path("datafiles"))


class LoggingConfig(BaseModel):
    """Controls for logging output and format."""

    level: str = Field("INFO")
    json_output: bool = Field(False, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class ServiceConfig(BaseModel):
    """Top-level project configuration aggregating all sub-settings."""

    project_name: str = Field("Test Paper Generator")
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
