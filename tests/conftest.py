"""Shared fixtures for settings, uploads and a temp-rooted service config."""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import BASE_URL, UPSTREAM_URL
from paper_gen.config.schema import DeliveryConfig, PathsConfig, ServiceConfig, UploadConfig, UpstreamConfig
from paper_gen.data_models import AppSettings, UploadedPdf


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(initial_timeout_ms=25000, retry_timeout_ms=55000, auto_retry=True)


@pytest.fixture
def pdf_upload() -> UploadedPdf:
    return UploadedPdf(filename="chapter.pdf", content_type="application/pdf", data=b"%PDF-1.4 minimal")


@pytest.fixture
def service_config(tmp_path: Path) -> ServiceConfig:
    """Config rooted in a temp dir, pointing delivery at a fake relay origin."""
    return ServiceConfig(
        upstream=UpstreamConfig(url=UPSTREAM_URL, timeout_seconds=5),
        delivery=DeliveryConfig(base_url=BASE_URL, probe_proxies=True),
        uploads=UploadConfig(),
        paths=PathsConfig(
            settings_file=tmp_path / "settings.json",
            downloads_dir=tmp_path / "downloads",
            catalog_dir=tmp_path / "datafiles",
        ),
    )
