from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from paper_gen.catalog import PaperCatalog
from paper_gen.config import ServiceConfig, load_config
from paper_gen.data_models import AppSettings
from paper_gen.delivery import EndpointDelivery, create_delivery
from paper_gen.guardrails import SubmissionGuard
from paper_gen.storage import SettingsStore
from paper_gen.utils.logging import configure_logging

logger = logging.getLogger(__name__)


class PaperSystem:
    """
    Facade wiring configuration, persisted settings, validation and delivery together.

    Front ends (CLI, Streamlit) build one of these via `from_config` and hand it to
    `GenerationService`; nothing downstream reads configuration or settings globally.

    Attributes
    ----------
    config : ServiceConfig
        Validated YAML configuration.
    settings_store : SettingsStore
        Persistence for the user's timeout and default-query preferences.
    guard : SubmissionGuard
        Pre-flight validation of file and query.
    catalog : PaperCatalog
        Bundled syllabus PDFs offered by the paper builder.
    session : requests.Session
        Shared HTTP session passed to every delivery.
    """

    def __init__(self, config: ServiceConfig, session: Optional[requests.Session] = None, configure_logs: bool = True):
        self.config = config
        if configure_logs:
            configure_logging(config.logging)
        self.settings_store = SettingsStore(config.paths.settings_file)
        self.guard = SubmissionGuard(config.uploads)
        self.catalog = PaperCatalog(config.paths.catalog_dir)
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config_path: Optional[Path] = None, **kwargs) -> "PaperSystem":
        return cls(load_config(config_path), **kwargs)

    def load_settings(self) -> AppSettings:
        return self.settings_store.load()

    def delivery(self, settings: Optional[AppSettings] = None) -> EndpointDelivery:
        """Build a delivery bound to the given (or currently stored) settings."""
        settings = settings or self.load_settings()
        return create_delivery(self.config, settings, session=self.session)
