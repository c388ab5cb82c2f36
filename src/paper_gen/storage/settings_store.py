from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError

from paper_gen.data_models import DEFAULT_SETTINGS, MIN_TIMEOUT_MS, AppSettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "app:settings"


class KeyValueFile:
    """A JSON object on disk used as a small key-value store."""

    def __init__(self, path: Path):
        """Ensure the backing directory exists and record the JSON filepath."""
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Any:
        return self.read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self.read_all()
        data[key] = value
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        tmp_path.replace(self.path)


class SettingsStore:
    """
    Load and persist `AppSettings` under a fixed key.

    Stored values are merged over the defaults on load, so a record written by an older
    version (or by hand) only needs the keys it wants to change. A stored field that no
    longer validates falls back to its default; the other stored fields are kept.
    """

    def __init__(self, path: Path, key: str = SETTINGS_KEY):
        self.store = KeyValueFile(path)
        self.key = key

    def load(self) -> AppSettings:
        stored = self.store.get(self.key)
        if stored is None:
            return DEFAULT_SETTINGS.model_copy()
        if not isinstance(stored, dict):
            logger.warning("Stored settings under %s are not an object; using defaults", self.key)
            return DEFAULT_SETTINGS.model_copy()
        stored = _to_aliases(stored)
        defaults = DEFAULT_SETTINGS.to_storage()
        try:
            return AppSettings.model_validate({**defaults, **stored})
        except ValidationError as exc:
            invalid = {error["loc"][0] for error in exc.errors() if error.get("loc")}
            logger.warning("Stored settings %s are invalid; using their defaults", sorted(map(str, invalid)))
        kept = {key: value for key, value in stored.items() if key not in invalid}
        try:
            return AppSettings.model_validate({**defaults, **kept})
        except ValidationError:
            return DEFAULT_SETTINGS.model_copy()

    def save(self, settings: Union[AppSettings, Mapping[str, Any]]) -> AppSettings:
        """Validate and persist. Mappings may be partial and use either key style."""
        if isinstance(settings, AppSettings):
            candidate = settings.to_storage()
        else:
            candidate = {**self.load().to_storage(), **_to_aliases(settings)}
        try:
            validated = AppSettings.model_validate(candidate)
        except ValidationError as exc:
            if _timeout_too_small(exc):
                raise ValueError(f"Timeouts must be at least {MIN_TIMEOUT_MS} ms.") from exc
            raise ValueError(f"Invalid settings: {exc}") from exc
        self.store.set(self.key, validated.to_storage())
        logger.info("Settings saved to %s", self.store.path)
        return validated

    def reset(self) -> AppSettings:
        defaults = DEFAULT_SETTINGS.model_copy()
        self.store.set(self.key, defaults.to_storage())
        logger.info("Settings reset to defaults")
        return defaults


def _to_aliases(values: Mapping[str, Any]) -> Dict[str, Any]:
    aliases = {name: field.alias for name, field in AppSettings.model_fields.items() if field.alias}
    return {aliases.get(key, key): value for key, value in values.items()}


def _timeout_too_small(exc: ValidationError) -> bool:
    return any(
        error.get("type") == "greater_than_equal"
        and error.get("loc", ("",))[0] in ("initialTimeoutMs", "retryTimeoutMs")
        for error in exc.errors()
    )
