from .settings_store import SETTINGS_KEY, KeyValueFile, SettingsStore

__all__ = ["KeyValueFile", "SETTINGS_KEY", "SettingsStore"]
