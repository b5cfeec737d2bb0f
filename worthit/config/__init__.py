"""Configuration package."""

from worthit.config.settings import (
    AppSettings,
    GitHubSettings,
    GoogleSheetsSettings,
    RestApiSettings,
    Settings,
    StorageSettings,
    SwipeSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GitHubSettings",
    "GoogleSheetsSettings",
    "RestApiSettings",
    "Settings",
    "StorageSettings",
    "SwipeSettings",
    "get_settings",
    "validate_all_settings",
]
