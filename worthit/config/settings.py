"""
Configuration Management for Worth-It Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Backend selection, swipe thresholds and credentials are all read
from the environment (or a .env file) and validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SwipeSettings(BaseSettings):
    """Swipe-to-delete gesture configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SWIPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    threshold_px: float = Field(
        default=100.0,
        gt=0,
        description="Pixels of leftward travel at which the row stops following the pointer"
    )
    time_limit_ms: float = Field(
        default=1000.0,
        gt=0,
        description="A swipe must be released within this many milliseconds"
    )
    arm_ratio: float = Field(
        default=0.6,
        gt=0.0,
        le=1.0,
        description="Fraction of the threshold that arms (and confirms) a delete"
    )
    animation_delay_ms: float = Field(
        default=300.0,
        ge=0,
        description="Length of the exit animation before storage is asked to delete"
    )

    @property
    def delete_distance_px(self) -> float:
        """Minimum leftward distance for a delete swipe."""
        return round(self.threshold_px * self.arm_ratio, 6)


class StorageSettings(BaseSettings):
    """Storage backend selection."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["local", "sheets", "github", "rest"] = Field(
        default="local",
        description="Primary storage backend"
    )
    fallback_to_local: bool = Field(
        default=True,
        description="Fall back to the local store when the primary backend fails"
    )
    mirror_writes: bool = Field(
        default=True,
        description="Copy successful remote writes to the local store"
    )
    data_dir: str = Field(
        default="~/.worthit",
        description="Directory for the local JSON store"
    )

    # File keys for the local store
    finance_key: str = Field(
        default="task_tracker_finances",
        description="Local store key for finance entries"
    )
    media_key: str = Field(
        default="task_tracker_media",
        description="Local store key for media entries"
    )

    @property
    def data_path(self) -> Path:
        """Expanded local data directory."""
        return Path(self.data_dir).expanduser()


class GitHubSettings(BaseSettings):
    """GitHub repository used as a JSON database."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    token: Optional[str] = Field(
        default=None,
        description="Personal access token with contents write access"
    )
    owner: str = Field(
        default="",
        description="Repository owner"
    )
    repo: str = Field(
        default="",
        description="Repository name"
    )
    branch: str = Field(
        default="main",
        description="Branch the data files live on"
    )
    data_path: str = Field(
        default="data",
        description="Folder inside the repository holding the JSON files"
    )
    api_base: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout"
    )


class RestApiSettings(BaseSettings):
    """Generic REST API backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REST_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    base_url: str = Field(
        default="",
        description="Base URL, e.g. https://example.org/api"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token sent with every request"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    finance_sheet_name: str = Field(
        default="Finances",
        description="Name of the sheet for finance entries"
    )
    media_sheet_name: str = Field(
        default="Media",
        description="Name of the sheet for media entries"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (console renderer otherwise)"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown in front of costs"
    )
    date_format: str = Field(
        default="%d/%m/%y",
        description="strftime format for entry dates"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def swipe(self) -> SwipeSettings:
        return SwipeSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def github(self) -> GitHubSettings:
        return GitHubSettings()

    @property
    def rest_api(self) -> RestApiSettings:
        return RestApiSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus
    {setting_name}_error entries for the ones that failed.
    Useful for startup checks and the settings page.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    sections = ["swipe", "storage", "github", "rest_api", "google_sheets", "app"]
    for name in sections:
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    # A backend can load without being usable; flag the obvious gaps
    if results.get("github"):
        github = settings.github
        if not (github.token and github.owner and github.repo):
            results["github"] = False
            results["github_error"] = "GITHUB_TOKEN, GITHUB_OWNER and GITHUB_REPO must be set"
    if results.get("rest_api") and not settings.rest_api.base_url:
        results["rest_api"] = False
        results["rest_api_error"] = "REST_API_BASE_URL is not set"

    return results
