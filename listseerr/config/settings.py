"""ListSeerr Configuration Settings."""

import os
from functools import cached_property, lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)
from tzlocal import get_localzone_name

from listseerr.exceptions import ProfileConfigError, ProfileNotFoundError
from listseerr.models.media import Provider
from listseerr.utils.cron import parse_cron
from listseerr.utils.logging import _get_logger
from listseerr.utils.types import BaseStrEnum

__all__ = [
    "JellyseerrConfig",
    "ListConfig",
    "ListSeerrConfig",
    "LogLevel",
    "ProfileConfig",
    "ProviderConfig",
    "get_config",
]

_log = _get_logger(__name__)


def get_data_path() -> Path:
    """Get the data directory from `LS_DATA_PATH`, defaulting to `./data`."""
    return Path(os.getenv("LS_DATA_PATH", "./data")).resolve()


def find_yaml_config_file() -> Path:
    """Find the YAML configuration file in the data path.

    Returns:
        Path: The path to an existing YAML configuration file or the default location.
    """
    data_path = get_data_path()

    for ext in ("yaml", "yml"):
        yaml_file = data_path / f"config.{ext}"
        if yaml_file.exists():
            _log.debug(f"Using YAML config file: {yaml_file}")
            return yaml_file
    return data_path / "config.yaml"


class LogLevel(BaseStrEnum):
    """Enumeration of available logging levels.

    Note: SUCCESS is a custom level used by this application.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class JellyseerrConfig(BaseModel):
    """Connection settings for the Jellyseerr (or Overseerr) instance."""

    url: str = Field(description="Base URL of the Jellyseerr instance")
    api_key: SecretStr = Field(description="Jellyseerr API key")
    user_id: int = Field(
        default=1, ge=1, description="Jellyseerr user the requests are made as"
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be appended to it."""
        if not value.startswith(("http://", "https://")):
            raise ValueError("Jellyseerr url must be an http(s) URL")
        return value.rstrip("/")


class ProviderConfig(BaseModel):
    """Credentials for a list provider.

    For MDBList this is the API key, for Trakt the application's client id.
    """

    api_key: SecretStr = Field(description="Provider API key or client id")


class ListConfig(BaseModel):
    """A media list to pull items from."""

    name: str = Field(min_length=1, description="Unique name of the list")
    url: str = Field(description="URL of the list on the provider's website")
    provider: Provider = Field(description="Provider serving the list")
    enabled: bool = Field(
        default=True, description="Include the list in scheduled batch runs"
    )
    max_items: int = Field(
        default=50, ge=1, le=50, description="Maximum number of items to fetch"
    )
    schedule: str | None = Field(
        default=None, description="Cron expression for processing this list alone"
    )


class ProfileConfig(BaseModel):
    """Configuration for a single ListSeerr profile.

    A profile owns its lists; its name is used as their owner id.
    """

    jellyseerr: JellyseerrConfig | None = Field(
        default=None, description="Jellyseerr connection for this profile"
    )
    providers: dict[Provider, ProviderConfig] = Field(
        default_factory=dict, repr=False, description="Provider credentials"
    )
    lists: list[ListConfig] = Field(
        default_factory=list, description="Lists processed for this profile"
    )
    timezone: str = Field(
        default_factory=get_localzone_name,
        description="Timezone cron schedules are evaluated in",
    )
    processing_schedule: str | None = Field(
        default=None, description="Cron expression for batch processing all lists"
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA zone."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{value}'") from e
        return value

    @model_validator(mode="after")
    def validate_lists(self) -> "ProfileConfig":
        """Validate list names and every cron expression of the profile."""
        names = [list_config.name for list_config in self.lists]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate list names: {duplicates}")

        schedules = [self.processing_schedule] + [lc.schedule for lc in self.lists]
        for schedule in schedules:
            if schedule:
                parse_cron(schedule, self.timezone)
        return self

    def __str__(self) -> str:
        enabled = sum(1 for list_config in self.lists if list_config.enabled)
        return (
            f"{len(self.lists)} list(s) ({enabled} enabled), "
            f"jellyseerr: {self.jellyseerr.url if self.jellyseerr else 'not set'}, "
            f"providers: {sorted(str(p) for p in self.providers)}, "
            f"schedule: {self.processing_schedule or 'manual only'}"
        )


class ListSeerrConfig(BaseSettings):
    """Application configuration sourced from the YAML config file.

    Top-level `jellyseerr` and `providers` act as defaults for every profile;
    profile-level values take precedence.
    """

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="Logging level for the application"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for each network call"
    )
    jellyseerr: JellyseerrConfig | None = Field(
        default=None, description="Default Jellyseerr connection"
    )
    providers: dict[Provider, ProviderConfig] = Field(
        default_factory=dict, repr=False, description="Default provider credentials"
    )
    profiles: dict[str, ProfileConfig] = Field(
        default_factory=dict, description="ListSeerr profile configurations"
    )

    @cached_property
    def data_path(self) -> Path:
        """Get the data path for ListSeerr."""
        return get_data_path()

    @model_validator(mode="after")
    def merge_profile_defaults(self) -> "ListSeerrConfig":
        """Apply global defaults to each profile.

        Returns:
            ListSeerrConfig: Self with merged profile settings.
        """
        if not self.profiles:
            _log.info("No profiles configured; creating implicit 'default' profile")
            self.profiles["default"] = ProfileConfig()

        for name, profile in self.profiles.items():
            if not name.strip():
                raise ProfileConfigError("Profile names cannot be empty")
            if profile.jellyseerr is None:
                profile.jellyseerr = self.jellyseerr
            profile.providers = {**self.providers, **profile.providers}

        return self

    def get_profile(self, name: str) -> ProfileConfig:
        """Get a specific profile configuration.

        Args:
            name: Profile name

        Returns:
            ProfileConfig: The profile configuration.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(
                f"Profile '{name}' not found. Available profiles: "
                f"{list(self.profiles.keys())}"
            )
        return self.profiles[name]

    def __str__(self) -> str:
        return (
            f"ListSeerr Config: {len(self.profiles)} profile(s) "
            f"[{', '.join(self.profiles)}], DATA_PATH: {self.data_path}, "
            f"LOG_LEVEL: {self.log_level}"
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Read settings from init arguments first, then the YAML file."""
        return (
            init_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=find_yaml_config_file()),
        )

    model_config = SettingsConfigDict(extra="ignore")


@lru_cache(maxsize=1)
def get_config() -> ListSeerrConfig:
    """Get the singleton instance of ListSeerrConfig.

    Returns:
        ListSeerrConfig: The singleton configuration instance.
    """
    return ListSeerrConfig()
