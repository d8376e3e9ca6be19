"""Tests for settings configuration utilities."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from listseerr.config.settings import (
    JellyseerrConfig,
    ListConfig,
    ListSeerrConfig,
    ProfileConfig,
    find_yaml_config_file,
)
from listseerr.exceptions import ProfileNotFoundError
from listseerr.models.media import Provider


@pytest.fixture(autouse=True)
def isolate_data_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the data path at an empty temporary directory for each test."""
    monkeypatch.setenv("LS_DATA_PATH", str(tmp_path))
    return tmp_path


def _list(name: str, **kwargs) -> dict:
    return {
        "name": name,
        "url": f"https://mdblist.com/lists/user/{name}",
        "provider": "mdblist",
        **kwargs,
    }


@pytest.mark.parametrize("extension", ["yaml", "yml"])
def test_find_yaml_config_file_in_data_path(tmp_path: Path, extension: str) -> None:
    """The config file is looked up in LS_DATA_PATH."""
    config_file = tmp_path / f"config.{extension}"
    config_file.write_text("log_level: DEBUG", encoding="utf-8")

    assert find_yaml_config_file() == config_file.resolve()


def test_find_yaml_config_file_defaults_to_yaml(tmp_path: Path) -> None:
    """Without a config file the default location is returned."""
    assert find_yaml_config_file() == tmp_path.resolve() / "config.yaml"


def test_config_creates_default_profile() -> None:
    """An empty configuration still has a default profile."""
    config = ListSeerrConfig()

    profile = config.get_profile("default")
    assert profile.lists == []
    assert profile.jellyseerr is None
    assert config.request_timeout == 30


def test_config_loads_yaml_file(tmp_path: Path) -> None:
    """Profiles and lists are read from the YAML file."""
    (tmp_path / "config.yaml").write_text(
        yaml.safe_dump(
            {
                "log_level": "debug",
                "request_timeout": 10,
                "profiles": {
                    "home": {
                        "timezone": "Europe/Paris",
                        "processing_schedule": "0 4 * * *",
                        "jellyseerr": {
                            "url": "http://jellyseerr:5055",
                            "api_key": "key",
                        },
                        "providers": {"trakt": {"api_key": "client-id"}},
                        "lists": [
                            {
                                "name": "Trending",
                                "url": "https://trakt.tv/movies/trending",
                                "provider": "trakt_chart",
                                "max_items": 20,
                                "schedule": "*/30 * * * *",
                            }
                        ],
                    }
                },
            }
        ),
        encoding="utf-8",
    )

    config = ListSeerrConfig()

    assert config.log_level == "DEBUG"
    assert config.request_timeout == 10
    assert config.data_path == tmp_path.resolve()
    assert list(config.profiles) == ["home"]
    profile = config.get_profile("home")
    assert profile.lists[0].provider is Provider.TRAKT_CHART
    assert profile.lists[0].max_items == 20
    assert profile.providers[Provider.TRAKT].api_key.get_secret_value() == "client-id"


def test_profiles_inherit_global_defaults() -> None:
    """Global Jellyseerr and provider settings apply to every profile."""
    config = ListSeerrConfig(
        jellyseerr={"url": "http://global:5055", "api_key": "global"},
        providers={"mdblist": {"api_key": "global-mdblist"}, "trakt": {"api_key": "g"}},
        profiles={
            "inherits": {"timezone": "UTC"},
            "overrides": {
                "timezone": "UTC",
                "jellyseerr": {"url": "http://own:5055", "api_key": "own"},
                "providers": {"mdblist": {"api_key": "own-mdblist"}},
            },
        },
    )

    inherits = config.get_profile("inherits")
    overrides = config.get_profile("overrides")
    assert inherits.jellyseerr.url == "http://global:5055"
    assert inherits.providers[Provider.MDBLIST].api_key.get_secret_value() == (
        "global-mdblist"
    )
    assert overrides.jellyseerr.url == "http://own:5055"
    assert overrides.providers[Provider.MDBLIST].api_key.get_secret_value() == (
        "own-mdblist"
    )
    assert Provider.TRAKT in overrides.providers


def test_get_profile_raises_for_unknown_name() -> None:
    """Unknown profiles raise ProfileNotFoundError."""
    with pytest.raises(ProfileNotFoundError):
        ListSeerrConfig().get_profile("missing")


@pytest.mark.parametrize("max_items", [0, 51])
def test_list_max_items_is_bounded(max_items: int) -> None:
    """Lists fetch between 1 and 50 items."""
    with pytest.raises(ValidationError):
        ListConfig(**_list("top", max_items=max_items))


def test_list_defaults() -> None:
    """Lists are enabled and fetch 50 items by default."""
    list_config = ListConfig(**_list("top"))

    assert list_config.enabled
    assert list_config.max_items == 50
    assert list_config.schedule is None


def test_duplicate_list_names_are_rejected() -> None:
    """List names are unique within a profile."""
    with pytest.raises(ValidationError, match="Duplicate list names"):
        ProfileConfig(timezone="UTC", lists=[_list("top"), _list("top")])


@pytest.mark.parametrize(
    "overrides",
    [
        {"processing_schedule": "every day"},
        {"lists": [_list("top", schedule="61 * * * *")]},
        {"timezone": "Mars/Olympus_Mons"},
    ],
)
def test_invalid_schedules_are_rejected(overrides: dict) -> None:
    """Cron expressions and timezones are validated when loading."""
    with pytest.raises(ValidationError):
        ProfileConfig(**{"timezone": "UTC", **overrides})


def test_jellyseerr_url_is_normalized() -> None:
    """Trailing slashes are stripped and the API key is kept secret."""
    config = JellyseerrConfig(url="https://requests.example.com/", api_key="secret")

    assert config.url == "https://requests.example.com"
    assert config.user_id == 1
    assert "secret" not in repr(config)


def test_jellyseerr_url_requires_http_scheme() -> None:
    """Only http(s) URLs are accepted."""
    with pytest.raises(ValidationError):
        JellyseerrConfig(url="jellyseerr:5055", api_key="secret")


def test_empty_profile_name_is_rejected() -> None:
    """Profile names cannot be blank."""
    with pytest.raises(ValidationError):
        ListSeerrConfig(profiles={" ": {"timezone": "UTC"}})


def test_request_timeout_must_be_positive() -> None:
    """Network calls need a positive timeout."""
    with pytest.raises(ValidationError):
        ListSeerrConfig(request_timeout=0)
