"""Shared pytest configuration and fixtures for the test suite."""

import atexit
import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="ls-tests-"))
os.environ["LS_DATA_PATH"] = str(_TEST_DATA_DIR)
_TEST_CONFIG_FILE = _TEST_DATA_DIR / "config.yaml"

_TEST_CONFIG_FILE.write_text(
    yaml.safe_dump(
        {
            "profiles": {
                "default": {
                    "timezone": "UTC",
                    "jellyseerr": {
                        "url": "http://jellyseerr:5055",
                        "api_key": "jellyseerr-key",
                    },
                    "providers": {"mdblist": {"api_key": "mdblist-key"}},
                    "lists": [
                        {
                            "name": "Top Movies",
                            "url": "https://mdblist.com/lists/user/top-movies",
                            "provider": "mdblist",
                        }
                    ],
                }
            },
        },
        sort_keys=False,
    ),
    encoding="utf-8",
)

from listseerr.config import settings as settings_module  # noqa: E402
from listseerr.models.db import Base  # noqa: E402

settings_module.get_config.cache_clear()


@pytest.fixture
def db(monkeypatch: pytest.MonkeyPatch) -> Iterator[object]:
    """Patch ``listseerr.core.repositories.db`` with an in-memory SQLite database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session_factory = sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False
    )

    class _DB:
        def __init__(self) -> None:
            self._session = None

        def __enter__(self):
            self._session = session_factory()
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if self._session is not None:
                self._session.close()
                self._session = None

        @property
        def session(self):
            if self._session is None:
                self._session = session_factory()
            return self._session

        def close(self) -> None:
            if self._session is not None:
                self._session.close()
                self._session = None

    db_instance = _DB()

    import listseerr.core.repositories as repositories_module

    monkeypatch.setattr(repositories_module, "db", lambda: db_instance)

    try:
        yield db_instance
    finally:
        db_instance.close()
        engine.dispose()


@atexit.register
def _cleanup_test_data_dir() -> None:
    """Remove the temporary test data directory after the test session."""
    shutil.rmtree(_TEST_DATA_DIR, ignore_errors=True)
