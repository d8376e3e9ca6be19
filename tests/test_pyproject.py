"""Basic pytest smoke tests for ListSeerr."""

import re
import tomllib
from pathlib import Path

SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+(?:[+-][0-9A-Za-z-.]+)?$")


def _load_project() -> dict:
    pyproject_path = Path("pyproject.toml")
    assert pyproject_path.exists(), "pyproject.toml should exist at the project root"

    with pyproject_path.open("rb") as f:
        pyproject = tomllib.load(f)

    project = pyproject.get("project")
    assert isinstance(project, dict), "[project] table must exist in pyproject.toml"
    return project


def test_project_metadata() -> None:
    """Ensure core project metadata is present and well-formed."""
    project = _load_project()

    assert project.get("name") == "ListSeerr"

    version = project.get("version")
    assert isinstance(version, str) and SEMVER_PATTERN.fullmatch(version), (
        "Version must follow semantic versioning"
    )


def test_runtime_dependencies_declared() -> None:
    """The libraries imported by the package are declared."""
    declared = {
        re.split(r"[<>=\[ ]", dependency, maxsplit=1)[0].lower()
        for dependency in _load_project()["dependencies"]
    }

    assert {
        "aiohttp",
        "alembic",
        "apscheduler",
        "pydantic",
        "pydantic-settings",
        "sqlalchemy",
    } <= declared
