"""Version and runtime environment helpers."""

from pathlib import Path

import tomlkit

__all__ = ["get_docker_status", "get_git_hash", "get_pyproject_version"]

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def get_pyproject_version(root: Path = PROJECT_ROOT) -> str:
    """Get ListSeerr's version from the pyproject.toml file.

    Args:
        root (Path): Directory holding the pyproject.toml file.

    Returns:
        str: ListSeerr's version, or "unknown" if it cannot be determined
    """
    toml_file = root / "pyproject.toml"
    if not toml_file.is_file():
        return "unknown"

    with toml_file.open(encoding="utf-8") as f:
        toml_data = tomlkit.load(f)

    project = toml_data.get("project", {})
    return str(project.get("version", "unknown"))


def get_git_hash(root: Path = PROJECT_ROOT) -> str:
    """Get the commit hash checked out in the ListSeerr repository.

    Args:
        root (Path): Directory holding the .git directory.

    Returns:
        str: Current commit hash, or "unknown" for detached or missing checkouts
    """
    git_dir = root / ".git"
    try:
        head = (git_dir / "HEAD").read_text().strip()
        if not head.startswith("ref: refs/heads/"):
            return "unknown"
        return (git_dir / head.removeprefix("ref: ")).read_text().strip()
    except OSError:
        return "unknown"


def get_docker_status() -> bool:
    """Check if ListSeerr is running inside a Docker container."""
    return Path("/.dockerenv").is_file()
