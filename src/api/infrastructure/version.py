"""Application version, from package metadata or the repository's pyproject.toml."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "quotagate-api"


def get_version() -> str:
    """Return the installed distribution's version.

    A source checkout that was never installed falls back to reading
    ``[project].version`` from the repository root.
    """
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        # src/api/infrastructure/version.py -> repository root
        pyproject = Path(__file__).resolve().parents[3] / "pyproject.toml"
        with pyproject.open("rb") as f:
            return tomllib.load(f)["project"]["version"]


__version__ = get_version()
