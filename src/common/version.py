"""Version information for supipi.

The version is taken from the installed distribution metadata, falling back
to the [project] table of pyproject.toml when running from a source checkout.
"""

import tomllib
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = 'supipi'


def _find_pyproject_toml() -> Path | None:
    # common/ -> src/ -> project root
    pyproject_path = Path(__file__).resolve().parent.parent.parent / 'pyproject.toml'
    if pyproject_path.exists():
        return pyproject_path
    return None


@dataclass
class VersionInfo:
    """Version information.

    Attributes:
        version: Version string (e.g., "0.2.0")
        release_date: Release date in ISO format, or None
    """

    version: str
    release_date: str | None = None

    def __str__(self) -> str:
        if self.release_date:
            return f'v{self.version} ({self.release_date})'
        return f'v{self.version}'


def _read_pyproject(path: Path) -> dict:
    with path.open('rb') as f:
        return tomllib.load(f)


def get_version_info() -> VersionInfo:
    """Get version information for the running copy of supipi.

    Returns:
        VersionInfo with version='unknown' if nothing can be determined.
    """
    pyproject_path = _find_pyproject_toml()
    pyproject: dict = {}
    if pyproject_path is not None:
        try:
            pyproject = _read_pyproject(pyproject_path)
        except (OSError, tomllib.TOMLDecodeError):
            pyproject = {}

    project_data = pyproject.get('project', {})
    release_date = pyproject.get('tool', {}).get('supipi', {}).get('release_date')
    release_date_str = str(release_date) if release_date else None

    try:
        return VersionInfo(metadata.version(DISTRIBUTION_NAME), release_date_str)
    except metadata.PackageNotFoundError:
        pass

    version = project_data.get('version')
    return VersionInfo(str(version) if version else 'unknown', release_date_str)


__version__ = get_version_info().version
