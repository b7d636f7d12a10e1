"""
Configuration system for profile history analysis.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from ..shared_utilities import get_logger
from .data_models import ProfileMatrix, RemovedLabelPolicy
from .errors import ConfigError

DEFAULT_RELEASES_FILE = Path(__file__).parent / "releases.json"
DEFAULT_DATA_DIR = "jaspar_data"
DEFAULT_COLLECTION = "CORE"
DEFAULT_LINK_TEMPLATE = "https://jaspar.elixir.no/matrix/{matrix_id}/"

ERA_UNVERSIONED = "unversioned"
ERA_VERSIONED = "versioned"
ERAS = (ERA_UNVERSIONED, ERA_VERSIONED)

LOGO_XSIZE = 300  # total pixel width of a logo when using fixed width
LOGO_YSIZE = 75  # total pixel height of a logo
LOGO_POS_XSIZE = 12  # per position pixel width of a logo


@dataclass(frozen=True)
class ReleaseConfig:
    """Where and how to read one release of the profile database."""

    label: str  # e.g. "2016"
    era: str = ERA_VERSIONED
    database: str = ""  # name of the release's database, informational
    path: str | None = None  # relative to the data directory
    url: str | None = None  # bundle to download when ``path`` is missing
    collection: str | None = DEFAULT_COLLECTION
    link_profiles: bool | None = None
    description: str = ""

    def __post_init__(self):
        if self.era not in ERAS:
            raise ConfigError(
                f"Release {self.label}: unknown era {self.era!r}, expected one of {ERAS}"
            )

    @property
    def data_path(self) -> str:
        """Data location relative to the data directory."""
        return self.path or f"JASPAR{self.label}"

    @property
    def is_versioned(self) -> bool:
        return self.era == ERA_VERSIONED

    @property
    def links_enabled(self) -> bool:
        """Only versioned releases have stable per-matrix pages to link to."""
        if self.link_profiles is None:
            return self.is_versioned
        return self.link_profiles


@dataclass(frozen=True)
class ProfileFilter:
    """Restricts the profiles fetched from a release."""

    collection: str | None = DEFAULT_COLLECTION
    tax_groups: tuple[str, ...] = ()

    def allows_collection(self, collection: str | None) -> bool:
        if self.collection is None or collection is None:
            return True
        return collection.upper() == self.collection.upper()

    def allows_tax_group(self, tax_group: str | None) -> bool:
        if not self.tax_groups or tax_group is None:
            return True
        return tax_group.lower() in {group.lower() for group in self.tax_groups}

    @classmethod
    def from_strings(
        cls, collection: str | None = DEFAULT_COLLECTION, tax_groups: str | None = None
    ) -> "ProfileFilter":
        """Build a filter from a collection name and a comma-separated group list."""
        groups = ()
        if tax_groups:
            groups = tuple(g.strip() for g in tax_groups.split(",") if g.strip())
        return cls(collection=collection, tax_groups=groups)


@dataclass(frozen=True)
class LogoSettings:
    """Logo dimensions; proportional width unless ``fixed_width`` is set."""

    fixed_width: bool = False
    xsize: int = LOGO_XSIZE
    ysize: int = LOGO_YSIZE
    pos_xsize: int = LOGO_POS_XSIZE
    dpi: int = 100

    def width_for(self, matrix: ProfileMatrix) -> int:
        if self.fixed_width:
            return self.xsize
        return self.pos_xsize * matrix.length


# The single-release version table uses larger logos
VERSION_TABLE_LOGO_SETTINGS = LogoSettings(xsize=300, ysize=100, pos_xsize=22)


@dataclass(frozen=True)
class ReportSettings:
    """Presentation options for the HTML reports."""

    labeled: bool = False
    centered: bool = False
    removed_policy: RemovedLabelPolicy = RemovedLabelPolicy.ALL
    link_template: str = DEFAULT_LINK_TEMPLATE
    title: str = "JASPAR profile history"

    def profile_url(self, matrix_id: str) -> str:
        return self.link_template.format(matrix_id=matrix_id)


@dataclass(frozen=True)
class ReleaseRegistry:
    """Immutable, chronologically ordered table of releases."""

    releases: tuple[ReleaseConfig, ...] = field(default_factory=tuple)

    @property
    def labels(self) -> list[str]:
        return [release.label for release in self.releases]

    def get(self, label: str) -> ReleaseConfig:
        for release in self.releases:
            if release.label == label:
                return release
        raise ConfigError(f"Release {label!r} is not configured. Known: {self.labels}")

    def subset(self, labels: list[str]) -> "ReleaseRegistry":
        """Registry restricted to ``labels``, keeping chronological order."""
        wanted = set(labels)
        for label in labels:
            self.get(label)
        return ReleaseRegistry(
            tuple(release for release in self.releases if release.label in wanted)
        )


def _release_from_dict(label: str, data: dict) -> ReleaseConfig:
    try:
        return ReleaseConfig(
            label=label,
            era=data.get("era", ERA_VERSIONED),
            database=data.get("database", ""),
            path=data.get("path"),
            url=data.get("url"),
            collection=data.get("collection", DEFAULT_COLLECTION),
            link_profiles=data.get("link_profiles"),
            description=data.get("description", ""),
        )
    except AttributeError as e:
        raise ConfigError(f"Release {label}: entry must be an object") from e


class ReleaseConfigManager:
    """Loads the release table from a JSON file."""

    def __init__(self, config_file: str | Path | None = None):
        """Initialize config manager.

        Args:
            config_file: Path to configuration file. Defaults to the
                ``PROFILE_HISTORY_RELEASES`` environment variable, then to the
                built-in releases.json
        """
        self.logger = get_logger(__name__)

        if config_file is None:
            config_file = os.getenv("PROFILE_HISTORY_RELEASES") or DEFAULT_RELEASES_FILE
        self.config_file = Path(config_file)
        self.registry = self._load_configs()

    def _load_configs(self) -> ReleaseRegistry:
        """Load configurations from file, keeping the file's release order."""
        if not self.config_file.exists():
            raise ConfigError(f"Release config file not found: {self.config_file}")

        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {self.config_file}: {e}") from e

        if not isinstance(data, dict) or not data:
            raise ConfigError(f"No releases configured in {self.config_file}")

        releases = tuple(
            _release_from_dict(str(label), entry) for label, entry in data.items()
        )
        self.logger.info(
            f"Loaded {len(releases)} release configurations",
            config_file=str(self.config_file),
        )
        return ReleaseRegistry(releases)

    def get_release(self, label: str) -> ReleaseConfig:
        """Get configuration for a release."""
        return self.registry.get(label)

    def get_releases(self) -> tuple[ReleaseConfig, ...]:
        """All releases, oldest first."""
        return self.registry.releases

    @property
    def labels(self) -> list[str]:
        return self.registry.labels

    @property
    def latest(self) -> ReleaseConfig:
        return self.registry.releases[-1]


def get_data_dir(data_dir: str | Path | None = None) -> Path:
    """Resolve the release data directory (argument, environment, default)."""
    if data_dir is None:
        data_dir = os.getenv("PROFILE_HISTORY_DATA_DIR", DEFAULT_DATA_DIR)
    return Path(data_dir)
