"""
Data models for profile history tracking.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

from .errors import HistoryTableError
from .lookahead import has_future_occurrence

NUCLEOTIDES = ("A", "C", "G", "T")


@dataclass(frozen=True)
class ProfileMatrix:
    """A binding profile as published in one release.

    ``content`` is the position frequency matrix with one row per nucleotide
    (A, C, G, T) and one column per position.
    """

    matrix_id: str  # e.g. "MA0001.2", or "MA0001" before versioning
    base_id: str  # e.g. "MA0001"
    version: int  # 0 for unversioned releases
    name: str
    content: np.ndarray = field(repr=False, compare=False)
    collection: str | None = None
    tax_group: str | None = None

    @property
    def length(self) -> int:
        """Number of positions (columns) in the matrix."""
        return int(self.content.shape[1]) if self.content.ndim == 2 else 0


@dataclass(frozen=True)
class HistoryEntry:
    """One cell of the history table, keyed by (base_id, release)."""

    release: str
    matrix_id: str
    name: str
    base_id: str
    version: int
    is_new: bool
    differs: bool
    logo_reference: Path | None = None

    @property
    def display_logo(self) -> bool:
        """A logo is shown only where the profile is new or has changed."""
        return self.is_new or self.differs

    def to_dict(self) -> dict[str, Any]:
        """Serializable view of the entry."""
        return {
            "release": self.release,
            "matrix_id": self.matrix_id,
            "name": self.name,
            "base_id": self.base_id,
            "version": self.version,
            "is_new": self.is_new,
            "differs": self.differs,
            "display_logo": self.display_logo,
            "logo_reference": (
                str(self.logo_reference) if self.logo_reference else None
            ),
        }


class CellState(Enum):
    """How a (base_id, release) cell is presented in the report."""

    LOGO = "logo"
    UNCHANGED = "unchanged"
    NOT_YET_INTRODUCED = "not_yet_introduced"
    REMOVED = "removed"
    SKIPPED = "skipped"  # release could not be read


class RemovedLabelPolicy(Enum):
    """Where the "removed" marker goes once a profile has disappeared."""

    ALL = "all"  # every release after the profile's last appearance
    FIRST = "first"  # only the first release after its last appearance


@dataclass
class ProfileHistory:
    """Entries of one base ID across releases plus the last matrix seen."""

    base_id: str
    entries: dict[str, HistoryEntry] = field(default_factory=dict)
    last_matrix: ProfileMatrix | None = None

    @property
    def current_name(self) -> str:
        """Display name from the most recently processed matrix."""
        if self.last_matrix is not None:
            return self.last_matrix.name
        return ""

    @property
    def current_matrix_id(self) -> str:
        """Matrix ID of the most recently processed matrix."""
        if self.last_matrix is not None:
            return self.last_matrix.matrix_id
        return self.base_id


class HistoryTable:
    """Per-profile, per-release history built in release order."""

    def __init__(self, releases: list[str] | tuple[str, ...]):
        if not releases:
            raise ValueError("A history table needs at least one release")
        if len(set(releases)) != len(releases):
            raise ValueError(f"Duplicate release labels: {list(releases)}")
        self.releases: tuple[str, ...] = tuple(releases)
        self._rows: dict[str, ProfileHistory] = {}
        self._skipped: set[str] = set()

    def __contains__(self, base_id: str) -> bool:
        return base_id in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def base_ids(self) -> list[str]:
        """All base IDs, sorted."""
        return sorted(self._rows)

    def get_history(self, base_id: str) -> ProfileHistory | None:
        return self._rows.get(base_id)

    def get_entry(self, base_id: str, release: str) -> HistoryEntry | None:
        row = self._rows.get(base_id)
        if row is None:
            return None
        return row.entries.get(release)

    def last_matrix(self, base_id: str) -> ProfileMatrix | None:
        row = self._rows.get(base_id)
        return row.last_matrix if row else None

    def record(self, entry: HistoryEntry) -> None:
        """Add an entry, enforcing one entry per cell in release order."""
        if entry.release not in self.releases:
            raise HistoryTableError(
                "Unknown release", entry.base_id, entry.release
            )

        row = self._rows.setdefault(entry.base_id, ProfileHistory(entry.base_id))
        if entry.release in row.entries:
            raise HistoryTableError(
                "Duplicate entry", entry.base_id, entry.release
            )

        position = self.releases.index(entry.release)
        for recorded in row.entries:
            if self.releases.index(recorded) > position:
                raise HistoryTableError(
                    f"Entry recorded out of order after release {recorded}",
                    entry.base_id,
                    entry.release,
                )

        row.entries[entry.release] = entry

    def mark_skipped(self, release: str) -> None:
        """Record that a release could not be read and holds no entries."""
        if release not in self.releases:
            raise ValueError(f"Unknown release: {release}")
        self._skipped.add(release)

    def is_skipped(self, release: str) -> bool:
        return release in self._skipped

    def set_last_matrix(self, matrix: ProfileMatrix) -> None:
        row = self._rows.setdefault(matrix.base_id, ProfileHistory(matrix.base_id))
        row.last_matrix = matrix

    def entries_for_release(self, release: str) -> list[HistoryEntry]:
        """All entries of one release, ordered by base ID."""
        return [
            row.entries[release]
            for base_id, row in sorted(self._rows.items())
            if release in row.entries
        ]

    def has_future_occurrence(self, base_id: str, release: str) -> bool:
        return has_future_occurrence(self, base_id, release)

    def cell_state(self, base_id: str, release: str) -> CellState:
        """Classify a cell.

        A release that could not be read is SKIPPED for every profile. An
        absent profile is NOT_YET_INTRODUCED when it appears in a later
        release and REMOVED otherwise.
        """
        entry = self.get_entry(base_id, release)
        if entry is not None:
            return CellState.LOGO if entry.display_logo else CellState.UNCHANGED

        if release in self._skipped:
            return CellState.SKIPPED

        if self.has_future_occurrence(base_id, release):
            return CellState.NOT_YET_INTRODUCED

        return CellState.REMOVED

    def shows_removed_marker(
        self,
        base_id: str,
        release: str,
        removed_policy: RemovedLabelPolicy = RemovedLabelPolicy.ALL,
    ) -> bool:
        """Whether a cell carries the "removed" marker in the report.

        Under FIRST only the first read release after the profile's last
        appearance is marked. Skipped releases in between are passed over.
        """
        if self.cell_state(base_id, release) is not CellState.REMOVED:
            return False
        if removed_policy is RemovedLabelPolicy.ALL:
            return True

        earlier = self.releases[: self.releases.index(release)]
        for previous in reversed(earlier):
            if previous not in self._skipped:
                return self.get_entry(base_id, previous) is not None
        return False


@dataclass
class ReleaseSummary:
    """Counts for one release of the history."""

    release: str
    total: int = 0
    new: int = 0
    changed: int = 0
    unchanged: int = 0
    logos: int = 0


@dataclass
class HistoryResult:
    """Complete result from a profile history run."""

    table: HistoryTable
    skipped_releases: dict[str, str] = field(default_factory=dict)
    malformed_ids: list[dict[str, str]] = field(default_factory=list)
    render_failures: list[dict[str, str]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def releases(self) -> tuple[str, ...]:
        return self.table.releases

    @property
    def total_profiles(self) -> int:
        return len(self.table)

    @property
    def logo_count(self) -> int:
        return sum(summary.logos for summary in self.summaries())

    def summaries(self) -> list[ReleaseSummary]:
        """Per-release counts of new, changed and unchanged profiles."""
        summaries = []
        for release in self.table.releases:
            summary = ReleaseSummary(release=release)
            for entry in self.table.entries_for_release(release):
                summary.total += 1
                if entry.is_new:
                    summary.new += 1
                elif entry.differs:
                    summary.changed += 1
                else:
                    summary.unchanged += 1
                if entry.logo_reference is not None:
                    summary.logos += 1
            summaries.append(summary)
        return summaries
