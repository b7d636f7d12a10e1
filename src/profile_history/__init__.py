"""
Profile history toolkit.

Tracks JASPAR profile matrices across database releases: when each profile
appeared, changed or was removed, with a logo drawn for every change.
"""

from .comparator import matrices_equivalent
from .config import ReleaseConfig, ReleaseConfigManager, ReleaseRegistry
from .core import FetchErrorPolicy, ProfileHistoryBuilder, draw_release_logos
from .data_models import (
    CellState,
    HistoryEntry,
    HistoryResult,
    HistoryTable,
    ProfileMatrix,
    RemovedLabelPolicy,
)
from .errors import (
    ConfigError,
    HistoryTableError,
    MalformedIdentifierError,
    ProfileHistoryError,
    ReleaseFetchError,
    RenderError,
)
from .identity import parse_matrix_id
from .lookahead import has_future_occurrence

__all__ = [
    "ProfileHistoryBuilder",
    "FetchErrorPolicy",
    "draw_release_logos",
    "ReleaseConfig",
    "ReleaseConfigManager",
    "ReleaseRegistry",
    "ProfileMatrix",
    "HistoryEntry",
    "HistoryTable",
    "HistoryResult",
    "CellState",
    "RemovedLabelPolicy",
    "parse_matrix_id",
    "matrices_equivalent",
    "has_future_occurrence",
    "ProfileHistoryError",
    "ConfigError",
    "MalformedIdentifierError",
    "ReleaseFetchError",
    "RenderError",
    "HistoryTableError",
]
