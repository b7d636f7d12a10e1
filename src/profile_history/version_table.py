"""
Single-release version table: one row per profile, one column per version.

Unlike the cross-release history this shows every version of every profile
held by one release (e.g. a release that ships all versions).
"""

from dataclasses import dataclass, field
from pathlib import Path

from ..shared_utilities import get_logger
from .config import VERSION_TABLE_LOGO_SETTINGS, LogoSettings
from .data_models import ProfileMatrix
from .errors import RenderError
from .logo_renderer import LogoRenderer

logger = get_logger(__name__)


@dataclass(frozen=True)
class VersionCell:
    """One version of a profile in the table."""

    matrix_id: str
    version: int
    logo_reference: Path | None = None


@dataclass
class VersionTableRow:
    """All versions of one base ID."""

    base_id: str
    name: str
    tax_group: str | None
    cells: dict[int, VersionCell] = field(default_factory=dict)

    @property
    def first_version(self) -> int:
        return min(self.cells) if self.cells else 0


@dataclass
class VersionTable:
    """Version table of one release."""

    release: str
    max_version: int
    rows: list[VersionTableRow] = field(default_factory=list)

    @property
    def versions(self) -> list[int]:
        return list(range(1, self.max_version + 1))


def _column(matrix: ProfileMatrix) -> int:
    # Unversioned profiles are the first (and only) version
    return matrix.version or 1


def build_version_table(
    matrices: list[ProfileMatrix],
    release: str,
    out_dir: str | Path | None = None,
    renderer: LogoRenderer | None = None,
    logo_settings: LogoSettings = VERSION_TABLE_LOGO_SETTINGS,
) -> VersionTable:
    """
    Group a release's matrices by base ID and draw a logo per version.

    Rows are ordered by base ID and take the name of the latest version.
    Logos are written to ``out_dir`` as ``<matrix ID>.png`` when a renderer
    is given.
    """
    ordered = sorted(matrices, key=lambda m: (m.base_id, _column(m)))
    max_version = max((_column(m) for m in ordered), default=0)
    table = VersionTable(release=release, max_version=max_version)

    rows: dict[str, VersionTableRow] = {}
    for matrix in ordered:
        logger.debug(
            "Processing profile: {name} {base_id} {version}",
            name=matrix.name,
            base_id=matrix.base_id,
            version=matrix.version,
        )
        row = rows.get(matrix.base_id)
        if row is None:
            row = VersionTableRow(matrix.base_id, matrix.name, matrix.tax_group)
            rows[matrix.base_id] = row
            table.rows.append(row)
            if _column(matrix) > 1:
                logger.warning(
                    "First version {version} of profile {name} is > 1",
                    version=matrix.version,
                    name=matrix.name,
                )
        else:
            row.name = matrix.name
            row.tax_group = matrix.tax_group or row.tax_group

        logo_reference = None
        if renderer is not None and out_dir is not None:
            path = Path(out_dir) / f"{matrix.matrix_id.replace('/', '_')}.png"
            try:
                logo_reference = renderer.render(
                    matrix,
                    path,
                    xsize=logo_settings.width_for(matrix),
                    ysize=logo_settings.ysize,
                )
            except RenderError as e:
                e.release = release
                logger.warning(
                    "Logo not drawn: {error}", error=str(e), release=release
                )

        row.cells[_column(matrix)] = VersionCell(
            matrix.matrix_id, matrix.version, logo_reference
        )

    return table
