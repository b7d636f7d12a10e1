"""
Core profile history tracking functionality.
"""

import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from ..shared_utilities import OutputManager, get_logger, get_logging_manager
from .comparator import matrices_equivalent
from .config import LogoSettings, ProfileFilter, ReleaseConfig, ReleaseRegistry
from .data_models import (
    HistoryEntry,
    HistoryResult,
    HistoryTable,
    ProfileMatrix,
    ReleaseSummary,
)
from .errors import MalformedIdentifierError, ReleaseFetchError, RenderError
from .logo_renderer import LogoRenderer
from .sources import ProfileSource, SourceFactory

ProgressCallback = Callable[[int, int, str], None]


class FetchErrorPolicy(Enum):
    """What to do when a release cannot be fetched."""

    ABORT = "abort"
    SKIP = "skip"


class ProfileHistoryBuilder:
    """
    Builds the history table of every profile across releases.

    Releases are folded strictly in chronological order: each profile is
    compared with the last matrix seen for its base ID, so a release can only
    be processed once all earlier ones are done.
    """

    def __init__(
        self,
        registry: ReleaseRegistry,
        sources: SourceFactory | ProfileSource,
        output_manager: OutputManager | None = None,
        renderer: LogoRenderer | None = None,
        logo_settings: LogoSettings | None = None,
        filters: ProfileFilter | None = None,
        fetch_error_policy: FetchErrorPolicy = FetchErrorPolicy.ABORT,
    ):
        """Initialize the builder.

        Args:
            registry: Releases to process, oldest first
            sources: Adapter factory, or a single source used for every release
            output_manager: Output layout for logo files
            renderer: Logo renderer; without one no logo files are drawn
            logo_settings: Logo dimensions
            filters: Collection / taxonomic group restriction
            fetch_error_policy: Abort the run or skip a release that cannot be
                fetched
        """
        if not registry.releases:
            raise ValueError("No releases to process")

        self.logger = get_logger(__name__)
        self.registry = registry
        self.sources = sources
        self.output_manager = output_manager or OutputManager()
        self.renderer = renderer
        self.logo_settings = logo_settings or LogoSettings()
        self.filters = filters or ProfileFilter()
        self.fetch_error_policy = fetch_error_policy

    def _source_for(self, release: ReleaseConfig) -> ProfileSource:
        if isinstance(self.sources, ProfileSource):
            return self.sources
        return self.sources.get_source(release)

    def build(self, progress_callback: ProgressCallback | None = None) -> HistoryResult:
        """
        Build the history over all configured releases.

        Args:
            progress_callback: Optional progress callback

        Returns:
            HistoryResult with the completed table

        Raises:
            ReleaseFetchError: A release could not be fetched and the policy
                is ``ABORT``
        """

        def update_progress(current: int, total: int, message: str):
            if progress_callback:
                progress_callback(current, total, message)

        logging_manager = get_logging_manager()
        started = time.perf_counter()
        labels = self.registry.labels
        logging_manager.log_operation_start("build_history", releases=len(labels))

        table = HistoryTable(labels)
        result = HistoryResult(table=table)

        def record_malformed(error: MalformedIdentifierError):
            self.logger.error(
                "Skipping profile with malformed ID: {error}",
                error=str(error),
                release=error.release,
            )
            result.malformed_ids.append(
                {
                    "release": error.release or "",
                    "matrix_id": error.matrix_id,
                    "reason": error.reason,
                }
            )

        for i, release in enumerate(self.registry.releases):
            update_progress(i, len(labels), f"Processing release {release.label}")

            try:
                matrices = self._source_for(release).fetch_collection(
                    release, self.filters, on_malformed=record_malformed
                )
            except ReleaseFetchError as e:
                if self.fetch_error_policy is FetchErrorPolicy.ABORT:
                    logging_manager.log_operation_error(
                        "build_history", e, release=release.label
                    )
                    raise
                self.logger.error(
                    "Skipping release: {error}", error=str(e), release=release.label
                )
                result.skipped_releases[release.label] = e.reason
                table.mark_skipped(release.label)
                continue

            summary = self.process_release(table, release, matrices, result)
            logging_manager.log_release_summary(
                release.label,
                profiles=summary.total,
                new=summary.new,
                changed=summary.changed,
                logos=summary.logos,
            )

        update_progress(len(labels), len(labels), "History complete")

        result.metadata = {
            "analysis_date": time.strftime("%Y-%m-%d %H:%M:%S"),
            "releases": labels,
            "collection": self.filters.collection,
            "tax_groups": list(self.filters.tax_groups),
            "fixed_width": self.logo_settings.fixed_width,
            "total_profiles": len(table),
        }
        logging_manager.log_operation_complete(
            "build_history",
            time.perf_counter() - started,
            profiles=len(table),
            logos=result.logo_count,
        )
        return result

    def process_release(
        self,
        table: HistoryTable,
        release: ReleaseConfig,
        matrices: list[ProfileMatrix],
        result: HistoryResult | None = None,
    ) -> ReleaseSummary:
        """Fold one release's profiles into the table, in matrix ID order."""
        summary = ReleaseSummary(release=release.label)
        for matrix in sorted(matrices, key=lambda m: m.matrix_id):
            self.logger.debug(
                "Processing profile: {matrix_id} {name}",
                matrix_id=matrix.matrix_id,
                name=matrix.name,
                release=release.label,
            )

            prev_matrix = table.last_matrix(matrix.base_id)
            is_new = prev_matrix is None
            differs = False
            if is_new:
                self.logger.info(
                    "Profile {matrix_id} {name} is new",
                    matrix_id=matrix.matrix_id,
                    name=matrix.name,
                    release=release.label,
                )
            elif not matrices_equivalent(matrix, prev_matrix):
                self.logger.info(
                    "Profile {matrix_id} {name} has changed",
                    matrix_id=matrix.matrix_id,
                    name=matrix.name,
                    release=release.label,
                )
                differs = True

            logo_reference = None
            if is_new or differs:
                logo_reference = self._draw_logo(matrix, release, result)
            else:
                self.logger.debug(
                    "Profile {matrix_id} {name} is unchanged - skipping",
                    matrix_id=matrix.matrix_id,
                    name=matrix.name,
                    release=release.label,
                )

            table.record(
                HistoryEntry(
                    release=release.label,
                    matrix_id=matrix.matrix_id,
                    name=matrix.name,
                    base_id=matrix.base_id,
                    version=matrix.version,
                    is_new=is_new,
                    differs=differs,
                    logo_reference=logo_reference,
                )
            )
            table.set_last_matrix(matrix)

            summary.total += 1
            summary.new += is_new
            summary.changed += differs
            summary.unchanged += not (is_new or differs)
            summary.logos += logo_reference is not None

        return summary

    def _draw_logo(
        self,
        matrix: ProfileMatrix,
        release: ReleaseConfig,
        result: HistoryResult | None,
    ) -> Path | None:
        """Render a logo; a failure leaves the cell without an image."""
        if self.renderer is None:
            return None

        path = self.output_manager.get_logo_path(release.label, matrix.matrix_id)
        try:
            return self.renderer.render(
                matrix,
                path,
                xsize=self.logo_settings.width_for(matrix),
                ysize=self.logo_settings.ysize,
            )
        except RenderError as e:
            e.release = release.label
            e.base_id = e.base_id or matrix.base_id
            self.logger.warning(
                "Logo not drawn: {error}",
                error=str(e),
                release=e.release,
                base_id=e.base_id,
            )
            if result is not None:
                result.render_failures.append(
                    {
                        "release": e.release,
                        "base_id": e.base_id,
                        "matrix_id": e.matrix_id,
                        "reason": e.reason,
                    }
                )
            return None


def draw_release_logos(
    source: ProfileSource,
    release: ReleaseConfig,
    out_dir: str | Path,
    renderer: LogoRenderer,
    logo_settings: LogoSettings | None = None,
    filters: ProfileFilter | None = None,
) -> list[Path]:
    """
    Draw a logo for every profile of one release.

    Logo files are named ``<matrix ID>.png``. Profiles whose logo cannot be
    drawn are logged and left out of the returned list.

    Raises:
        ReleaseFetchError: The release could not be fetched
    """
    logger = get_logger(__name__)
    logo_settings = logo_settings or LogoSettings()
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    def report_malformed(error: MalformedIdentifierError):
        logger.error("Skipping profile with malformed ID: {error}", error=str(error))

    drawn = []
    for matrix in source.fetch_collection(release, filters, report_malformed):
        logger.info(
            "Processing profile: {name} {matrix_id}",
            name=matrix.name,
            matrix_id=matrix.matrix_id,
            release=release.label,
        )
        path = out_dir / f"{matrix.matrix_id.replace('/', '_')}.png"
        try:
            drawn.append(
                renderer.render(
                    matrix,
                    path,
                    xsize=logo_settings.width_for(matrix),
                    ysize=logo_settings.ysize,
                )
            )
        except RenderError as e:
            e.release = release.label
            logger.warning(
                "Logo not drawn: {error}", error=str(e), release=release.label
            )

    return drawn
