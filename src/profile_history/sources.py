"""
Profile sources: fetch the matrix collection of one release.

Releases before 2010 identify profiles by bare base IDs while later ones add a
version suffix, so each era has its own adapter. ``SourceFactory`` picks the
adapter for a release from its configured era.

Release data lives below the data directory at the release's ``path``:

- a single JASPAR-format bundle file, or
- a directory with one sub-directory per collection (``CORE``, ...), each
  holding one matrix file per taxonomic group (``plants.jaspar``, ...), or
- a directory of matrix files without collection sub-directories.

A release with a ``url`` and no local data is downloaded once and kept.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from pathlib import Path

import requests

from ..shared_utilities import get_logger, get_logging_manager
from .config import (
    ERA_UNVERSIONED,
    ERA_VERSIONED,
    ProfileFilter,
    ReleaseConfig,
    get_data_dir,
)
from .data_models import ProfileMatrix
from .errors import MalformedIdentifierError, ReleaseFetchError
from .identity import parse_matrix_id
from .jaspar_format import MATRIX_FILE_SUFFIXES, JasparRecord, read_jaspar

logger = get_logger(__name__)

MalformedCallback = Callable[[MalformedIdentifierError], None]

DOWNLOAD_TIMEOUT = 60


class ProfileSource(ABC):
    """Capability interface for reading a release's profiles."""

    @abstractmethod
    def fetch_collection(
        self,
        release: ReleaseConfig,
        filters: ProfileFilter | None = None,
        on_malformed: MalformedCallback | None = None,
    ) -> list[ProfileMatrix]:
        """Return the release's profiles ordered by matrix ID.

        Args:
            release: Release to read
            filters: Collection / taxonomic group restriction
            on_malformed: Called for each profile whose ID cannot be parsed;
                that profile is left out. Without a callback the
                ``MalformedIdentifierError`` propagates.

        Raises:
            ReleaseFetchError: The release's data is unavailable or unreadable
        """


class InMemoryProfileSource(ProfileSource):
    """Serves collections that were loaded elsewhere, keyed by release label."""

    def __init__(self, collections: dict[str, list[ProfileMatrix]]):
        self.collections = collections

    def fetch_collection(
        self,
        release: ReleaseConfig,
        filters: ProfileFilter | None = None,
        on_malformed: MalformedCallback | None = None,
    ) -> list[ProfileMatrix]:
        if release.label not in self.collections:
            raise ReleaseFetchError(release.label, "no profiles loaded for release")

        filters = filters or ProfileFilter(collection=None)
        matrices = [
            matrix
            for matrix in self.collections[release.label]
            if filters.allows_collection(matrix.collection)
            and filters.allows_tax_group(matrix.tax_group)
        ]
        return sorted(matrices, key=lambda m: m.matrix_id)


class JasparFileSource(ProfileSource):
    """Reads JASPAR-format files from the data directory."""

    def __init__(
        self,
        data_dir: str | Path | None = None,
        session: requests.Session | None = None,
        timeout: int = DOWNLOAD_TIMEOUT,
    ):
        """Initialize the file source.

        Args:
            data_dir: Root directory of release data
            session: HTTP session used to download release bundles
            timeout: Download timeout in seconds
        """
        self.data_dir = get_data_dir(data_dir)
        self.session = session
        self.timeout = timeout

    @abstractmethod
    def resolve_identity(self, matrix_id: str) -> tuple[str, int]:
        """Base ID and version for a matrix ID of this era."""

    def release_path(self, release: ReleaseConfig) -> Path:
        return self.data_dir / release.data_path

    def fetch_collection(
        self,
        release: ReleaseConfig,
        filters: ProfileFilter | None = None,
        on_malformed: MalformedCallback | None = None,
    ) -> list[ProfileMatrix]:
        filters = filters or ProfileFilter(collection=None)
        path = self._ensure_local(release)

        matrices = []
        try:
            for record, collection, tax_group in self._iter_records(
                path, release, filters
            ):
                try:
                    base_id, version = self.resolve_identity(record.matrix_id)
                except MalformedIdentifierError as e:
                    error = MalformedIdentifierError(
                        e.matrix_id, e.reason, release.label
                    )
                    if on_malformed is None:
                        raise error from e
                    on_malformed(error)
                    continue

                matrices.append(
                    ProfileMatrix(
                        matrix_id=record.matrix_id,
                        base_id=base_id,
                        version=version,
                        name=record.name,
                        content=record.content,
                        collection=collection,
                        tax_group=tax_group,
                    )
                )
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise ReleaseFetchError(release.label, str(e)) from e

        logger.info(
            f"Fetched {len(matrices)} profiles for release {release.label}",
            release=release.label,
            path=str(path),
        )
        return sorted(matrices, key=lambda m: m.matrix_id)

    def _iter_records(
        self, path: Path, release: ReleaseConfig, filters: ProfileFilter
    ) -> Iterator[tuple[JasparRecord, str | None, str | None]]:
        """Yield ``(record, collection, tax_group)`` for every allowed file."""
        if path.is_file():
            if filters.allows_collection(release.collection):
                for record in read_jaspar(path):
                    yield record, release.collection, None
            return

        for entry in sorted(path.iterdir()):
            if entry.is_dir():
                collection = entry.name
                if not filters.allows_collection(collection):
                    continue
                for matrix_file in self._matrix_files(entry):
                    tax_group = matrix_file.stem
                    if not filters.allows_tax_group(tax_group):
                        continue
                    for record in read_jaspar(matrix_file):
                        yield record, collection, tax_group
            elif entry.suffix in MATRIX_FILE_SUFFIXES:
                if not filters.allows_collection(release.collection):
                    continue
                for record in read_jaspar(entry):
                    yield record, release.collection, None

    @staticmethod
    def _matrix_files(directory: Path) -> list[Path]:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix in MATRIX_FILE_SUFFIXES
        )

    def _ensure_local(self, release: ReleaseConfig) -> Path:
        """Local path of the release data, downloading the bundle if needed."""
        path = self.release_path(release)
        if path.exists():
            return path

        if not release.url:
            raise ReleaseFetchError(release.label, f"no data found at {path}")

        logger.info(
            f"Downloading release {release.label} bundle",
            release=release.label,
            url=release.url,
        )
        session = self.session or requests.Session()
        try:
            started = time.perf_counter()
            response = session.get(release.url, timeout=self.timeout)
            get_logging_manager().log_download(
                release.url, response.status_code, time.perf_counter() - started
            )
            response.raise_for_status()

            path.parent.mkdir(parents=True, exist_ok=True)
            partial = path.with_name(path.name + ".part")
            partial.write_bytes(response.content)
            partial.replace(path)
        except (requests.RequestException, OSError) as e:
            raise ReleaseFetchError(
                release.label, f"download of {release.url} failed: {e}"
            ) from e

        return path


class UnversionedProfileSource(JasparFileSource):
    """Releases before 2010: the matrix ID is the base ID, version 0."""

    def resolve_identity(self, matrix_id: str) -> tuple[str, int]:
        if not matrix_id or not matrix_id.strip():
            raise MalformedIdentifierError(matrix_id, "identifier is empty")
        return matrix_id, 0


class VersionedProfileSource(JasparFileSource):
    """Releases from 2010 on: IDs carry a ``.<version>`` suffix."""

    def resolve_identity(self, matrix_id: str) -> tuple[str, int]:
        return parse_matrix_id(matrix_id)


SOURCE_ADAPTERS: dict[str, type[JasparFileSource]] = {
    ERA_UNVERSIONED: UnversionedProfileSource,
    ERA_VERSIONED: VersionedProfileSource,
}


class SourceFactory:
    """Selects the profile source adapter for each release."""

    def __init__(
        self,
        data_dir: str | Path | None = None,
        session: requests.Session | None = None,
    ):
        self.data_dir = get_data_dir(data_dir)
        self.session = session
        self._sources: dict[str, ProfileSource] = {}

    def get_source(self, release: ReleaseConfig) -> ProfileSource:
        """Adapter for the release's era (one instance per era)."""
        if release.era not in self._sources:
            adapter_cls = SOURCE_ADAPTERS[release.era]
            self._sources[release.era] = adapter_cls(self.data_dir, self.session)
        return self._sources[release.era]
