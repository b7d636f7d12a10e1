"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path
from unittest.mock import Mock

import numpy as np
import pytest

from src.profile_history.config import ReleaseConfig, ReleaseRegistry
from src.profile_history.data_models import ProfileMatrix
from src.profile_history.identity import parse_matrix_id

AGL3_COUNTS = [
    [0, 3, 79, 40, 66, 48, 65, 11, 65, 0],
    [94, 75, 4, 3, 1, 2, 5, 2, 3, 3],
    [1, 0, 3, 4, 1, 0, 5, 3, 28, 88],
    [2, 19, 11, 50, 29, 47, 22, 81, 1, 6],
]


def make_matrix(
    matrix_id: str,
    name: str = "TF",
    counts: list[list[float]] | None = None,
    tax_group: str | None = "vertebrates",
    collection: str | None = "CORE",
    unversioned: bool = False,
) -> ProfileMatrix:
    """Build a ProfileMatrix; the base ID and version come from the ID."""
    if unversioned:
        base_id, version = matrix_id, 0
    else:
        base_id, version = parse_matrix_id(matrix_id)
    return ProfileMatrix(
        matrix_id=matrix_id,
        base_id=base_id,
        version=version,
        name=name,
        content=np.array(counts or AGL3_COUNTS, dtype=np.float64),
        collection=collection,
        tax_group=tax_group,
    )


def jaspar_text(matrix_id: str, name: str, counts: list[list[float]]) -> str:
    lines = [f">{matrix_id} {name}"]
    for nucleotide, row in zip("ACGT", counts, strict=True):
        lines.append(f"{nucleotide}  [ {' '.join(str(v) for v in row)} ]")
    return "\n".join(lines) + "\n"


@pytest.fixture
def matrix_factory():
    """Factory for ProfileMatrix objects."""
    return make_matrix


@pytest.fixture
def versioned_registry():
    """The three versioned releases, oldest first."""
    return ReleaseRegistry(
        (
            ReleaseConfig("2010", era="versioned"),
            ReleaseConfig("2014", era="versioned"),
            ReleaseConfig("2016", era="versioned"),
        )
    )


@pytest.fixture
def mixed_registry():
    """An unversioned release followed by two versioned ones."""
    return ReleaseRegistry(
        (
            ReleaseConfig("2008", era="unversioned"),
            ReleaseConfig("2010", era="versioned"),
            ReleaseConfig("2014", era="versioned"),
        )
    )


@pytest.fixture
def mock_renderer():
    """Renderer double that returns the requested path without drawing."""
    renderer = Mock()
    renderer.render.side_effect = lambda matrix, path, xsize, ysize: Path(path)
    return renderer


@pytest.fixture
def jaspar_data_dir(tmp_path):
    """
    Release data directory with collection/tax group files.

    JASPAR2010: MA0001.1 (AGL3), MA0002.1 (RUNX1)
    JASPAR2014: MA0001.1, MA0002.2, MA0003.1 (TFAP2A)
    JASPAR2016: MA0001.2, MA0003.1
    """
    other = [[1, 2], [3, 4], [5, 6], [7, 8]]
    layout = {
        "JASPAR2010": {
            "vertebrates": [("MA0002.1", "RUNX1", other)],
            "plants": [("MA0001.1", "AGL3", AGL3_COUNTS)],
        },
        "JASPAR2014": {
            "vertebrates": [
                ("MA0002.2", "RUNX1", other),
                ("MA0003.1", "TFAP2A", other),
            ],
            "plants": [("MA0001.1", "AGL3", AGL3_COUNTS)],
        },
        "JASPAR2016": {
            "vertebrates": [("MA0003.1", "TFAP2A", other)],
            "plants": [("MA0001.2", "AGL3", other)],
        },
    }

    data_dir = tmp_path / "jaspar_data"
    for release_dir, groups in layout.items():
        core = data_dir / release_dir / "CORE"
        core.mkdir(parents=True)
        for tax_group, matrices in groups.items():
            text = "".join(jaspar_text(*matrix) for matrix in matrices)
            (core / f"{tax_group}.jaspar").write_text(text, encoding="utf-8")

    return data_dir
