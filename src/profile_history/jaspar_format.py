"""
Reading and writing position frequency matrices in JASPAR format.

A JASPAR file holds one or more matrices::

    >MA0001.1 AGL3
    A  [ 0  3 79 40 66 48 65 11 65  0 ]
    C  [94 75  4  3  1  2  5  2  3  3 ]
    G  [ 1  0  3  4  1  0  5  3 28 88 ]
    T  [ 2 19 11 50 29 47 22 81  1  6 ]

Rows without the nucleotide label or the brackets are accepted, as are
header-less ``.pfm`` files holding a single matrix named after the file.
"""

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from .data_models import NUCLEOTIDES

MATRIX_FILE_SUFFIXES = (".jaspar", ".pfm", ".txt")


@dataclass
class JasparRecord:
    """One matrix as read from a file, before identity is resolved."""

    matrix_id: str
    name: str
    content: np.ndarray = field(repr=False)


def _parse_row(line: str) -> tuple[str | None, list[float]]:
    """Split a matrix row into its optional nucleotide label and counts."""
    label = None
    if line[0].isalpha():
        label = line[0].upper()
        line = line[1:]
    values = line.replace("[", " ").replace("]", " ").split()
    return label, [float(value) for value in values]


def _build_matrix(
    source: str, matrix_id: str, rows: list[tuple[str | None, list[float]]]
) -> np.ndarray:
    if len(rows) != len(NUCLEOTIDES):
        raise ValueError(
            f"{source}: matrix {matrix_id} has {len(rows)} rows, expected 4"
        )

    labels = [label for label, _ in rows]
    if all(labels):
        if sorted(labels) != sorted(NUCLEOTIDES):
            raise ValueError(f"{source}: matrix {matrix_id} has row labels {labels}")
        by_label = dict(rows)
        ordered = [by_label[nucleotide] for nucleotide in NUCLEOTIDES]
    else:
        ordered = [values for _, values in rows]

    lengths = {len(values) for values in ordered}
    if len(lengths) != 1 or 0 in lengths:
        raise ValueError(f"{source}: matrix {matrix_id} has uneven or empty rows")

    return np.array(ordered, dtype=np.float64)


def parse_jaspar(text: str, source: str = "<string>") -> list[JasparRecord]:
    """Parse JASPAR-format text into records, in file order."""
    records: list[JasparRecord] = []
    matrix_id: str | None = None
    name = ""
    rows: list[tuple[str | None, list[float]]] = []

    def flush():
        if matrix_id is None:
            if rows:
                raise ValueError(f"{source}: matrix rows found before any header")
            return
        records.append(
            JasparRecord(matrix_id, name, _build_matrix(source, matrix_id, rows))
        )

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith(">"):
            flush()
            header = line[1:].split(None, 1)
            if not header:
                raise ValueError(f"{source}: empty matrix header")
            matrix_id = header[0]
            name = header[1].strip() if len(header) > 1 else matrix_id
            rows = []
            continue
        try:
            rows.append(_parse_row(line))
        except ValueError as e:
            raise ValueError(f"{source}: bad matrix row {line!r}") from e

    flush()
    return records


def read_jaspar(path: str | Path) -> list[JasparRecord]:
    """Read every matrix from a JASPAR-format or single-matrix PFM file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if not any(line.lstrip().startswith(">") for line in text.splitlines()):
        # Header-less PFM: a single matrix named after the file
        text = f">{path.stem}\n{text}"

    records = parse_jaspar(text, source=str(path))
    if not records:
        raise ValueError(f"No matrices found in {path}")
    return records


def format_jaspar(records: list[JasparRecord]) -> str:
    """Render records as JASPAR-format text."""
    lines = []
    for record in records:
        lines.append(f">{record.matrix_id}\t{record.name}")
        for nucleotide, row in zip(NUCLEOTIDES, record.content, strict=True):
            counts = " ".join(f"{value:g}" for value in row)
            lines.append(f"{nucleotide}  [ {counts} ]")
    return "\n".join(lines) + "\n"


def write_jaspar(records: list[JasparRecord], path: str | Path) -> None:
    """Write records to a JASPAR-format file."""
    Path(path).write_text(format_jaspar(records), encoding="utf-8")
