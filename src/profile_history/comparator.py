"""Matrix equality rules for comparing a profile across releases."""

import numpy as np

from .data_models import ProfileMatrix


def pfms_equal(content1: np.ndarray, content2: np.ndarray) -> bool:
    """Exact structural equality: same shape and the same value in every cell."""
    return bool(np.array_equal(content1, content2))


def matrices_equivalent(matrix1: ProfileMatrix, matrix2: ProfileMatrix) -> bool:
    """Decide whether two matrices hold the same profile content.

    When both matrices carry a version number the versions decide on their
    own and the counts are not compared: a version is only bumped when the
    matrix changes. If either side predates versioning the PFMs are compared
    cell by cell.
    """
    if matrix1.base_id != matrix2.base_id:
        return False

    if matrix1.version and matrix2.version:
        return matrix1.version == matrix2.version

    return pfms_equal(matrix1.content, matrix2.content)
