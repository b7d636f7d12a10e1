"""
Profile identifier parsing.

JASPAR identifiers from 2010 onward carry a version suffix (``MA0001.2``);
older releases use bare base IDs (``MA0001``).
"""

from .errors import MalformedIdentifierError

ID_SEPARATOR = "."


def parse_matrix_id(matrix_id: str) -> tuple[str, int]:
    """Split a profile identifier into ``(base_id, version)``.

    Identifiers without a separator are unversioned and get version ``0``.
    Only the first separator is significant: for ``MA0001.2.3`` the version is
    the token between the first and second separator.

    Raises:
        MalformedIdentifierError: empty identifier, empty base ID, or a
            missing/non-numeric version token.
    """
    if not matrix_id or not matrix_id.strip():
        raise MalformedIdentifierError(matrix_id, "identifier is empty")

    base_id, separator, rest = matrix_id.partition(ID_SEPARATOR)
    if not base_id:
        raise MalformedIdentifierError(matrix_id, "base ID is empty")

    if not separator:
        return matrix_id, 0

    version_token = rest.split(ID_SEPARATOR, 1)[0]
    if not (version_token.isascii() and version_token.isdigit()):
        raise MalformedIdentifierError(
            matrix_id, f"version {version_token!r} is not a number"
        )

    return base_id, int(version_token)


def format_matrix_id(base_id: str, version: int) -> str:
    """Inverse of :func:`parse_matrix_id` for well-formed identifiers."""
    if version:
        return f"{base_id}{ID_SEPARATOR}{version}"
    return base_id
