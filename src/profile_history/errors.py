"""
Exceptions raised by the profile history toolkit.
"""


class ProfileHistoryError(Exception):
    """Base exception for profile history operations."""

    pass


class ConfigError(ProfileHistoryError):
    """Release configuration is missing or invalid."""

    pass


class MalformedIdentifierError(ProfileHistoryError):
    """A profile identifier cannot be split into base ID and version."""

    def __init__(self, matrix_id: str, reason: str, release: str | None = None):
        self.matrix_id = matrix_id
        self.reason = reason
        self.release = release
        where = f" in release {release}" if release else ""
        super().__init__(f"Malformed profile ID {matrix_id!r}{where}: {reason}")


class ReleaseFetchError(ProfileHistoryError):
    """The matrix collection of a release could not be fetched."""

    def __init__(self, release: str, reason: str):
        self.release = release
        self.reason = reason
        super().__init__(f"Could not fetch profiles for release {release}: {reason}")


class RenderError(ProfileHistoryError):
    """A logo image could not be rendered.

    The renderer does not know which release it is drawing for; callers that
    do set ``release`` before reporting the error.
    """

    def __init__(
        self,
        matrix_id: str,
        path: str,
        reason: str,
        base_id: str | None = None,
        release: str | None = None,
    ):
        self.matrix_id = matrix_id
        self.path = path
        self.reason = reason
        self.base_id = base_id
        self.release = release
        super().__init__(matrix_id, path, reason)

    def __str__(self) -> str:
        where = f" in release {self.release}" if self.release else ""
        return (
            f"Could not draw logo for {self.matrix_id}{where} "
            f"to {self.path}: {self.reason}"
        )


class HistoryTableError(ProfileHistoryError):
    """An entry would break the ordering or uniqueness of the history table."""

    def __init__(self, message: str, base_id: str, release: str):
        self.base_id = base_id
        self.release = release
        super().__init__(f"{message} (base ID {base_id}, release {release})")
