"""
Future-occurrence lookahead over a history table.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .data_models import HistoryTable


def has_future_occurrence(table: "HistoryTable", base_id: str, release: str) -> bool:
    """Whether ``base_id`` has an entry in a release strictly after ``release``.

    A profile missing from a release is "not yet introduced" when it shows up
    later and "removed" otherwise. For the last release there is nothing to
    look ahead to, so the answer is whether the profile is present in it.

    Raises:
        ValueError: ``release`` is not one of the table's releases.
    """
    releases = table.releases
    if release not in releases:
        raise ValueError(f"Unknown release: {release}")

    if release == releases[-1]:
        return table.get_entry(base_id, release) is not None

    later = releases[releases.index(release) + 1 :]
    return any(table.get_entry(base_id, jv) is not None for jv in later)
