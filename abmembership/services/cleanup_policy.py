"""Rules deciding which stored user keys survive a cleanup pass."""

from enum import Enum
from typing import Any, Optional

from abmembership.models.keys import AssignmentKey, FinishedKey


class CleanupStatus(str, Enum):
    """Whether a UserState already reconciled its keys against the catalog."""

    NOT_CLEANED = "not_cleaned"
    CLEANED = "cleaned"


def current_version(experiment: Any) -> int:
    return experiment.version if experiment.version is not None else 1


def is_stale_version(key: AssignmentKey, experiment: Any) -> bool:
    """
    True for keys of ``experiment`` that carry an explicit version other than
    the current one. Base names must match exactly, so ``variation_of_<name>``
    keys never belong to ``<name>``. Finished markers are never stale.
    """
    if is_protected(key):
        return False
    if key.name != experiment.name or key.version is None:
        return False
    return key.version != current_version(experiment)


def is_protected(key: AssignmentKey) -> bool:
    """Finished markers are never removed by a cleanup pass."""
    return isinstance(key, FinishedKey)


def is_obsolete(experiment: Optional[Any]) -> bool:
    """
    Keys of an experiment are obsolete when it no longer exists, when a winner
    was picked, or when it has not started yet.
    """
    if experiment is None:
        return True
    if experiment.has_winner:
        return True
    return experiment.start_time is None
