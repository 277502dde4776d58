# services/user_state.py
import logging
from typing import Any, Dict, List, Optional, Set

from abmembership.core.settings import config_settings
from abmembership.models.keys import AssignmentKey, base_name, finished_key, parse_key
from abmembership.persistence.base import PersistenceAdapter
from abmembership.persistence.registry import adapter_class, find_adapter
from abmembership.services.cleanup_policy import (
    CleanupStatus,
    is_obsolete,
    is_protected,
    is_stale_version,
)
from abmembership.services.experiment_catalog import ExperimentCatalog, ExperimentFinder

logger = logging.getLogger(__name__)


class UserState:
    """
    The experiment keys stored for one user, plus the passes that prune them.

    Reads and writes go straight to the persistence adapter. Build one per
    request: the "already cleaned up" status lives only as long as the instance.
    """

    def __init__(
        self,
        context: Any = None,
        adapter: Optional[PersistenceAdapter] = None,
        catalog: Optional[ExperimentFinder] = None,
    ):
        self.adapter = adapter if adapter is not None else adapter_class()(context)
        self.catalog = catalog if catalog is not None else ExperimentCatalog()
        self.cleanup_status = CleanupStatus.NOT_CLEANED

    @classmethod
    def find(
        cls, identity: Any, selector: str, catalog: Optional[ExperimentFinder] = None
    ) -> Optional["UserState"]:
        """
        Loads the state stored for ``identity`` by the ``selector`` backend.
        Returns None if that backend cannot look users up by identity.
        """
        adapter = find_adapter(selector, identity)
        if adapter is None:
            return None
        return cls(None, adapter, catalog)

    @property
    def identity(self) -> Any:
        return getattr(self.adapter, "identity", None)

    def close(self) -> None:
        """Releases the adapter's backend resources (e.g. its database session)."""
        close = getattr(self.adapter, "close", None)
        if close is not None:
            close()

    # --- key access ---

    def get(self, key: str) -> Optional[Any]:
        return self.adapter.get(key)

    def set(self, key: str, value: Any) -> Any:
        return self.adapter.set(key, value)

    def delete(self, key: str) -> None:
        self.adapter.delete(key)

    def keys(self) -> Set[str]:
        return set(self.adapter.keys())

    def __getitem__(self, key: str) -> Optional[Any]:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.delete(key)

    # --- cleanup ---

    def keys_without_finished(self) -> List[AssignmentKey]:
        parsed = (parse_key(key) for key in self.keys())
        return [key for key in parsed if not is_protected(key)]

    def keys_without_experiment(self, experiment_key: str) -> Set[str]:
        """Stored keys other than ``experiment_key`` and its finished marker."""
        own = {experiment_key, finished_key(experiment_key)}
        return {key for key in self.keys() if key not in own}

    def cleanup_old_versions(self, experiment: Any) -> List[str]:
        """Deletes this user's keys for past versions of ``experiment``."""
        deleted = []
        for key in self.keys():
            if is_stale_version(parse_key(key), experiment):
                self.delete(key)
                deleted.append(key)

        if deleted:
            logger.debug("User %s: removed old versions of %s: %s", self.identity, experiment.name, deleted)
        return deleted

    def cleanup_old_experiments(self) -> List[str]:
        """
        Deletes keys of experiments that were removed, already have a winner,
        or have not started. Finished markers are kept.

        Runs once per instance; later calls return without touching storage.
        """
        if self.cleanup_status is CleanupStatus.CLEANED:
            return []

        deleted = []
        experiments: Dict[str, Any] = {}
        for key in self.keys_without_finished():
            if key.name not in experiments:
                experiments[key.name] = self.catalog.find(key.name)
            if is_obsolete(experiments[key.name]):
                self.delete(key.raw)
                deleted.append(key.raw)

        self.cleanup_status = CleanupStatus.CLEANED
        if deleted:
            logger.debug("User %s: removed keys of old experiments: %s", self.identity, deleted)
        return deleted

    # --- membership queries ---

    def active_experiments(self) -> Dict[str, Any]:
        """Experiment name -> assigned alternative, for running experiments without a winner."""
        active = {}
        for key in self.keys_without_finished():
            experiment = self.catalog.find(key.name)
            if experiment is not None and not experiment.has_winner:
                active[key.name] = self.get(key.raw)
        return active

    def max_experiments_reached(self, experiment_key: str) -> bool:
        """
        Whether joining ``experiment_key`` would put the user in more
        experiments than ALLOW_MULTIPLE_EXPERIMENTS permits.
        """
        allow_multiple = config_settings.ALLOW_MULTIPLE_EXPERIMENTS

        if allow_multiple == "control":
            # only experiments in which the user sees the control count as free
            active = self.active_experiments()
            name = base_name(experiment_key)
            count_control = sum(
                1 for experiment_name, alternative in active.items()
                if experiment_name == name or alternative == "control"
            )
            return len(active) > count_control

        if allow_multiple:
            return False

        return len(self.keys_without_experiment(experiment_key)) > 0
