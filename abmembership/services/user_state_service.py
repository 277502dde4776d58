# services/user_state_service.py
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from abmembership.core.settings import config_settings
from abmembership.models.schemas.user import (
    ActiveExperimentsResponseModel,
    CleanupResponseModel,
    UserKeysResponseModel,
)
from abmembership.services.experiment_catalog import ExperimentCatalog
from abmembership.services.experiment_service import ExperimentService
from abmembership.services.user_state import UserState


class UserStateService:
    def __init__(self, db: Session, selector: str | None = None):
        self.db = db
        self.selector = selector or config_settings.API_PERSISTENCE_ADAPTER
        self.catalog = ExperimentCatalog(db)

    @contextmanager
    def _load(self, user_id: str) -> Iterator[UserState]:
        """
        Yields the user's state and closes its adapter afterwards, so backend
        sessions never outlive the request.
        """
        user_state = UserState.find(user_id, self.selector, catalog=self.catalog)
        if user_state is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No user state available for adapter {self.selector!r}.",
            )
        try:
            yield user_state
        finally:
            user_state.close()

    @staticmethod
    def _keys(user_id: str, user_state: UserState) -> UserKeysResponseModel:
        return UserKeysResponseModel(
            user_id=user_id,
            keys={key: user_state[key] for key in sorted(user_state.keys())},
        )

    def get_keys(self, user_id: str) -> UserKeysResponseModel:
        with self._load(user_id) as user_state:
            return self._keys(user_id, user_state)

    def set_key(self, user_id: str, key: str, value: Any) -> UserKeysResponseModel:
        with self._load(user_id) as user_state:
            user_state[key] = value
            return self._keys(user_id, user_state)

    def cleanup_old_experiments(self, user_id: str) -> CleanupResponseModel:
        with self._load(user_id) as user_state:
            deleted = user_state.cleanup_old_experiments()
            return CleanupResponseModel(
                user_id=user_id, deleted=sorted(deleted), remaining=sorted(user_state.keys())
            )

    def cleanup_old_versions(self, user_id: str, experiment_name: str) -> CleanupResponseModel:
        experiment = ExperimentService(self.db).get_experiment(experiment_name)
        with self._load(user_id) as user_state:
            deleted = user_state.cleanup_old_versions(experiment)
            return CleanupResponseModel(
                user_id=user_id, deleted=sorted(deleted), remaining=sorted(user_state.keys())
            )

    def active_experiments(self, user_id: str) -> ActiveExperimentsResponseModel:
        with self._load(user_id) as user_state:
            return ActiveExperimentsResponseModel(
                user_id=user_id, experiments=user_state.active_experiments()
            )
