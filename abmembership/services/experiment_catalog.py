from typing import Optional, Protocol

from sqlalchemy.orm import Session

from abmembership.core import db as db_module
from abmembership.models.schemas.experiment import ExperimentModel
from abmembership.repositories.experiment_repo import ExperimentRepository


class ExperimentFinder(Protocol):
    """Anything that can look an experiment up by name."""

    def find(self, name: str) -> Optional[ExperimentModel]:
        ...


class ExperimentCatalog:
    """
    Looks experiments up in the database.

    With no session given, every lookup opens and closes its own.
    """

    def __init__(self, db: Optional[Session] = None):
        self.db = db

    def find(self, name: str) -> Optional[ExperimentModel]:
        if self.db is not None:
            return self._find(self.db, name)
        with db_module.SessionLocal() as db:
            return self._find(db, name)

    @staticmethod
    def _find(db: Session, name: str) -> Optional[ExperimentModel]:
        db_experiment = ExperimentRepository(db).get_experiment(name)
        if db_experiment is None:
            return None
        return ExperimentModel.model_validate(db_experiment)
