import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from abmembership.models.orm.experiment import ExperimentORM
from abmembership.models.schemas.experiment import ExperimentCreateModel

logger = logging.getLogger(__name__)


class ExperimentRepository:
    def __init__(self, db: Session):
        """Initializes the repository with a database session."""
        self.db = db

    def get_experiment(self, name: str) -> Optional[ExperimentORM]:
        stmt = select(ExperimentORM).where(ExperimentORM.name == name)
        return self.db.scalars(stmt).one_or_none()

    def create_experiment(self, experiment_data: ExperimentCreateModel) -> ExperimentORM:
        """
        Creates a new experiment record.

        Raises:
            ValueError: the alternatives are not unique or the name is taken.
            RuntimeError: any other database failure.
        """
        if len(set(experiment_data.alternatives)) != len(experiment_data.alternatives):
            raise ValueError("Experiment alternatives must be unique.")
        if self.get_experiment(experiment_data.name) is not None:
            raise ValueError(f"Experiment {experiment_data.name!r} already exists.")

        db_experiment = ExperimentORM(
            name=experiment_data.name,
            alternatives=list(experiment_data.alternatives),
            start_time=datetime.utcnow() if experiment_data.start else None,
        )
        try:
            self.db.add(db_experiment)
            self.db.commit()
            self.db.refresh(db_experiment)
            return db_experiment

        except IntegrityError as e:
            self.db.rollback()
            raise ValueError(f"Experiment {experiment_data.name!r} already exists.") from e

        except SQLAlchemyError as e:
            self.db.rollback()
            raise RuntimeError(
                f"A database error occurred during experiment creation: {e}"
            ) from e

    def _update(self, name: str, **changes) -> Optional[ExperimentORM]:
        db_experiment = self.get_experiment(name)
        if db_experiment is None:
            return None

        for field, value in changes.items():
            setattr(db_experiment, field, value)
        try:
            self.db.commit()
            self.db.refresh(db_experiment)
            return db_experiment
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RuntimeError(f"A database error occurred updating experiment {name!r}: {e}") from e

    def start_experiment(self, name: str) -> Optional[ExperimentORM]:
        """Sets the start time, keeping the original one if already started."""
        db_experiment = self.get_experiment(name)
        if db_experiment is None or db_experiment.start_time is not None:
            return db_experiment
        return self._update(name, start_time=datetime.utcnow())

    def set_winner(self, name: str, alternative: str) -> Optional[ExperimentORM]:
        db_experiment = self.get_experiment(name)
        if db_experiment is None:
            return None
        if alternative not in db_experiment.alternatives:
            raise ValueError(f"{alternative!r} is not an alternative of {name!r}.")
        logger.info("Experiment %s: winner set to %s", name, alternative)
        return self._update(name, winner=alternative)

    def reset_experiment(self, name: str) -> Optional[ExperimentORM]:
        """
        Starts a new version of the experiment: bumps the version and clears
        the winner, so user keys stored for the previous version become stale.
        """
        db_experiment = self.get_experiment(name)
        if db_experiment is None:
            return None
        version = (db_experiment.version or 1) + 1
        logger.info("Experiment %s: reset to version %s", name, version)
        return self._update(name, version=version, winner=None)
