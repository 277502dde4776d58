# services/experiment_service.py
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from abmembership.models.orm.experiment import ExperimentORM
from abmembership.models.schemas.experiment import ExperimentCreateModel, ExperimentModel
from abmembership.repositories.experiment_repo import ExperimentRepository

logger = logging.getLogger(__name__)


class ExperimentService:
    def __init__(self, db: Session):
        self.experiment_repo = ExperimentRepository(db)
        self.db = db

    def create_experiment(self, experiment_data: ExperimentCreateModel) -> ExperimentModel:
        """
        Creates a new experiment, translating repository errors to HTTP errors:
        validation problems become 400, database failures 500.
        """
        try:
            experiment_orm = self.experiment_repo.create_experiment(experiment_data)
            return ExperimentModel.model_validate(experiment_orm)

        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except RuntimeError as e:
            logger.exception("Failed to create experiment %s", experiment_data.name)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create experiment: {str(e)}",
            )

    def _found(self, name: str, experiment_orm: Optional[ExperimentORM]) -> ExperimentModel:
        if experiment_orm is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Experiment {name} not found.",
            )
        return ExperimentModel.model_validate(experiment_orm)

    def get_experiment(self, name: str) -> ExperimentModel:
        return self._found(name, self.experiment_repo.get_experiment(name))

    def start_experiment(self, name: str) -> ExperimentModel:
        return self._found(name, self.experiment_repo.start_experiment(name))

    def set_winner(self, name: str, alternative: str) -> ExperimentModel:
        try:
            return self._found(name, self.experiment_repo.set_winner(name, alternative))
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    def reset_experiment(self, name: str) -> ExperimentModel:
        return self._found(name, self.experiment_repo.reset_experiment(name))
