from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Path
import uvicorn
from sqlalchemy.orm import Session
from starlette import status

from abmembership.core.auth import require_auth_token
from abmembership.core.db import get_db, init_db
from abmembership.core.logging_config import setup_logging
from abmembership.core.settings import config_settings
from abmembership.models.schemas.experiment import (
    ExperimentCreateModel,
    ExperimentModel,
    WinnerModel,
)
from abmembership.models.schemas.user import (
    ActiveExperimentsResponseModel,
    CleanupResponseModel,
    UserKeysResponseModel,
    UserKeyValueModel,
)
from abmembership.services.experiment_service import ExperimentService
from abmembership.services.user_state_service import UserStateService


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config_settings.LOG_LEVEL)
    init_db()
    yield


app = FastAPI(
    title="ab-membership",
    description="Per-user experiment membership store",
    version="0.1.0",
    dependencies=[Depends(require_auth_token)],
    lifespan=lifespan,
)


# --- Experiments ---


@app.post(
    "/experiments",
    response_model=ExperimentModel,
    status_code=status.HTTP_201_CREATED,
)
def post_experiments(
    experiment_data: ExperimentCreateModel,
    db: Session = Depends(get_db),
):
    return ExperimentService(db).create_experiment(experiment_data)


@app.post(
    "/experiments/{name}/start",
    response_model=ExperimentModel,
    summary="Start an experiment",
)
def start_experiment(name: str, db: Session = Depends(get_db)):
    return ExperimentService(db).start_experiment(name)


@app.post(
    "/experiments/{name}/winner",
    response_model=ExperimentModel,
    summary="Declare the winning alternative",
)
def set_winner(name: str, winner: WinnerModel, db: Session = Depends(get_db)):
    return ExperimentService(db).set_winner(name, winner.alternative)


@app.post(
    "/experiments/{name}/reset",
    response_model=ExperimentModel,
    summary="Start a new version of an experiment",
)
def reset_experiment(name: str, db: Session = Depends(get_db)):
    return ExperimentService(db).reset_experiment(name)


# --- User state ---


@app.get(
    "/users/{user_id}/keys",
    response_model=UserKeysResponseModel,
    summary="List a user's stored keys",
)
def get_user_keys(
    user_id: str = Path(..., description="The ID of the user."),
    db: Session = Depends(get_db),
):
    return UserStateService(db).get_keys(user_id)


@app.put(
    "/users/{user_id}/keys/{key}",
    response_model=UserKeysResponseModel,
    summary="Store a key for a user",
)
def put_user_key(
    body: UserKeyValueModel,
    user_id: str = Path(..., description="The ID of the user."),
    key: str = Path(..., description="Assignment key, e.g. 'link_color:2'."),
    db: Session = Depends(get_db),
):
    return UserStateService(db).set_key(user_id, key, body.value)


@app.post(
    "/users/{user_id}/cleanup",
    response_model=CleanupResponseModel,
    summary="Remove keys of removed, finished or unstarted experiments",
)
def cleanup_user(user_id: str, db: Session = Depends(get_db)):
    return UserStateService(db).cleanup_old_experiments(user_id)


@app.post(
    "/users/{user_id}/cleanup/{experiment}",
    response_model=CleanupResponseModel,
    summary="Remove keys of old versions of one experiment",
)
def cleanup_user_versions(user_id: str, experiment: str, db: Session = Depends(get_db)):
    return UserStateService(db).cleanup_old_versions(user_id, experiment)


@app.get(
    "/users/{user_id}/active-experiments",
    response_model=ActiveExperimentsResponseModel,
    summary="Experiments the user currently takes part in",
)
def get_active_experiments(user_id: str, db: Session = Depends(get_db)):
    return UserStateService(db).active_experiments(user_id)


if __name__ == "__main__":
    uvicorn.run("abmembership.main:app", host="0.0.0.0", port=8000, reload=True)
