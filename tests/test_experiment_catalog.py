from __future__ import annotations

import pytest

from abmembership.models.schemas.experiment import ExperimentCreateModel
from abmembership.repositories.experiment_repo import ExperimentRepository
from abmembership.services.experiment_catalog import ExperimentCatalog
from abmembership.services.user_state import UserState


def _create(db, name="link_color", alternatives=("blue", "red"), start=True):
    return ExperimentRepository(db).create_experiment(
        ExperimentCreateModel(name=name, alternatives=list(alternatives), start=start)
    )


class TestExperimentRepository:
    def test_create_and_get(self, db_session):
        _create(db_session)

        experiment = ExperimentRepository(db_session).get_experiment("link_color")

        assert experiment.alternatives == ["blue", "red"]
        assert experiment.version is None
        assert experiment.start_time is not None
        assert not experiment.has_winner
        assert repr(experiment).startswith("ExperimentORM(name='link_color', version=None")

    def test_duplicate_name(self, db_session):
        _create(db_session)
        with pytest.raises(ValueError):
            _create(db_session)

    def test_duplicate_alternatives(self, db_session):
        with pytest.raises(ValueError):
            _create(db_session, alternatives=("blue", "blue"))

    def test_start_keeps_original_start_time(self, db_session):
        repo = ExperimentRepository(db_session)
        _create(db_session, start=False)
        assert repo.get_experiment("link_color").start_time is None

        started = repo.start_experiment("link_color").start_time
        assert started is not None
        assert repo.start_experiment("link_color").start_time == started

    def test_set_winner(self, db_session):
        repo = ExperimentRepository(db_session)
        _create(db_session)

        assert repo.set_winner("link_color", "red").winner == "red"
        with pytest.raises(ValueError):
            repo.set_winner("link_color", "green")

    def test_reset_bumps_version_and_clears_winner(self, db_session):
        repo = ExperimentRepository(db_session)
        _create(db_session)
        repo.set_winner("link_color", "red")

        experiment = repo.reset_experiment("link_color")
        assert experiment.version == 2
        assert experiment.winner is None
        assert repo.reset_experiment("link_color").version == 3

    def test_missing_experiment(self, db_session):
        repo = ExperimentRepository(db_session)
        assert repo.get_experiment("nope") is None
        assert repo.start_experiment("nope") is None
        assert repo.set_winner("nope", "blue") is None
        assert repo.reset_experiment("nope") is None


class TestExperimentCatalog:
    def test_find(self, db_session):
        _create(db_session)

        experiment = ExperimentCatalog(db_session).find("link_color")

        assert experiment.name == "link_color"
        assert experiment.version is None
        assert experiment.alternatives == ["blue", "red"]

    def test_find_without_session(self, db_session):
        _create(db_session)
        assert ExperimentCatalog().find("link_color").name == "link_color"

    def test_find_missing(self, db_session):
        assert ExperimentCatalog(db_session).find("link_color") is None

    def test_reconciles_user_state(self, db_session, session_context):
        _create(db_session, name="link_color")
        _create(db_session, name="button_size", start=False)
        _create(db_session, name="headline", alternatives=("short", "long"))
        ExperimentRepository(db_session).set_winner("headline", "short")
        ExperimentRepository(db_session).reset_experiment("link_color")

        context = session_context()
        state = UserState(context, catalog=ExperimentCatalog(db_session))
        state["link_color:1"] = "blue"
        state["link_color:2"] = "red"
        state["button_size"] = "big"
        state["headline"] = "long"
        state["headline:finished"] = True
        state["removed_experiment"] = "x"

        state.cleanup_old_versions(ExperimentCatalog(db_session).find("link_color"))
        state.cleanup_old_experiments()

        assert state.keys() == {"link_color:2", "headline:finished"}
