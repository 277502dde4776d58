"""Test configuration helpers."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# must be set before abmembership.core.db builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TOKENS"] = '["test-token"]'

from abmembership.core import db as db_module  # noqa: E402
from abmembership.models.orm.base import Base  # noqa: E402
from abmembership.models.schemas.experiment import ExperimentModel  # noqa: E402
from abmembership.persistence import redis_adapter  # noqa: E402
from abmembership.persistence.dual_adapter import DualAdapter  # noqa: E402
from abmembership.persistence.memory_adapter import MemoryAdapter  # noqa: E402


class StubCatalog:
    """In-memory experiment catalog keyed by name."""

    def __init__(self, *experiments: ExperimentModel) -> None:
        self.experiments = {experiment.name: experiment for experiment in experiments}
        self.lookups: list[str] = []

    def find(self, name: str) -> ExperimentModel | None:
        self.lookups.append(name)
        return self.experiments.get(name)


class FakeRedis:
    """The subset of the redis-py hash API the Redis adapter uses."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.expirations: dict[str, int] = {}

    def hget(self, name: str, key: str) -> str | None:
        return self.hashes.get(name, {}).get(key)

    def hset(self, name: str, key: str, value: str) -> int:
        created = key not in self.hashes.setdefault(name, {})
        self.hashes[name][key] = value
        return int(created)

    def hdel(self, name: str, *keys: str) -> int:
        bucket = self.hashes.get(name, {})
        return sum(1 for key in keys if bucket.pop(key, None) is not None)

    def hkeys(self, name: str) -> list[str]:
        return list(self.hashes.get(name, {}))

    def expire(self, name: str, seconds: int) -> bool:
        self.expirations[name] = seconds
        return name in self.hashes


class SessionContext:
    """Request-like object carrying a session mapping."""

    def __init__(self, session: dict | None = None, user_id=None, logged_in: bool = False) -> None:
        self.session = session if session is not None else {}
        self.user_id = user_id
        self.logged_in = logged_in


@pytest.fixture
def stub_catalog():
    return StubCatalog


@pytest.fixture
def session_context():
    return SessionContext


@pytest.fixture(autouse=True)
def _database():
    db_module.init_db()
    yield
    Base.metadata.drop_all(bind=db_module.engine)


@pytest.fixture
def db_session():
    db = db_module.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_adapters():
    redis_config = dict(redis_adapter.RedisAdapter.config)
    dual_config = dict(DualAdapter.config)
    MemoryAdapter.clear()
    yield
    MemoryAdapter.clear()
    redis_adapter.RedisAdapter.config = redis_config
    DualAdapter.config = dual_config
    redis_adapter.set_redis(None)


@pytest.fixture
def fake_redis():
    client = FakeRedis()
    redis_adapter.set_redis(client)
    return client
