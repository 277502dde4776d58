from typing import Any, Optional, Set

from sqlalchemy.orm import Session

from abmembership.core import db as db_module
from abmembership.repositories.user_key_repo import UserKeyRepository
from .base import PersistenceAdapter


class SqlAdapter(PersistenceAdapter):
    """Stores keys as rows of the ``user_keys`` table, one row per (user, key)."""

    def __init__(self, context: Any = None, identity: Any = None, db: Optional[Session] = None):
        if identity is None:
            identity = getattr(context, "user_id", None)
        if identity is None:
            raise ValueError("SqlAdapter requires a user identity")
        super().__init__(context, identity)
        self.user_id = str(identity)
        # sessions passed in belong to the caller; only ones opened here are closed
        self._owns_session = db is None
        self.db = db if db is not None else db_module.SessionLocal()
        self.repo = UserKeyRepository(self.db)

    @classmethod
    def find(cls, identity: Any) -> "SqlAdapter":
        return cls(None, identity)

    def get(self, key: str) -> Optional[Any]:
        db_key = self.repo.get_key(self.user_id, key)
        return db_key.value if db_key is not None else None

    def set(self, key: str, value: Any) -> Any:
        self.repo.upsert_key(self.user_id, key, value)
        return value

    def delete(self, key: str) -> None:
        self.repo.delete_key(self.user_id, key)

    def keys(self) -> Set[str]:
        return {db_key.key for db_key in self.repo.get_keys_for_user(self.user_id)}

    def close(self) -> None:
        if self._owns_session:
            self.db.close()
