# repositories/user_key_repo.py
import logging
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from abmembership.models.orm.user_key import UserKeyORM

logger = logging.getLogger(__name__)


class UserKeyRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_key(self, user_id: str, key: str) -> Optional[UserKeyORM]:
        """Retrieves one stored key for a user."""
        return self.db.get(UserKeyORM, (user_id, key))

    def get_keys_for_user(self, user_id: str) -> list[UserKeyORM]:
        stmt = select(UserKeyORM).where(UserKeyORM.user_id == user_id)
        return list(self.db.scalars(stmt).all())

    def upsert_key(self, user_id: str, key: str, value: Any) -> UserKeyORM:
        """
        Creates the key or overwrites its value.
        Concurrent writers to the same user resolve as last-write-wins.
        """
        try:
            db_key = self.get_key(user_id, key)
            if db_key is None:
                db_key = UserKeyORM(user_id=user_id, key=key, value=value)
                self.db.add(db_key)
            else:
                db_key.value = value

            self.db.commit()
            self.db.refresh(db_key)

            return db_key

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Exception occurred storing key %s for user %s: %s", key, user_id, e)
            raise RuntimeError("Exception occurred while storing user key") from e

    def delete_key(self, user_id: str, key: str) -> None:
        try:
            self.db.execute(
                delete(UserKeyORM).where(UserKeyORM.user_id == user_id, UserKeyORM.key == key)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Exception occurred deleting key %s for user %s: %s", key, user_id, e)
            raise RuntimeError("Exception occurred while deleting user key") from e
