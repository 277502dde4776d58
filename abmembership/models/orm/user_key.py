from sqlalchemy import Column, String, DateTime, PrimaryKeyConstraint
from datetime import datetime

from .base import Base
from .experiment import JSON_TYPE


class UserKeyORM(Base):
    """One stored assignment key for one user (backs the "sql" adapter)."""

    __tablename__ = "user_keys"

    user_id = Column(String, nullable=False, index=True)
    key = Column(String, nullable=False)
    value = Column(JSON_TYPE, nullable=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("user_id", "key", name="user_key_pk"),
    )
