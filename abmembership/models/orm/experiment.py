from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime

from .base import Base

# JSONB on PostgreSQL, plain JSON everywhere else (e.g. SQLite in tests)
JSON_TYPE = JSON().with_variant(JSONB(), "postgresql")


# --- Experiment Model ---
class ExperimentORM(Base):
    __tablename__ = "experiments"

    # --- Core Identifiers ---
    name = Column(String, primary_key=True, index=True)

    # Bumped every time the experiment is reset; stored user keys with another
    # version are stale.
    version = Column(Integer, nullable=True)

    # --- Lifecycle ---
    # NULL until the experiment is started
    start_time = Column(DateTime, nullable=True)
    winner = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Variant names, e.g. ["blue", "red"]
    alternatives = Column(JSON_TYPE, default=list, nullable=False)

    @property
    def has_winner(self) -> bool:
        return self.winner is not None
