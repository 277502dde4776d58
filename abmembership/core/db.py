from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .settings import config_settings

DATABASE_URL = config_settings.DATABASE_URL

engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    # Only needed for SQLite to handle concurrent requests
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # an in-memory database only lives as long as its single connection
        engine_kwargs["poolclass"] = StaticPool

# The engine manages the connection pool and dialect.
engine = create_engine(DATABASE_URL, **engine_kwargs)

# Each request or adapter gets its own session (a unit of work).
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Creates every table known to the ORM base."""
    from abmembership.models.orm.base import Base
    # imported for their side effect of registering tables on Base.metadata
    from abmembership.models.orm import experiment, user_key  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    """
    Dependency that yields a database session for a single request,
    and ensures the session is closed afterward.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
