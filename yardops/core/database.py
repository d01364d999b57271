"""Database configuration and session management."""

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


# Base class for models
class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def build_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine for the given URL."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}  # Needed for SQLite
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection keeps in-memory data visible to every session
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create the session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables known to the model metadata."""
    # Importing the package registers every model on Base.metadata
    import yardops.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for getting a database session from the application state."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
