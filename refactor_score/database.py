from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base
from .settings import get_settings


def create_db_engine(database_url: str) -> Engine:
    """Engine for `database_url`; SQLite connections may be shared across worker threads."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, otherwise every session gets its own empty database
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        database_url,
        connect_args={
            "check_same_thread": False,
            "timeout": 30,  # Wait up to 30 seconds for lock to be released
        },
    )


def create_session_factory(database_url: str | None = None) -> sessionmaker:
    engine = create_db_engine(database_url or get_settings().database_url)
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine):
    Base.metadata.create_all(bind=engine)
