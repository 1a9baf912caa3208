import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from quiz_backend.config import Settings, mask_database_url
from .base import Base

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    url = settings.require_database_url()
    kwargs = {"echo": settings.sql_echo}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory databases live per connection; share one across sessions
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    logger.info(f"Creating database engine for {mask_database_url(url)}")
    return create_engine(url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    # Register models on Base.metadata before creating tables
    from .models import attempt_model, question_model  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
