"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from stockledger.infrastructure.persistence.orm import Base
from stockledger.infrastructure.persistence.sql_unit_of_work import SqlAlchemyUnitOfWork
from stockledger.infrastructure.settings import Settings, get_settings


def create_engine_for(url: str) -> Engine:
    """Build an engine, preparing SQLite targets so they work out of the box.

    An in-memory SQLite database lives only as long as its connection, so
    every session shares one through ``StaticPool``.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, echo=False, future=True)

    database = parsed.database
    if not database or database == ":memory:":
        return create_engine(
            url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    Path(database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=False, future=True)


def init_models(engine: Engine) -> None:
    Base.metadata.create_all(engine)


@lru_cache
def session_factory(url: str) -> sessionmaker[Session]:
    engine = create_engine_for(url)
    init_models(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def unit_of_work(settings: Settings | None = None) -> SqlAlchemyUnitOfWork:
    settings = settings or get_settings()
    return SqlAlchemyUnitOfWork(
        session_factory(settings.DATABASE_URL),
        max_attempts=settings.MAX_TRANSACTION_ATTEMPTS,
    )
