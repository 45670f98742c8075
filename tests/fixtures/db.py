from typing import Generator

import pytest
from _pytest.monkeypatch import MonkeyPatch
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session
from sqlmodel.pool import StaticPool

__all__ = ["engine", "maker", "session"]


@pytest.fixture
def engine(monkeypatch: MonkeyPatch) -> Generator[Engine, None, None]:
    """
    A fresh in-memory database for each test,
    patched in as the engine used by everything that calls :func:`sendlater.db.get_engine`
    """
    from sendlater import db

    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    db.create_tables(engine, check_existing=False)
    monkeypatch.setattr(db, "_engine", engine)
    monkeypatch.setattr(db, "_maker", None)
    yield engine
    engine.dispose()


@pytest.fixture
def maker(engine: Engine) -> sessionmaker:
    from sendlater.db import get_maker

    return get_maker()


@pytest.fixture
def session(maker: sessionmaker) -> Generator[Session, None, None]:
    with maker() as session:
        yield session
