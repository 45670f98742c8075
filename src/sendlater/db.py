from typing import Generator

from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from sendlater.config import get_config

_engine: Engine | None = None
_maker: sessionmaker | None = None


def get_session() -> Generator[Session, None, None]:
    maker = get_maker()
    with maker() as session:
        yield session


def iter_session() -> Generator[Session, None, None]:
    """Session generator for use as a fastapi dependency"""
    yield from get_session()


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        config = get_config()
        if config.paths.db == "memory":
            # a single shared connection, otherwise each connection gets its own empty db
            _engine = create_engine(
                config.paths.sqlite,
                echo=config.db.echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            _engine = create_engine(
                config.paths.sqlite,
                echo=config.db.echo,
                pool_size=config.db.pool_size,
                max_overflow=config.db.overflow_size,
            )
    return _engine


def get_maker(engine: Engine | None = None) -> sessionmaker:
    global _maker
    if _maker is None:
        if engine is None:
            engine = get_engine()
        _maker = sessionmaker(
            class_=Session, autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )
    return _maker


def create_tables(engine: Engine | None = None, check_existing: bool = True) -> None:
    """Create all tables that don't exist yet"""
    if engine is None:
        engine = get_engine()

    from sendlater import models  # noqa: F401 - register tables on the metadata

    SQLModel.metadata.create_all(engine, checkfirst=check_existing)


def reset() -> None:
    """Drop the cached engine and sessionmaker, e.g. after the config changes"""
    global _engine, _maker
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _maker = None
