from fastapi import Depends, Request
from sqlmodel import SQLModel, create_engine

from marketplace.config import settings
from marketplace.services.db_service import DatabaseService, RetryPolicy


def build_engine(url: str = None, **overrides):
    url = url or settings.database_url

    options = dict(
        echo=False,
        pool_pre_ping=True,      # checks dead connections
        pool_recycle=settings.db_pool_recycle,
    )
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,   # bounded wait for a pool slot
        )
    options.update(overrides)

    return create_engine(url, **options)


def build_database(url: str = None) -> DatabaseService:
    return DatabaseService(build_engine(url), RetryPolicy.from_settings(settings))


def create_db_and_tables(engine):
    from marketplace import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_db(request: Request) -> DatabaseService:
    return request.app.state.db


def get_session(db: DatabaseService = Depends(get_db)):
    with db.session() as session:
        yield session
