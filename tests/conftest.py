import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from marketplace import models  # noqa: F401
from marketplace.database import get_db
from marketplace.main import app
from marketplace.services.db_service import DatabaseService, RetryPolicy
from tests.factories import make_book, make_user


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def sleeps():
    """Backoff delays requested by the retry policy, instead of sleeping."""
    return []


@pytest.fixture()
def policy(sleeps):
    return RetryPolicy(max_attempts=3, sleep=sleeps.append)


@pytest.fixture()
def db(engine, policy):
    return DatabaseService(engine, policy)


@pytest.fixture()
def buyer(engine):
    return make_user(engine, "Bob", role="buyer")


@pytest.fixture()
def seller_a(engine):
    return make_user(engine, "Sam", role="seller")


@pytest.fixture()
def seller_b(engine):
    return make_user(engine, "Sue", role="seller")


@pytest.fixture()
def book_x(engine, seller_a):
    return make_book(engine, seller_a, title="X", price="10.00", stock=5)


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()
