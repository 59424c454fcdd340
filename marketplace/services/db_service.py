# marketplace/services/db_service.py
"""Resilient data access.

``DatabaseService`` is the process-scoped handle on the connection pool. Every
attempt acquires its own session (and so its own pooled connection) and always
releases it, whichever way the attempt ends. Transient store failures are
retried by a ``RetryPolicy``; a transaction is always re-run from the start on
a fresh connection, never resumed.
"""
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.sql.base import Executable
from sqlmodel import Session

from marketplace.exceptions import StorageUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# connection refused / reset, dropped connections, pool exhaustion
TRANSIENT_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
    sa_exc.TimeoutError,
)


def is_transient(error: BaseException) -> bool:
    if isinstance(error, TRANSIENT_ERRORS):
        return True
    return isinstance(error, sa_exc.DBAPIError) and bool(error.connection_invalidated)


def exponential_backoff(unit: float = 1.0) -> Callable[[int], float]:
    """Delay before retrying after failed attempt ``n``: 1, 2, 4 ... units."""

    def delay(attempt: int) -> float:
        return unit * (2 ** (attempt - 1))

    return delay


def _check_attempts(max_attempts: int) -> int:
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    return max_attempts


class RetryPolicy:
    def __init__(
        self,
        max_attempts: int = 3,
        backoff: Optional[Callable[[int], float]] = None,
        sleep: Callable[[float], Any] = time.sleep,
        retry_on: Callable[[BaseException], bool] = is_transient,
    ):
        self.max_attempts = _check_attempts(max_attempts)
        self.backoff = backoff or exponential_backoff()
        self.sleep = sleep
        self.retry_on = retry_on

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.db_retry_attempts,
            backoff=exponential_backoff(settings.db_retry_backoff),
        )

    def run(
        self,
        operation: Callable[[], T],
        max_attempts: Optional[int] = None,
        label: str = "operation",
    ) -> T:
        attempts = self.max_attempts if max_attempts is None else _check_attempts(max_attempts)
        last_error = None

        for attempt in range(1, attempts + 1):
            try:
                return operation()
            except Exception as e:
                if not self.retry_on(e):
                    raise

                last_error = e
                logger.warning(f"Database {label} attempt {attempt}/{attempts} failed: {e}")

                if attempt < attempts:
                    delay = self.backoff(attempt)
                    logger.info(f"Retrying {label} in {delay}s...")
                    self.sleep(delay)

        logger.error(f"Database {label} permanently failed after {attempts} attempts: {last_error}")
        raise StorageUnavailable(last_error, attempts) from last_error


class DatabaseService:
    def __init__(
        self,
        engine: Engine,
        retry_policy: Optional[RetryPolicy] = None,
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        self.engine = engine
        self.retry_policy = retry_policy or RetryPolicy()
        self._session_factory = session_factory or (
            lambda: Session(engine, expire_on_commit=False)
        )

    @contextmanager
    def session(self):
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def execute(self, operation, max_attempts: Optional[int] = None):
        """Run a single statement, or a callable as one atomic unit of work."""
        if isinstance(operation, Executable):
            return self.query(operation, max_attempts=max_attempts)
        return self.transaction(operation, max_attempts=max_attempts)

    def query(self, statement, params: Optional[dict] = None, max_attempts: Optional[int] = None):
        def attempt():
            with self.session() as session:
                rows = session.exec(statement, params=params).all()
                session.commit()
                return rows

        return self.retry_policy.run(attempt, max_attempts, label="query")

    def transaction(self, callback: Callable[[Session], T], max_attempts: Optional[int] = None) -> T:
        def attempt():
            with self.session() as session:
                try:
                    result = callback(session)
                    session.commit()
                    return result
                except Exception:
                    session.rollback()
                    raise

        return self.retry_policy.run(attempt, max_attempts, label="transaction")

    def dispose(self):
        self.engine.dispose()
