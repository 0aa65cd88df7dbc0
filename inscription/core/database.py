import asyncio
import logging
import time
from functools import wraps
from typing import Any, AsyncGenerator, Callable, Iterator, TypeVar

from asyncpg.exceptions import (
    ConnectionDoesNotExistError,
    ConnectionFailureError,
    PostgresError,
)
from sqlalchemy.exc import (
    DisconnectionError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import text

from .config import DATABASE_URL, DB_RETRY_ATTEMPTS, DB_RETRY_BACKOFF_FACTOR, DB_RETRY_DELAY
from .exceptions import DatabaseConnectionError, DatabaseTimeoutError

logger = logging.getLogger(__name__)

# Registration traffic is bursty (season start) but small
engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    pool_size=5,
    max_overflow=5,
    pool_timeout=15,
    pool_recycle=1800,
    pool_pre_ping=True,
)

async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()

F = TypeVar("F", bound=Callable[..., Any])

CONNECTION_EXCEPTIONS = (
    DisconnectionError,
    ConnectionFailureError,
    ConnectionDoesNotExistError,
)
RETRYABLE_EXCEPTIONS = CONNECTION_EXCEPTIONS + (OperationalError, TimeoutError)
QUERY_TIMEOUT_SECONDS = 15


def _retry_delays(attempts: int, delay: float, backoff_factor: float) -> Iterator[float]:
    """Sleep durations between ``attempts`` tries"""
    for _ in range(attempts - 1):
        yield delay
        delay *= backoff_factor


def _connection_failure(exc: Exception, operation: str, attempts: int) -> Exception:
    if isinstance(exc, CONNECTION_EXCEPTIONS):
        return DatabaseConnectionError(
            f"Database unreachable during {operation} after {attempts} attempts"
        )
    if isinstance(exc, TimeoutError):
        return DatabaseTimeoutError(operation, QUERY_TIMEOUT_SECONDS)
    return exc


def db_retry(
    max_attempts: int = None,
    delay: float = None,
    backoff_factor: float = None,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> Callable[[F], F]:
    """
    Retry an async database call when the connection drops.

    Defaults come from DB_RETRY_* settings. After the last attempt the error
    surfaces as DatabaseConnectionError or DatabaseTimeoutError when it was
    connection-level, otherwise unchanged.
    """
    attempts = max_attempts or DB_RETRY_ATTEMPTS
    first_delay = DB_RETRY_DELAY if delay is None else delay
    factor = backoff_factor or DB_RETRY_BACKOFF_FACTOR

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            delays = _retry_delays(attempts, first_delay, factor)
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    pause = next(delays, None)
                    if pause is None:
                        logger.error(
                            f"{func.__name__} gave up after {attempt} attempts: {e}",
                            extra={"operation": func.__name__, "attempts": attempt},
                        )
                        raise _connection_failure(e, func.__name__, attempt) from e

                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{attempts}), retrying in {pause:.1f}s",
                        extra={
                            "operation": func.__name__,
                            "attempt": attempt,
                            "exception_type": type(e).__name__,
                        },
                    )
                    await asyncio.sleep(pause)
                    attempt += 1

        return wrapper

    return decorator


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; anything left uncommitted is rolled back"""
    async with async_session() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Session rolled back: {type(e).__name__} - {e}")
            raise


class DatabaseManager:
    """Schema creation and connectivity checks for startup and /health"""

    @staticmethod
    async def _ping():
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    @staticmethod
    @db_retry()
    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")

    @classmethod
    @db_retry()
    async def check_connection(cls) -> bool:
        await cls._ping()
        logger.info("Database reachable")
        return True

    @classmethod
    async def is_connected(cls) -> bool:
        try:
            await cls._ping()
        except (SQLAlchemyError, PostgresError, OSError) as e:
            logger.warning(f"Database health probe failed: {e}")
            return False
        return True

    @staticmethod
    async def close_connections():
        await engine.dispose()
        logger.info("Database connection pool disposed")


db_manager = DatabaseManager()


class TransactionManager:
    """
    Unit of work over one session: commit when the block succeeds,
    roll back when it raises.

        async with TransactionManager(session, "registration"):
            ...
    """

    def __init__(self, session: AsyncSession, label: str = "transaction"):
        self.session = session
        self.label = label

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.session.commit()
            logger.debug(f"{self.label} committed")
            return False

        await self.session.rollback()
        logger.warning(
            f"{self.label} rolled back: {exc_type.__name__}",
            extra={"transaction": self.label, "exception_type": exc_type.__name__},
        )
        return False


def db_operation(func: F) -> F:
    """Time a CRUD call and log SQLAlchemy failures with the operation name"""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(
                f"{func.__name__} failed: {type(e).__name__} - {e}",
                extra={
                    "operation": func.__name__,
                    "exception_type": type(e).__name__,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            raise
        finally:
            logger.debug(
                f"{func.__name__} took {(time.perf_counter() - started) * 1000:.1f}ms"
            )

    return wrapper
