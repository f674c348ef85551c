"""
Async PostgreSQL engine and the request-scoped session dependency.

Pool sizing comes from settings (DB_POOL_*). Connections are pre-pinged and
recycled so a restarted database does not leave stale sockets in the pool.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from autoparts.core.config import settings
from autoparts.core.exceptions import PostgresConnectionException, PostgresException
from autoparts.core.logging import get_logger

logger = get_logger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_recycle=settings.DB_POOL_RECYCLE,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session; commits after the handler returns.

    Any error rolls the session back. Driver errors are re-raised as
    AutoParts exceptions so they reach the client in the usual error envelope:

    Raises:
        PostgresConnectionException: the database could not be reached
        PostgresException: any other SQLAlchemy error, constraint violations
            flagged in ``details``
    """
    session = async_session_maker()
    try:
        yield session
        await session.commit()
    except OperationalError as e:
        await session.rollback()
        logger.error("PostgreSQL unreachable: %s", e, exc_info=True)
        raise PostgresConnectionException(original_error=e) from e
    except IntegrityError as e:
        await session.rollback()
        logger.warning("Constraint violation: %s", e.orig)
        raise PostgresException(
            message="Veri butunlugu hatasi olustu.",
            details={"constraint_violation": True},
            original_error=e,
        ) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Database error: %s", type(e).__name__, exc_info=True)
        raise PostgresException(original_error=e) from e
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def dispose_engine() -> None:
    """Close pooled connections; called on shutdown and by the import script."""
    await engine.dispose()
    logger.info("Database engine disposed")
