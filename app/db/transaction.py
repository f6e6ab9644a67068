"""Write transaction boundary shared by the session and vote services."""
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, TypeVar
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import CineMatchError, InternalError, WriteConflictError
from app.config.constants import (
    INTERNAL_ERROR_MESSAGE,
    SERIALIZATION_FAILURE_SQLSTATES,
    WRITE_CONFLICT_ATTEMPTS,
    WRITE_ISOLATION_LEVEL,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_serialization_failure(error: SQLAlchemyError) -> bool:
    if not isinstance(error, DBAPIError):
        return False
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in SERIALIZATION_FAILURE_SQLSTATES


@asynccontextmanager
async def write_transaction(session: AsyncSession, operation: str):
    """
    Run a multi-step write as one atomic unit.

    The connection is procured at SERIALIZABLE before any statement runs.
    The block is committed when it exits cleanly; on any error everything
    written inside it is rolled back. Domain errors propagate unchanged.
    Serialization failures become ``WriteConflictError`` so the caller can
    rerun the block, other storage errors are logged and surfaced as
    ``InternalError`` without driver detail.

    Usage:
        async with write_transaction(self.session, "register_vote"):
            ...
    """
    await session.connection(
        execution_options={"isolation_level": WRITE_ISOLATION_LEVEL}
    )
    try:
        yield session
        await session.commit()
    except CineMatchError:
        await _safe_rollback(session, operation)
        raise
    except SQLAlchemyError as e:
        await _safe_rollback(session, operation)
        if is_serialization_failure(e):
            logger.warning(f"Serialization conflict during {operation}")
            raise WriteConflictError(INTERNAL_ERROR_MESSAGE) from e
        logger.exception(f"Storage failure during {operation}")
        raise InternalError(INTERNAL_ERROR_MESSAGE) from e
    except Exception:
        await _safe_rollback(session, operation)
        logger.exception(f"Unexpected failure during {operation}")
        raise


async def retry_on_write_conflict(
    operation: str,
    attempt: Callable[[], Awaitable[T]],
    attempts: int = WRITE_CONFLICT_ATTEMPTS,
) -> T:
    """
    Await ``attempt`` until it gets past a serialization conflict.

    ``attempt`` must open its own ``write_transaction`` so every retry
    re-reads committed state and re-runs its guards. The last conflict
    propagates as ``WriteConflictError`` (reported as internal).
    """
    for number in range(1, attempts + 1):
        try:
            return await attempt()
        except WriteConflictError:
            if number == attempts:
                logger.error(f"{operation} still conflicting after {attempts} attempts")
                raise
            logger.info(f"Retrying {operation} after serialization conflict ({number}/{attempts})")


async def _safe_rollback(session: AsyncSession, operation: str):
    try:
        await session.rollback()
    except Exception as rollback_err:
        logger.error(f"Error during rollback in {operation}: {rollback_err}")
