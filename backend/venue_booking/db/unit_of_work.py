"""
Unit-of-work boundary for service operations.

Wraps one check-then-write sequence on an AsyncSession:
  - bounds the whole sequence with DB_OPERATION_TIMEOUT
  - rolls back on any failure so no partial write is ever committed
  - logs raw database errors with the operation's identifiers, then
    translates them into the domain taxonomy

Translation rules:
  IntegrityError                      -> Conflict (callers map known
                                         constraints to a sharper error first)
  serialization failure / deadlock    -> Conflict
  timeout, lost connection, other DB  -> StorageUnavailable
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.core.config import get_settings
from venue_booking.core.exceptions import BookingError, Conflict, StorageUnavailable
from venue_booking.core.logging import get_logger
from venue_booking.core.metrics import record_storage_error

logger = get_logger(__name__)

# PostgreSQL: serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}


def _sqlstate(exc: DBAPIError):
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


async def _rollback(db: AsyncSession, operation: str, context: dict) -> None:
    try:
        await db.rollback()
    except SQLAlchemyError as e:
        logger.error("rollback_failed", operation=operation, error=str(e), **context)


@asynccontextmanager
async def unit_of_work(db: AsyncSession, operation: str, **context) -> AsyncIterator[AsyncSession]:
    """
    Usage:
        async with unit_of_work(db, "create_reservation", venue_id=v, actor_id=u):
            ... reads, writes ...
            await db.commit()
    """
    timeout = get_settings().DB_OPERATION_TIMEOUT
    try:
        async with asyncio.timeout(timeout):
            yield db
    except BookingError:
        await _rollback(db, operation, context)
        raise
    except TimeoutError as e:
        await _rollback(db, operation, context)
        logger.error("storage_timeout", operation=operation, timeout_s=timeout, **context)
        record_storage_error(operation, "unavailable")
        raise StorageUnavailable("The database did not respond in time. Please retry.") from e
    except IntegrityError as e:
        await _rollback(db, operation, context)
        logger.warning("storage_integrity_error", operation=operation, error=str(e.orig), **context)
        record_storage_error(operation, "conflict")
        raise Conflict("The record was changed by another request. Please reload and retry.") from e
    except DBAPIError as e:
        await _rollback(db, operation, context)
        if _sqlstate(e) in RETRYABLE_SQLSTATES:
            logger.warning("storage_serialization_failure", operation=operation, error=str(e.orig), **context)
            record_storage_error(operation, "conflict")
            raise Conflict("Concurrent update detected. Please reload and retry.") from e
        logger.error("storage_error", operation=operation, error=str(e.orig), **context)
        record_storage_error(operation, "unavailable")
        raise StorageUnavailable("The database is temporarily unavailable. Please retry.") from e
    except SQLAlchemyError as e:
        await _rollback(db, operation, context)
        logger.error("storage_error", operation=operation, error=str(e), **context)
        record_storage_error(operation, "unavailable")
        raise StorageUnavailable("The database is temporarily unavailable. Please retry.") from e
