import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from content_engine.exceptions import ConflictError, InternalError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transactional(db: AsyncSession, operation: str | None = None):
    """
    Commit on success, roll back on any error.

    Unique-constraint violations become ConflictError, other store failures
    InternalError; everything else is re-raised unchanged.
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Integrity error, transaction rolled back: {e.orig}")
        raise ConflictError("Write conflicts with existing content", details={"reason": str(e.orig)}) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Store error, transaction rolled back: {e}")
        raise InternalError("The content store failed to complete the operation", operation=operation) from e
    except Exception:
        await db.rollback()
        raise
