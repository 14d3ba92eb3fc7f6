from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import AppAsyncSessionLocal
from app.models.base import Base
from app.utils.logger import setup_logger

logger = setup_logger("db_handlers")


ModelType = TypeVar("ModelType", bound=Base)

MAX_CONNECTION_ATTEMPTS = 3


def check_local_db(func):
    """Database session decorator with transaction management and retry logic.

    When the caller passes ``db=`` the call joins the caller's transaction.
    Otherwise a fresh session is opened, committed on success and rolled back
    on failure. Dropped asyncpg connections are retried with a short backoff.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        if kwargs.get("db"):
            return await func(*args, **kwargs)

        last_exception = None
        for attempt in range(MAX_CONNECTION_ATTEMPTS):
            async with AppAsyncSessionLocal() as db:
                kwargs["db"] = db
                try:
                    result = await func(*args, **kwargs)
                    await db.commit()
                    return result
                except DBAPIError as e:
                    await db.rollback()
                    if isinstance(e.orig, ConnectionDoesNotExistError):
                        last_exception = e
                        logger.warning(
                            f"Connection error in {func.__name__} (attempt {attempt + 1}/{MAX_CONNECTION_ATTEMPTS}): {e}. Retrying..."
                        )
                        await asyncio.sleep(1 + attempt)
                        continue
                    raise
                except Exception:
                    await db.rollback()
                    raise

        logger.error(
            f"All retries failed for {func.__name__}. Last error: {last_exception}"
        )
        raise last_exception

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """Generic handler for database operations with basic CRUD methods."""

    def __init__(self, model: type[ModelType]):
        self.model = model

    @check_local_db
    async def create(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> ModelType:
        """Create a new record in the database."""
        db_obj = self.model(**obj_dict)
        try:
            db.add(db_obj)
            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.warning(f"IntegrityError creating {self.model.__name__}: {e}")
            # Callers translate constraint violations into domain errors
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model.__name__}: {e}", exc_info=True)
            raise

    @check_local_db
    async def get(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Get a single record by its primary key."""
        stmt = select(self.model).where(self.model.id == id)
        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_by_attributes(
        self, *, db: AsyncSession = None, **kwargs
    ) -> ModelType | None:
        """Get a single record by a set of attributes."""
        options_to_load = kwargs.pop("options", None)

        stmt = select(self.model).filter_by(**kwargs)
        if options_to_load:
            stmt = stmt.options(*options_to_load)

        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_multi_by_attributes(
        self, *, db: AsyncSession = None, skip: int = 0, limit: int | None = 100, **kwargs
    ) -> list[ModelType]:
        """Get multiple records by a set of attributes with pagination.

        ``limit=None`` returns every matching row.
        """
        order_by_clauses = kwargs.pop("order_by", None)
        options_to_load = kwargs.pop("options", None)

        stmt = select(self.model).filter_by(**kwargs)

        if options_to_load:
            stmt = stmt.options(*options_to_load)

        if order_by_clauses is not None:
            if isinstance(order_by_clauses, list):
                stmt = stmt.order_by(*order_by_clauses)
            else:
                stmt = stmt.order_by(order_by_clauses)

        stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def count(self, *, db: AsyncSession = None, **kwargs) -> int:
        """Count records matching a set of attributes."""
        stmt = select(func.count()).select_from(self.model).filter_by(**kwargs)
        result = await db.execute(stmt)
        return result.scalar_one()
