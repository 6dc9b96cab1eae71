"""User Repository - find/create/update/delete against the users table.

Invariants:
    - Every operation touches one row or one filtered set; one commit per write
    - Unique violations become ConflictError; other SQLAlchemy failures become StorageError
    - Not-found short-circuits update/delete before any write is issued
    - Ids outside the INTEGER primary-key range are not-found without a query
    - List ordering is by id so page windows are stable
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from user_service.core.domain_types import UserFilters
from user_service.core.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from user_service.core.pagination import PageWindow, total_pages
from user_service.models.user import User

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "email", "password"})

# users.id is a 32-bit signed INTEGER
MAX_USER_ID = 2**31 - 1


@dataclass(frozen=True)
class UserPage:
    """One window of a filtered user listing."""
    items: list[User]
    total_items: int
    window: PageWindow

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_items, self.window.page_size)


def _escape_like(value: str) -> str:
    return (
        value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


def _filter_conditions(filters: UserFilters) -> list:
    conditions = []
    if filters.name:
        conditions.append(
            User.name.ilike(f"%{_escape_like(filters.name)}%", escape="\\"),
        )
    if filters.email:
        conditions.append(
            User.email.ilike(f"%{_escape_like(filters.email)}%", escape="\\"),
        )
    return conditions


class UserRepository:
    """Persistence for User rows, scoped to one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    @asynccontextmanager
    async def _reading(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                f"User {operation} failed: {e}", extra={"operation": operation},
            )
            raise StorageError("Failed to fetch users", operation) from e

    @asynccontextmanager
    async def _writing(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            yield
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            logger.warning(
                f"User {operation} rejected by unique constraint",
                extra={"operation": operation},
            )
            raise ConflictError(
                "A user with that email already exists", field="email",
            ) from e
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(
                f"User {operation} failed: {e}", extra={"operation": operation},
            )
            raise StorageError(f"Failed to {operation} user", operation) from e

    async def list(self, filters: UserFilters, window: PageWindow) -> UserPage:
        """Filtered, paginated listing plus total match count."""
        conditions = _filter_conditions(filters)
        count_query = select(func.count()).select_from(User).where(*conditions)
        query = (
            select(User)
            .where(*conditions)
            .order_by(User.id)
            .offset(window.offset)
            .limit(window.limit)
        )
        async with self._reading("list"):
            total = (await self._db.execute(count_query)).scalar_one()
            result = await self._db.execute(query)
            users = list(result.scalars().all())
        return UserPage(items=users, total_items=total, window=window)

    async def get_by_id(self, user_id: int) -> User:
        if not 1 <= user_id <= MAX_USER_ID:
            raise NotFoundError("User", user_id)
        async with self._reading("get"):
            user = await self._db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def get_by_email(self, email: str) -> User | None:
        async with self._reading("get"):
            result = await self._db.execute(
                select(User).where(User.email == email.strip().lower()),
            )
            return result.scalar_one_or_none()

    async def create(self, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email.strip().lower(), password=password_hash)
        async with self._writing("create"):
            self._db.add(user)
        await self._db.refresh(user)
        logger.info("User created", extra={"user_id": user.id})
        return user

    async def update(self, user_id: int, changes: dict) -> User:
        """Partial merge: only keys in `changes` are written."""
        user = await self.get_by_id(user_id)
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update fields: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        if not changes:
            return user

        async with self._writing("update"):
            for field_name, value in changes.items():
                setattr(user, field_name, value)
        await self._db.refresh(user)
        logger.info(
            f"User updated ({', '.join(sorted(changes))})",
            extra={"user_id": user.id},
        )
        return user

    async def delete(self, user_id: int) -> None:
        user = await self.get_by_id(user_id)
        async with self._writing("delete"):
            await self._db.delete(user)
        logger.info("User deleted", extra={"user_id": user_id})
