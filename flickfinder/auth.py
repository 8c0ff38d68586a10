"""Credential checks against the ``logins`` table."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .db_models import Login

logger = logging.getLogger(__name__)


class UserRepository:
    """Authenticate, register and look up users.

    Credentials are compared as opaque strings. Any data-access failure is
    logged and reported as ``False`` (or ``None`` for lookups) so callers only
    ever deal with plain values.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def authenticate(self, username: str, password: str) -> bool:
        if not username or not password:
            return False
        statement = (
            select(func.count())
            .select_from(Login)
            .where(Login.username == username, Login.password == password)
        )
        try:
            async with self._session_factory() as session:
                count = await session.scalar(statement)
        except SQLAlchemyError as exc:
            logger.warning("Authentication lookup failed: %s", exc)
            return False
        return bool(count)

    async def register(self, username: str, password: str) -> bool:
        """Insert a new user; ``False`` when blank or already taken."""

        if not username or not username.strip() or not password:
            return False
        try:
            async with self._session_factory() as session:
                existing = await session.scalar(
                    select(Login.id).where(Login.username == username)
                )
                if existing is not None:
                    return False
                session.add(Login(username=username, password=password))
                await session.commit()
        except IntegrityError:
            logger.info("Username %s was registered concurrently", username)
            return False
        except SQLAlchemyError as exc:
            logger.warning("Registration failed for %s: %s", username, exc)
            return False
        logger.info("Registered user %s", username)
        return True

    async def user_id(self, username: str) -> int | None:
        """Return the identifier for ``username`` or ``None`` when unknown."""

        if not username:
            return None
        try:
            async with self._session_factory() as session:
                return await session.scalar(
                    select(Login.id).where(Login.username == username)
                )
        except SQLAlchemyError as exc:
            logger.warning("User id lookup failed for %s: %s", username, exc)
            return None
