from __future__ import annotations

import asyncio

from sqlalchemy import create_engine, inspect, text

from flickfinder.auth import UserRepository
from flickfinder.database import Database


def _initialise_legacy_schema(database_path: str) -> None:
    """Create a pre-existing logins table, which lacks ``created_at``."""

    engine = create_engine(f"sqlite:///{database_path}")
    try:
        with engine.begin() as connection:
            connection.execute(
                text(
                    """
                    CREATE TABLE logins (
                        idlogins INTEGER PRIMARY KEY AUTOINCREMENT,
                        username VARCHAR(64) UNIQUE,
                        password VARCHAR(255)
                    )
                    """
                )
            )
            connection.execute(
                text("INSERT INTO logins (username, password) VALUES ('morpheus', 'redpill')")
            )
    finally:
        engine.dispose()


def test_create_all_adds_created_at_column(tmp_path) -> None:
    """Schema migrations should backfill the created_at column."""

    database_path = tmp_path / "legacy.db"
    _initialise_legacy_schema(str(database_path))

    async def _migrate_and_login() -> tuple[bool, int | None]:
        database = Database(f"sqlite+aiosqlite:///{database_path}")
        try:
            await database.create_all()
            users = UserRepository(database.session_factory)
            return (
                await users.authenticate("morpheus", "redpill"),
                await users.user_id("morpheus"),
            )
        finally:
            await database.dispose()

    authenticated, user_id = asyncio.run(_migrate_and_login())

    inspector_engine = create_engine(f"sqlite:///{database_path}")
    try:
        inspector = inspect(inspector_engine)
        columns = {column["name"] for column in inspector.get_columns("logins")}
    finally:
        inspector_engine.dispose()

    assert "created_at" in columns
    assert authenticated is True
    assert user_id == 1


def test_create_all_creates_logins_table(tmp_path) -> None:
    database_path = tmp_path / "fresh.db"

    async def _create() -> None:
        database = Database(f"sqlite+aiosqlite:///{database_path}")
        await database.create_all()
        await database.dispose()

    asyncio.run(_create())

    engine = create_engine(f"sqlite:///{database_path}")
    try:
        columns = {column["name"] for column in inspect(engine).get_columns("logins")}
    finally:
        engine.dispose()

    assert columns == {"idlogins", "username", "password", "created_at"}
