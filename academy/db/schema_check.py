"""
Create any missing tables for the academy schema.

Run once against a fresh database (or after adding models):
  DATABASE_URL=postgresql+asyncpg://... python -m academy.db.schema_check
"""
import asyncio
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

import academy.auth.models  # noqa: F401  (registers users)
import academy.core.models  # noqa: F401
from academy.db.session import Base, engine


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """
    Ensure that every mapped table exists in the connected database.
    Returns the names of the tables that had to be created.
    """
    async with db_engine.begin() as conn:
        existing = set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
        missing = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
        # create_all skips existing tables and their indexes
        await conn.run_sync(Base.metadata.create_all)
    return missing


async def main() -> None:
    missing = await ensure_tables(engine)
    if missing:
        print("Created missing tables: " + ", ".join(missing))
    else:
        print("All required tables already exist in the database.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
