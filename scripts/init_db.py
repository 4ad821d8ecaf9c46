"""Check the database connection and create missing tables.

Usage:
    DATABASE_URL=postgresql+asyncpg://... python scripts/init_db.py
"""

import asyncio

from sqlalchemy import text

from focusflow_processing.config import settings
from focusflow_processing.database import create_engine, init_models


async def init_database() -> None:
    """Verify connectivity, then create content and preference tables."""
    engine = create_engine(settings.database_url)
    try:
        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT 1 + 1 AS result"))
            print(f"Database connection successful (1 + 1 = {result.scalar()})")

        await init_models(engine)
        print("Tables content_outputs and user_preferences are in place")
    except Exception as e:
        print(f"Database initialization failed: {e}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_database())
