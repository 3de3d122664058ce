"""Check the database connection and print row counts per table."""

import asyncio

from sqlalchemy import func, select, text

from herald_service.database import AsyncSessionLocal, engine
from herald_service.models import Article, Business, Category, Profile, RSSSource


async def check_database() -> None:
    """Connect, report the server version and count the main tables."""
    try:
        async with engine.begin() as conn:
            if conn.dialect.name == "postgresql":
                result = await conn.execute(text("SELECT version()"))
                print(f"PostgreSQL version: {result.scalar()}")
            else:
                print(f"Connected ({conn.dialect.name})")

        async with AsyncSessionLocal() as session:
            for model in (Profile, Category, Article, Business, RSSSource):
                result = await session.execute(select(func.count()).select_from(model))
                print(f"{model.__tablename__:<15} {result.scalar():>6}")

    except Exception as e:
        print(f"Database check failed: {e}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(check_database())
