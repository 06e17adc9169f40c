"""Remove every summary and share. Schema and migrations are left intact."""

import asyncio

from sqlalchemy import text

from meetnotes.infrastructure.database import async_session_factory, engine


async def purge() -> None:
    async with async_session_factory() as session:
        # Shares reference summaries, so they go first
        shares = await session.execute(text("DELETE FROM shares"))
        summaries = await session.execute(text("DELETE FROM summaries"))
        await session.commit()
    await engine.dispose()
    print(f"Database cleared: {summaries.rowcount} summaries, {shares.rowcount} shares removed.")


if __name__ == "__main__":
    asyncio.run(purge())
