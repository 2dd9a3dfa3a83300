from sqlalchemy import text

from devon_farm.core.postgres import AsyncSessionLocal


async def check_postgres() -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(text("SELECT 1"))
