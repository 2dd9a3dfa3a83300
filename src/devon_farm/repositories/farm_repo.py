import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.models.farm import FarmORM
from devon_farm.repositories.postgres_repo import PostgresRepository


class FarmRepository(PostgresRepository[FarmORM]):
    def __init__(self, session: AsyncSession):
        super().__init__(FarmORM, session)

    async def get_by_owner(self, owner_id: uuid.UUID) -> FarmORM | None:
        query = select(self.model).where(self.model.owner_id == owner_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
