import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.models.horse import HorseGender, HorseORM
from devon_farm.repositories.postgres_repo import PostgresRepository


class HorseRepository(PostgresRepository[HorseORM]):
    def __init__(self, session: AsyncSession):
        super().__init__(HorseORM, session)

    async def list_by_farm(self, farm_id: uuid.UUID) -> Sequence[HorseORM]:
        query = (
            select(self.model)
            .where(self.model.farm_id == farm_id)
            .order_by(self.model.name, self.model.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_for_farm(self, farm_id: uuid.UUID, horse_id: uuid.UUID) -> HorseORM | None:
        query = select(self.model).where(
            self.model.id == horse_id, self.model.farm_id == farm_id
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def count_by_gender(self, farm_id: uuid.UUID) -> dict[HorseGender, int]:
        query = (
            select(self.model.gender, func.count(self.model.id))
            .where(self.model.farm_id == farm_id)
            .group_by(self.model.gender)
        )
        result = await self.session.execute(query)
        return {gender: count for gender, count in result.all()}
