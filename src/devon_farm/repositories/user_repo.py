from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.models.user import UserORM
from devon_farm.repositories.postgres_repo import PostgresRepository


class UserRepository(PostgresRepository[UserORM]):
    def __init__(self, session: AsyncSession):
        super().__init__(UserORM, session)

    async def get_by_external_id(self, external_id: str) -> UserORM | None:
        query = select(self.model).where(self.model.external_id == external_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def upsert_by_external_id(self, external_id: str, name: str, email: str) -> UserORM:
        """
        Insert the user, or refresh name/email if the external id is known.

        One statement guarded by the UNIQUE constraint on external_id, so two
        concurrent submissions for the same identity still yield one row.
        farm_id is never touched on conflict.
        """
        now = datetime.now(UTC)
        stmt = self.dialect_insert().values(
            external_id=external_id,
            name=name,
            email=email,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["external_id"],
            set_={
                "name": stmt.excluded.name,
                "email": stmt.excluded.email,
                "updated_at": now,
            },
        ).returning(self.model)
        result = await self.session.scalars(
            stmt, execution_options={"populate_existing": True}
        )
        return result.one()

    async def insert_if_absent(self, external_id: str, name: str, email: str) -> UserORM | None:
        """Create the user only when no row exists; an existing row wins untouched."""
        now = datetime.now(UTC)
        stmt = (
            self.dialect_insert()
            .values(
                external_id=external_id,
                name=name,
                email=email,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["external_id"])
        )
        await self.session.execute(stmt)
        return await self.get_by_external_id(external_id)
