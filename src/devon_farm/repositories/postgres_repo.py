from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.core.postgres import Base

T = TypeVar("T", bound=Base)


class PostgresRepository(Generic[T]):
    def __init__(self, model: type[T], session: AsyncSession):
        self.model = model
        self.session = session

    def dialect_insert(self) -> Any:
        """Dialect-specific INSERT construct, for ON CONFLICT upserts."""
        if self.session.get_bind().dialect.name == "sqlite":
            return sqlite.insert(self.model)
        return postgresql.insert(self.model)

    async def get(self, id: Any) -> T | None:
        query = select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, obj_in: Any) -> T:
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def update(self, db_obj: T, obj_in: dict[str, Any]) -> T:
        for key, value in obj_in.items():
            setattr(db_obj, key, value)
        await self.session.flush()
        await self.session.refresh(db_obj)
        return db_obj

    async def delete(self, id: Any) -> bool:
        query = delete(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        result = await self.session.execute(query)
        return result.rowcount > 0  # type: ignore[attr-defined]
