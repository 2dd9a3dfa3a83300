import logging
import uuid
from collections.abc import Sequence
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from devon_farm.core.exceptions import HorseNotFoundError, PersistenceError, ValidationError
from devon_farm.models import HorseGender, HorseORM
from devon_farm.models.horse import MAX_YOUTH_AGE
from devon_farm.repositories.horse_repo import HorseRepository
from devon_farm.schemas.farm import DashboardStats
from devon_farm.schemas.horse import HorseCreate, HorseUpdate

logger = logging.getLogger(__name__)


def _check_birth_date(date_of_birth: date | None) -> None:
    if date_of_birth and date_of_birth > date.today():
        raise ValidationError("Date of birth cannot be in the future")


class HorseService:
    """Horse records, always scoped to one farm."""

    def __init__(self, horse_repo: HorseRepository):
        self.horse_repo = horse_repo

    async def list_horses(self, farm_id: uuid.UUID) -> Sequence[HorseORM]:
        return await self.horse_repo.list_by_farm(farm_id)

    async def get_horse(self, farm_id: uuid.UUID, horse_id: uuid.UUID) -> HorseORM:
        horse = await self.horse_repo.get_for_farm(farm_id, horse_id)
        if not horse:
            raise HorseNotFoundError()
        return horse

    async def create_horse(self, farm_id: uuid.UUID, horse_in: HorseCreate) -> HorseORM:
        _check_birth_date(horse_in.date_of_birth)
        try:
            horse = await self.horse_repo.create({"farm_id": farm_id, **horse_in.model_dump()})
            await self.horse_repo.session.commit()
        except SQLAlchemyError as exc:
            await self.horse_repo.session.rollback()
            logger.error(f"[Horse] create_horse failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="create_horse") from exc
        logger.info(f"[Horse] Created horse_id={horse.id} farm_id={farm_id}")
        return horse

    async def update_horse(
        self, farm_id: uuid.UUID, horse_id: uuid.UUID, horse_in: HorseUpdate
    ) -> HorseORM:
        horse = await self.get_horse(farm_id, horse_id)
        changes = horse_in.model_dump(exclude_unset=True)
        # name and gender are NOT NULL; an explicit null leaves them as they are
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None or key == "date_of_birth"
        }
        if not changes:
            return horse
        _check_birth_date(changes.get("date_of_birth"))

        try:
            horse = await self.horse_repo.update(horse, changes)
            await self.horse_repo.session.commit()
        except SQLAlchemyError as exc:
            await self.horse_repo.session.rollback()
            logger.error(f"[Horse] update_horse failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="update_horse") from exc
        return horse

    async def delete_horse(self, farm_id: uuid.UUID, horse_id: uuid.UUID) -> None:
        horse = await self.get_horse(farm_id, horse_id)
        try:
            await self.horse_repo.delete(horse.id)
            await self.horse_repo.session.commit()
        except SQLAlchemyError as exc:
            await self.horse_repo.session.rollback()
            logger.error(f"[Horse] delete_horse failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="delete_horse") from exc

    async def dashboard_stats(self, farm_id: uuid.UUID) -> DashboardStats:
        counts = await self.horse_repo.count_by_gender(farm_id)
        horses = await self.horse_repo.list_by_farm(farm_id)
        youngstock = sum(
            1 for horse in horses if (age := horse.age()) is not None and age < MAX_YOUTH_AGE
        )
        return DashboardStats(
            total_horses=sum(counts.values()),
            stallions=counts.get(HorseGender.STALLION, 0),
            geldings=counts.get(HorseGender.GELDING, 0),
            mares=counts.get(HorseGender.MARE, 0),
            youngstock=youngstock,
        )
