import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from devon_farm.core.exceptions import FarmNotFoundError, PersistenceError, UserNotFoundError
from devon_farm.models import FarmORM
from devon_farm.repositories.farm_repo import FarmRepository
from devon_farm.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class FarmService:
    def __init__(self, farm_repo: FarmRepository, user_repo: UserRepository):
        self.farm_repo = farm_repo
        self.user_repo = user_repo

    async def get_farm(self, farm_id: uuid.UUID) -> FarmORM:
        farm = await self.farm_repo.get(farm_id)
        if not farm:
            raise FarmNotFoundError()
        return farm

    async def create_or_attach_farm(self, name: str, user_id: uuid.UUID) -> FarmORM:
        """
        Give the user a farm, creating it on first call.

        A user who already has a farm gets it back unchanged, so resubmitting
        the form is a no-op. Otherwise the farm insert and the users.farm_id
        update commit together. If a concurrent request created the farm
        first, the UNIQUE owner constraint trips and the winner's farm is
        returned instead.
        """
        session = self.farm_repo.session
        user = await self.user_repo.get(user_id)
        if not user:
            raise UserNotFoundError()

        if user.farm_id is not None:
            existing = await self.farm_repo.get(user.farm_id)
            if existing:
                logger.info(f"[Farm] User already attached. user_id={user_id} farm_id={existing.id}")
                return existing
            raise FarmNotFoundError()

        try:
            farm = FarmORM(name=name, owner_id=user.id)
            session.add(farm)
            await session.flush()
            user.farm_id = farm.id
            await session.commit()
        except IntegrityError:
            await session.rollback()
            winner = await self.farm_repo.get_by_owner(user_id)
            if not winner:
                logger.error(f"[Farm] create_or_attach_farm conflict without winner. user_id={user_id}")
                raise PersistenceError(operation="create_or_attach_farm") from None
            logger.info(f"[Farm] Lost creation race, reusing farm_id={winner.id}")
            return winner
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error(f"[Farm] create_or_attach_farm failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="create_or_attach_farm") from exc

        logger.info(f"[Farm] Created farm_id={farm.id} owner_id={user_id}")
        return farm
