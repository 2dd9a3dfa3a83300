import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError

from devon_farm.core.exceptions import PersistenceError, UserNotFoundError
from devon_farm.models import UserORM
from devon_farm.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def get_by_external_id(self, external_id: str) -> UserORM | None:
        return await self.user_repo.get_by_external_id(external_id)

    async def upsert_user(self, external_id: str, name: str, email: str) -> UserORM:
        """Create the user for this provider identity, or refresh its name and email."""
        try:
            user = await self.user_repo.upsert_by_external_id(external_id, name, email)
            await self.user_repo.session.commit()
        except SQLAlchemyError as exc:
            await self.user_repo.session.rollback()
            logger.error(f"[User] upsert_user failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="upsert_user") from exc
        return user

    async def ensure_user(self, external_id: str, name: str, email: str) -> UserORM:
        """Insert the user when missing; an existing row is returned untouched."""
        try:
            user = await self.user_repo.insert_if_absent(external_id, name, email)
            await self.user_repo.session.commit()
        except SQLAlchemyError as exc:
            await self.user_repo.session.rollback()
            logger.error(f"[User] ensure_user failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="ensure_user") from exc
        if user is None:
            logger.error(f"[User] ensure_user found no row for external_id={external_id}")
            raise PersistenceError(operation="ensure_user")
        return user

    async def update_profile(self, user_id: uuid.UUID, name: str, email: str) -> UserORM:
        user = await self.user_repo.get(user_id)
        if not user:
            raise UserNotFoundError()

        try:
            user = await self.user_repo.update(user, {"name": name, "email": email})
            await self.user_repo.session.commit()
        except SQLAlchemyError as exc:
            await self.user_repo.session.rollback()
            logger.error(f"[User] update_profile failed: {exc.__class__.__name__}")
            raise PersistenceError(operation="update_profile") from exc
        return user
