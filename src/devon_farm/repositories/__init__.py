from .farm_repo import FarmRepository
from .horse_repo import HorseRepository
from .postgres_repo import PostgresRepository
from .user_repo import UserRepository

__all__ = ["PostgresRepository", "UserRepository", "FarmRepository", "HorseRepository"]
