from .farm import FarmORM
from .horse import HorseGender, HorseORM
from .user import UserORM

__all__ = [
    "UserORM",
    "FarmORM",
    "HorseORM",
    "HorseGender",
]
