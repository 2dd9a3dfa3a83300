from .auth import LoginRequest
from .farm import DashboardStats, FarmCreate
from .horse import HorseCreate, HorseResponse, HorseUpdate
from .user import ProfileUpdate

__all__ = [
    "LoginRequest",
    "FarmCreate",
    "DashboardStats",
    "HorseCreate",
    "HorseUpdate",
    "HorseResponse",
    "ProfileUpdate",
]
