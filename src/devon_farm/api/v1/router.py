from fastapi import APIRouter

from devon_farm.api.v1.public import auth
from devon_farm.api.v1.system import system
from devon_farm.api.v1.tenants import farm, horses, profile

api_router = APIRouter()

# Landing page and health
api_router.include_router(system.router, tags=["system"])

# Magic-link login, callback and logout
api_router.include_router(auth.router, tags=["auth"])

# Everything below sits behind the session gate
api_router.include_router(farm.router, tags=["farms"])
api_router.include_router(horses.router, tags=["horses"])
api_router.include_router(profile.router, tags=["profile"])
