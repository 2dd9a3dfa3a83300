# api/v1/tenants/farm.py
"""
Farm onboarding and dashboard
=============================

GET  /new/farm/{user_id}   farm-creation form (redirects onboarded users)
POST /new/farm/{user_id}   create the farm, or attach to the existing one
GET  /farm/{farm_id}       dashboard with herd stats
"""

import logging
import uuid

import pydantic
from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.api.dependencies.auth_deps import (
    ensure_farm_member,
    ensure_self,
    get_current_user,
    require_session,
)
from devon_farm.api.dependencies.deps import get_db
from devon_farm.api.templating import redirect, render
from devon_farm.models import UserORM
from devon_farm.repositories.farm_repo import FarmRepository
from devon_farm.repositories.horse_repo import HorseRepository
from devon_farm.repositories.user_repo import UserRepository
from devon_farm.schemas.farm import FarmCreate
from devon_farm.schemas.horse import HorseResponse
from devon_farm.services.farm_service import FarmService
from devon_farm.services.horse_service import HorseService
from devon_farm.services.session_service import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter()


def _farm_service(db: AsyncSession = Depends(get_db)) -> FarmService:
    return FarmService(FarmRepository(db), UserRepository(db))


@router.get("/new/farm/{user_id}", response_class=HTMLResponse)
async def new_farm_form(
    user_id: uuid.UUID,
    session: SessionContext = Depends(require_session),
    current_user: UserORM = Depends(get_current_user),
) -> Response:
    ensure_self(current_user, user_id)
    if current_user.farm_id is not None:
        return redirect(f"/farm/{current_user.farm_id}", session=session)
    return render("new_farm.html", session=session, title="Name your farm", user=current_user)


@router.post("/new/farm/{user_id}")
async def create_farm(
    user_id: uuid.UUID,
    name: str | None = Form(default=None),
    session: SessionContext = Depends(require_session),
    current_user: UserORM = Depends(get_current_user),
    farm_service: FarmService = Depends(_farm_service),
) -> Response:
    ensure_self(current_user, user_id)
    try:
        farm_in = FarmCreate.model_validate({"name": name})
    except pydantic.ValidationError:
        return render(
            "new_farm.html",
            status_code=status.HTTP_400_BAD_REQUEST,
            session=session,
            title="Name your farm",
            user=current_user,
            error="Give your farm a name",
        )

    farm = await farm_service.create_or_attach_farm(farm_in.name, current_user.id)
    return redirect(f"/farm/{farm.id}", session=session)


@router.get("/farm/{farm_id}", response_class=HTMLResponse)
async def farm_dashboard(
    farm_id: uuid.UUID,
    session: SessionContext = Depends(require_session),
    current_user: UserORM = Depends(get_current_user),
    farm_service: FarmService = Depends(_farm_service),
    db: AsyncSession = Depends(get_db),
) -> Response:
    ensure_farm_member(current_user, farm_id)
    farm = await farm_service.get_farm(farm_id)

    horse_service = HorseService(HorseRepository(db))
    horses = await horse_service.list_horses(farm_id)
    stats = await horse_service.dashboard_stats(farm_id)

    return render(
        "dashboard.html",
        session=session,
        title=farm.name,
        farm=farm,
        user=current_user,
        stats=stats,
        horses=[HorseResponse.from_horse(horse) for horse in horses],
    )
