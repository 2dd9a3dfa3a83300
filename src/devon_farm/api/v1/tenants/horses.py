# api/v1/tenants/horses.py

import logging
import uuid

import pydantic
from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.api.dependencies.auth_deps import (
    ensure_farm_member,
    get_current_user,
    prefers_json,
    require_session,
)
from devon_farm.api.dependencies.deps import get_db
from devon_farm.api.templating import redirect
from devon_farm.models import UserORM
from devon_farm.repositories.horse_repo import HorseRepository
from devon_farm.schemas.horse import HorseCreate, HorseResponse, HorseUpdate
from devon_farm.services.horse_service import HorseService
from devon_farm.services.session_service import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/farm/{farm_id}")


def _horse_service(db: AsyncSession = Depends(get_db)) -> HorseService:
    return HorseService(HorseRepository(db))


def _farm_member(
    farm_id: uuid.UUID,
    current_user: UserORM = Depends(get_current_user),
) -> UserORM:
    ensure_farm_member(current_user, farm_id)
    return current_user


@router.get("/horses", response_model=list[HorseResponse])
async def list_horses(
    farm_id: uuid.UUID,
    _: UserORM = Depends(_farm_member),
    horse_service: HorseService = Depends(_horse_service),
) -> list[HorseResponse]:
    horses = await horse_service.list_horses(farm_id)
    return [HorseResponse.from_horse(horse) for horse in horses]


@router.get("/horse/{horse_id}", response_model=HorseResponse)
async def get_horse(
    farm_id: uuid.UUID,
    horse_id: uuid.UUID,
    _: UserORM = Depends(_farm_member),
    horse_service: HorseService = Depends(_horse_service),
) -> HorseResponse:
    horse = await horse_service.get_horse(farm_id, horse_id)
    return HorseResponse.from_horse(horse)


@router.post("/horse", status_code=status.HTTP_201_CREATED)
async def create_horse(
    request: Request,
    farm_id: uuid.UUID,
    name: str | None = Form(default=None),
    gender: str | None = Form(default=None),
    description: str = Form(default=""),
    date_of_birth: str | None = Form(default=None),
    session: SessionContext = Depends(require_session),
    _: UserORM = Depends(_farm_member),
    horse_service: HorseService = Depends(_horse_service),
) -> Response:
    """
    Add a horse from the dashboard form.

    Browsers are sent back to the dashboard; JSON callers get the new record.
    """
    try:
        horse_in = HorseCreate.model_validate(
            {
                "name": name,
                "gender": (gender or "").lower() or None,
                "description": description,
                "date_of_birth": date_of_birth or None,
            }
        )
    except pydantic.ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[err["msg"] for err in exc.errors()],
        ) from exc

    horse = await horse_service.create_horse(farm_id, horse_in)

    if prefers_json(request):
        response = JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=HorseResponse.from_horse(horse).model_dump(mode="json"),
        )
        return session.refresh_cookie(response)
    return redirect(f"/farm/{farm_id}", session=session)


@router.put("/horse/{horse_id}", response_model=HorseResponse)
async def update_horse(
    farm_id: uuid.UUID,
    horse_id: uuid.UUID,
    horse_in: HorseUpdate,
    _: UserORM = Depends(_farm_member),
    horse_service: HorseService = Depends(_horse_service),
) -> HorseResponse:
    horse = await horse_service.update_horse(farm_id, horse_id, horse_in)
    return HorseResponse.from_horse(horse)


@router.delete("/horse/{horse_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_horse(
    farm_id: uuid.UUID,
    horse_id: uuid.UUID,
    current_user: UserORM = Depends(_farm_member),
    horse_service: HorseService = Depends(_horse_service),
) -> None:
    await horse_service.delete_horse(farm_id, horse_id)
    logger.info(f"[Horse] Deleted horse_id={horse_id} by user_id={current_user.id}")
