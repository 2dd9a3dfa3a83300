import uuid

import pydantic
from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.api.dependencies.auth_deps import ensure_self, get_current_user, require_session
from devon_farm.api.dependencies.deps import get_db
from devon_farm.api.templating import redirect, render
from devon_farm.models import UserORM
from devon_farm.repositories.user_repo import UserRepository
from devon_farm.schemas.user import ProfileUpdate
from devon_farm.services.session_service import SessionContext
from devon_farm.services.user_service import UserService

router = APIRouter()


@router.get("/user/{user_id}/profile", response_class=HTMLResponse)
async def profile_form(
    user_id: uuid.UUID,
    session: SessionContext = Depends(require_session),
    current_user: UserORM = Depends(get_current_user),
) -> Response:
    ensure_self(current_user, user_id)
    return render(
        "profile.html",
        session=session,
        title="Your profile",
        user=current_user,
        name=current_user.name,
        email=current_user.email,
    )


@router.post("/user/{user_id}/profile")
async def update_profile(
    user_id: uuid.UUID,
    name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    session: SessionContext = Depends(require_session),
    current_user: UserORM = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    ensure_self(current_user, user_id)
    try:
        profile = ProfileUpdate.model_validate({"name": name, "email": email})
    except pydantic.ValidationError:
        return render(
            "profile.html",
            status_code=status.HTTP_400_BAD_REQUEST,
            session=session,
            title="Your profile",
            user=current_user,
            name=name or "",
            email=email or "",
            error="Enter a valid name and email",
        )

    user = await UserService(UserRepository(db)).update_profile(
        current_user.id, profile.name, str(profile.email)
    )
    if user.farm_id is not None:
        return redirect(f"/farm/{user.farm_id}", session=session)
    return redirect(f"/new/farm/{user.id}", session=session)
