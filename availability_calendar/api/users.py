from fastapi import APIRouter

from availability_calendar.core.dependencies import CurrentUser
from availability_calendar.schemas.user import UserPrivate

router = APIRouter()


@router.get("/me", response_model=UserPrivate)
async def read_current_user(current_user: CurrentUser) -> UserPrivate:
    return UserPrivate.model_validate(current_user)
