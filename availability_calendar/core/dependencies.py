from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Annotated

from availability_calendar.database import get_db
from .auth import verify_token
from .sentry_helpers import set_user_context
from ..models.user import User

bearer_scheme = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def _extract_token(
    credentials: HTTPAuthorizationCredentials | None, access_token: str | None
) -> str | None:
    if credentials and credentials.credentials:
        return credentials.credentials
    return access_token


async def _load_user(db: AsyncSession, token: str) -> User | None:
    payload = verify_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not isinstance(user_id, (str, int)):
        return None

    try:
        user_id_int = int(user_id)
    except (ValueError, TypeError):
        return None

    result = await db.execute(select(User).where(User.id == user_id_int))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None

    set_user_context(user.id, user.display_name)
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: DatabaseSession,
    access_token: str | None = Cookie(None),
) -> User:
    token = _extract_token(credentials, access_token)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    user = await _load_user(db, token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token"
        )

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_optional_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: DatabaseSession,
    access_token: str | None = Cookie(None),
) -> User | None:
    token = _extract_token(credentials, access_token)
    if not token:
        return None

    return await _load_user(db, token)


OptionalUser = Annotated[User | None, Depends(get_optional_current_user)]
