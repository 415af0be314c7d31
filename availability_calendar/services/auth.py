from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from fastapi import HTTPException, status
from ..models.user import User
from ..models.auth import RefreshToken
from ..models.types import utcnow
from ..schemas.auth import UserRegister, TokenResponse
from ..core.auth import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    hash_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
)


class AuthService:
    db: AsyncSession

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, user_data: UserRegister) -> User:
        result = await self.db.execute(
            select(User).where(
                (User.email == user_data.email)
                | (User.display_name == user_data.display_name)
            )
        )
        existing_user = result.scalars().first()

        if existing_user:
            if existing_user.email == user_data.email:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Email already registered",
                )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Display name already taken",
            )

        db_user = User(
            display_name=user_data.display_name,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            is_active=True,
        )

        self.db.add(db_user)
        await self.db.commit()
        await self.db.refresh(db_user)

        return db_user

    async def authenticate_user(self, email: str, password: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    async def create_tokens(self, user: User) -> TokenResponse:
        access_token = create_access_token(data={"sub": str(user.id)})

        refresh_token = create_refresh_token()

        self.db.add(
            RefreshToken(
                token_hash=hash_token(refresh_token),
                user_id=user.id,
                expires_at=utcnow()
                + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
                is_revoked=False,
            )
        )
        await self.db.commit()

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    async def refresh_access_token(self, refresh_token: str) -> TokenResponse:
        result = await self.db.execute(
            select(RefreshToken).where(
                RefreshToken.token_hash == hash_token(refresh_token),
                RefreshToken.is_revoked == False,  # noqa: E712
                RefreshToken.expires_at > utcnow(),
            )
        )
        db_refresh_token = result.scalar_one_or_none()

        if not db_refresh_token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token"
            )

        user = await self.db.get(User, db_refresh_token.user_id)

        if not user or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found or inactive",
            )

        await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == db_refresh_token.id)
            .values(is_revoked=True)
        )

        try:
            return await self.create_tokens(user)
        except Exception:
            await self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Token refresh failed",
            )

    async def revoke_refresh_token(self, user_id: int, refresh_token: str) -> bool:
        result = await self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == hash_token(refresh_token),
                RefreshToken.user_id == user_id,
                RefreshToken.is_revoked == False,  # noqa: E712
            )
            .values(is_revoked=True)
        )
        await self.db.commit()
        return result.rowcount > 0
