from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from availability_calendar.config import settings
from availability_calendar.models.user import User


class IdentityService:
    @staticmethod
    def display_name_for(user: User | None) -> str:
        if user is None:
            return settings.UNKNOWN_DISPLAY_NAME
        return user.display_name or user.email or settings.UNKNOWN_DISPLAY_NAME

    @staticmethod
    async def resolve_display_name(db: AsyncSession, user_id: int) -> str:
        user = await db.get(User, user_id)
        return IdentityService.display_name_for(user)

    @staticmethod
    async def resolve_display_names(
        db: AsyncSession, user_ids: Iterable[int]
    ) -> dict[int, str]:
        """Resolve many owners in one query.

        Every requested id gets an entry; ids without a user row (deleted
        accounts) map to the configured placeholder name.
        """
        wanted = set(user_ids)
        if not wanted:
            return {}

        result = await db.execute(select(User).where(User.id.in_(wanted)))
        users = {user.id: user for user in result.scalars().all()}

        return {
            user_id: IdentityService.display_name_for(users.get(user_id))
            for user_id in wanted
        }
