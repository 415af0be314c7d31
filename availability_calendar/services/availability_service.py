import logging
import re
from collections.abc import Sequence
from datetime import date

from dateutil.relativedelta import relativedelta
from sqlalchemy import and_, false, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from availability_calendar.core.errors import (
    InvalidDateError,
    NotAuthenticatedError,
    ToggleConflictError,
)
from availability_calendar.models.unavailability import UnavailabilityMarker
from availability_calendar.schemas.availability import (
    MonthUnavailabilityEntry,
    UnavailabilityMarkerRead,
)
from availability_calendar.services.identity import IdentityService

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def month_date_range(year: int, month: int) -> tuple[str, str]:
    """First and last day of a month as ``YYYY-MM-DD`` strings.

    ``month`` is zero-based. Values outside 0-11 roll into neighbouring
    years, so ``(2024, 12)`` is January 2025 and ``(2024, -1)`` is
    December 2023.
    """
    first_day = date(year, 1, 1) + relativedelta(months=month)
    last_day = first_day + relativedelta(day=31)
    return first_day.isoformat(), last_day.isoformat()


def parse_calendar_date(value: str) -> str:
    value = value.strip()
    if not _DATE_RE.match(value):
        raise InvalidDateError(value)
    try:
        date.fromisoformat(value)
    except ValueError:
        raise InvalidDateError(value) from None
    return value


class AvailabilityService:
    @staticmethod
    def month_bounds(year: int, month: int) -> tuple[str, str] | None:
        """Like ``month_date_range`` but ``None`` for months outside years 1-9999.

        No stored ``YYYY-MM-DD`` date can fall in such a month, so callers
        treat it as an empty month instead of an error.
        """
        try:
            return month_date_range(year, month)
        except (ValueError, OverflowError):
            logger.debug(f"Month {month} of year {year} is outside the calendar range")
            return None

    @staticmethod
    def _month_filter(year: int, month: int):
        bounds = AvailabilityService.month_bounds(year, month)
        if bounds is None:
            return false()

        start_date, end_date = bounds
        return and_(
            UnavailabilityMarker.date >= start_date,
            UnavailabilityMarker.date <= end_date,
            UnavailabilityMarker.effectively_unavailable,
        )

    @staticmethod
    async def get_unavailability_for_month(
        db: AsyncSession,
        year: int,
        month: int,
    ) -> list[MonthUnavailabilityEntry]:
        query = (
            select(UnavailabilityMarker)
            .where(AvailabilityService._month_filter(year, month))
            .order_by(UnavailabilityMarker.date, UnavailabilityMarker.id)
        )

        result = await db.execute(query)
        markers = list(result.scalars().all())

        names = await IdentityService.resolve_display_names(
            db, (marker.user_id for marker in markers)
        )

        return [
            MonthUnavailabilityEntry(
                **UnavailabilityMarkerRead.model_validate(marker).model_dump(),
                display_name=names[marker.user_id],
            )
            for marker in markers
        ]

    @staticmethod
    async def get_current_user_unavailability(
        db: AsyncSession,
        user_id: int | None,
        year: int,
        month: int,
    ) -> list[str]:
        if user_id is None:
            return []

        query = (
            select(UnavailabilityMarker.date)
            .where(
                UnavailabilityMarker.user_id == user_id,
                AvailabilityService._month_filter(year, month),
            )
            .order_by(UnavailabilityMarker.date)
        )

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_marker(
        db: AsyncSession,
        user_id: int,
        marker_date: str,
    ) -> UnavailabilityMarker | None:
        result = await db.execute(
            select(UnavailabilityMarker).where(
                UnavailabilityMarker.user_id == user_id,
                UnavailabilityMarker.date == marker_date,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def toggle_unavailability(
        db: AsyncSession,
        user_id: int | None,
        marker_date: str,
    ) -> bool:
        """Flip the caller's unavailable flag for one day.

        Returns the state after the toggle: ``True`` if the caller is now
        unavailable, ``False`` if the marker was removed.
        """
        if user_id is None:
            raise NotAuthenticatedError()

        marker_date = parse_calendar_date(marker_date)
        existing = await AvailabilityService.get_marker(db, user_id, marker_date)

        if existing is not None:
            if existing.effectively_unavailable:
                await db.delete(existing)
                await db.commit()
                return False

            logger.warning(
                f"Marker {existing.id} for user {user_id} on {marker_date} "
                f"exists but is not unavailable (is_available={existing.is_available}); "
                "normalising to unavailable"
            )
            existing.mark_unavailable()
            await db.commit()
            return True

        db.add(
            UnavailabilityMarker(
                user_id=user_id, date=marker_date, is_unavailable=True
            )
        )
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info(
                f"Concurrent toggle detected for user {user_id} on {marker_date}"
            )
            raise ToggleConflictError(marker_date)

        return True

    @staticmethod
    def group_by_date(
        entries: Sequence[MonthUnavailabilityEntry],
    ) -> dict[str, list[str]]:
        days: dict[str, list[str]] = {}
        for entry in entries:
            days.setdefault(entry.date, []).append(entry.display_name)
        return days
