from fastapi import APIRouter, Query, Request

from availability_calendar.config import settings
from availability_calendar.core.dependencies import DatabaseSession, OptionalUser
from availability_calendar.core.logging import AvailabilityLogger
from availability_calendar.core.middleware import limiter
from availability_calendar.schemas.availability import (
    CurrentUserMonthUnavailability,
    MonthOverview,
    MonthUnavailabilityEntry,
    ToggleResult,
    UnavailabilityToggle,
)
from availability_calendar.schemas.common import ErrorResponse
from availability_calendar.services.availability_service import AvailabilityService

router = APIRouter()

YearQuery = Query(..., description="Four-digit year")
MonthQuery = Query(..., description="Zero-based month index (0 = January)")


@router.get("/month", response_model=list[MonthUnavailabilityEntry])
async def get_unavailability_for_month(
    db: DatabaseSession,
    year: int = YearQuery,
    month: int = MonthQuery,
) -> list[MonthUnavailabilityEntry]:
    return await AvailabilityService.get_unavailability_for_month(
        db=db, year=year, month=month
    )


@router.get("/month/me", response_model=CurrentUserMonthUnavailability)
async def get_current_user_unavailability(
    db: DatabaseSession,
    current_user: OptionalUser,
    year: int = YearQuery,
    month: int = MonthQuery,
) -> CurrentUserMonthUnavailability:
    dates = await AvailabilityService.get_current_user_unavailability(
        db=db,
        user_id=current_user.id if current_user else None,
        year=year,
        month=month,
    )
    return CurrentUserMonthUnavailability(year=year, month=month, dates=dates)


@router.get("/month/overview", response_model=MonthOverview)
async def get_month_overview(
    db: DatabaseSession,
    year: int = YearQuery,
    month: int = MonthQuery,
) -> MonthOverview:
    bounds = AvailabilityService.month_bounds(year, month)
    if bounds is None:
        return MonthOverview(year=year, month=month, days={})

    entries = await AvailabilityService.get_unavailability_for_month(
        db=db, year=year, month=month
    )
    start_date, end_date = bounds

    return MonthOverview(
        year=year,
        month=month,
        start_date=start_date,
        end_date=end_date,
        days=AvailabilityService.group_by_date(entries),
    )


@router.post(
    "/toggle",
    response_model=ToggleResult,
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
        409: {"model": ErrorResponse, "description": "Concurrent toggle"},
        422: {"model": ErrorResponse, "description": "Malformed date"},
    },
)
@limiter.limit(settings.TOGGLE_RATE_LIMIT)
async def toggle_unavailability(
    request: Request,
    payload: UnavailabilityToggle,
    db: DatabaseSession,
    current_user: OptionalUser,
) -> ToggleResult:
    user_id = current_user.id if current_user else None
    marker_date = payload.date.strip()

    is_unavailable = await AvailabilityService.toggle_unavailability(
        db=db, user_id=user_id, marker_date=marker_date
    )

    AvailabilityLogger.log_toggle(
        request, user_id=user_id, date=marker_date, is_unavailable=is_unavailable
    )

    return ToggleResult(date=marker_date, is_unavailable=is_unavailable)
