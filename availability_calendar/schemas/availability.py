from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UnavailabilityToggle(BaseModel):
    date: str = Field(
        ..., max_length=32, description="Calendar day in YYYY-MM-DD format"
    )


class ToggleResult(BaseModel):
    date: str
    is_unavailable: bool


class UnavailabilityMarkerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    date: str
    is_unavailable: bool | None = None
    is_available: bool | None = None
    created_at: datetime | None = None


class MonthUnavailabilityEntry(UnavailabilityMarkerRead):
    display_name: str


class CurrentUserMonthUnavailability(BaseModel):
    year: int
    month: int = Field(..., description="Zero-based month index (0 = January)")
    dates: list[str]


class MonthOverview(BaseModel):
    year: int
    month: int
    start_date: str | None = None
    end_date: str | None = None
    days: dict[str, list[str]]
