from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: str


class UserPrivate(UserSummary):
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool
    created_at: datetime
