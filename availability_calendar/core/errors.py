"""
HTTP-aware domain errors raised by the service layer.

Routes let these propagate; FastAPI turns them into JSON responses with the
status code and detail set here.
"""
from fastapi import HTTPException, status

MSG_NOT_AUTHENTICATED = "Must be logged in to update availability"
MSG_INVALID_DATE = "Invalid date format. Use YYYY-MM-DD"
MSG_TOGGLE_CONFLICT = "Availability for this date was changed concurrently, please retry"


class NotAuthenticatedError(HTTPException):
    def __init__(self, detail: str = MSG_NOT_AUTHENTICATED):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidDateError(HTTPException):
    def __init__(self, value: str):
        self.value = value
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{MSG_INVALID_DATE} (got {value!r})",
        )


class ToggleConflictError(HTTPException):
    def __init__(self, date: str):
        self.date = date
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=MSG_TOGGLE_CONFLICT)
