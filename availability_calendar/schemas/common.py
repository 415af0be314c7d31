from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str | None = None


class InternalErrorResponse(BaseModel):
    error: str
    detail: str | None = None
