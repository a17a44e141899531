from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every scheduling route."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ErrorBody(BaseModel):
    kind: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorBody
    data: Optional[Any] = None
