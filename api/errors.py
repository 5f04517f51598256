"""
Business outcomes for book operations and their HTTP classification.

Service calls return one of ``Ok``, ``InvalidInput``, ``AlreadyExists`` or
``NotFound``. ``classify`` turns the three error kinds into a status code and
an ``ErrorResponse`` body.
"""

from typing import Any, Generic, Tuple, TypeVar, Union

from fastapi import status
from pydantic import BaseModel, ConfigDict, Field

from api.models import ErrorResponse

T = TypeVar("T")

MSG_NOT_FOUND = "Not Found"


class Ok(BaseModel, Generic[T]):
    """Successful outcome carrying its value."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T = Field(..., description="Result of the operation")


class InvalidInput(BaseModel):
    """Input rejected by validation."""
    model_config = ConfigDict(frozen=True)

    message: str = Field(..., description="Why the input was rejected")


class AlreadyExists(BaseModel):
    """Input conflicts with an existing record."""
    model_config = ConfigDict(frozen=True)

    message: str = Field(..., description="Which record conflicts")


class NotFound(BaseModel):
    """A referenced record does not exist."""
    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., description="What was looked up")
    field: str = Field(..., description="How it was looked up")
    value: Any = Field(..., description="The value that matched nothing")

    @property
    def message(self) -> str:
        return f"{self.kind} not found {self.field} : {self.value}"


BookError = Union[InvalidInput, AlreadyExists, NotFound]


def classify(error: BookError) -> Tuple[int, ErrorResponse]:
    """
    Map an error kind to its HTTP status code and response body.

    Args:
        error: Error outcome returned by the service

    Returns:
        Tuple of (status_code, ErrorResponse)

    Raises:
        TypeError: If ``error`` is not one of the known kinds
    """
    if isinstance(error, InvalidInput):
        return status.HTTP_400_BAD_REQUEST, ErrorResponse(message=error.message)
    if isinstance(error, AlreadyExists):
        return status.HTTP_409_CONFLICT, ErrorResponse(message=error.message)
    if isinstance(error, NotFound):
        return status.HTTP_404_NOT_FOUND, ErrorResponse(message=MSG_NOT_FOUND, detail=error.message)
    raise TypeError(f"Unclassified error outcome: {error!r}")
