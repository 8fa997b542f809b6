"""Response envelope shared by all HTTP endpoints."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """``{"message": ..., "data": ...}`` wrapper around a payload."""

    message: str
    data: Optional[T] = None
