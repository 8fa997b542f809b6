"""
Pydantic models for bike data.

``Bike`` is the stored record and the cached representation.
``BikeCreate`` and ``BikeUpdate`` are request bodies; the owner of a
new bike is always taken from the caller's token, never from the body.
``BikeWithComponents`` and ``BikeWithUser`` are composed read views.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .component import Component, ComponentWear


class BikeType(str, Enum):
    BMX = "bmx"
    MTB = "mtb"
    ROAD = "road"


class Bike(BaseModel):
    """A bicycle owned by a user."""

    bike_id: Optional[UUID] = None
    user_id: UUID
    bike_name: str = Field("", max_length=255, examples=["Daily rider"])
    type: BikeType = Field(..., examples=["mtb"])
    model: str = Field("", max_length=255, examples=["Stels Navigator"])
    year: int = Field(0, ge=0, examples=[2021])
    mileage: int = Field(0, ge=0, examples=[1500])
    components: Optional[List[Component]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def component_wear(self) -> List[ComponentWear]:
        """Return the attached components with their derived wear values."""
        return [
            ComponentWear.from_component(component, self.mileage)
            for component in self.components or []
        ]


class BikeCreate(BaseModel):
    """Schema for creating a bike."""

    bike_name: str = Field("", max_length=255, examples=["Daily rider"])
    type: BikeType = Field(..., examples=["mtb"])
    model: str = Field("", max_length=255, examples=["Mountain Bike Pro"])
    year: int = Field(0, ge=0, examples=[2021])
    mileage: int = Field(0, ge=0, examples=[1500])


class BikeUpdate(BaseModel):
    """Schema for updating a bike.

    All fields are optional.  ``None``, empty strings and zero all
    leave the stored value unchanged, so ``year`` and ``mileage``
    cannot be set back to 0 through an update.
    """

    bike_name: Optional[str] = Field(None, max_length=255)
    type: Optional[BikeType] = None
    model: Optional[str] = Field(None, max_length=255)
    year: Optional[int] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)

    @field_validator("type", mode="before")
    @classmethod
    def _blank_type_is_unset(cls, value):
        return None if value == "" else value


class BikeWithComponents(BaseModel):
    bike_id: UUID
    user_id: UUID
    bike_name: str
    type: BikeType
    model: str
    year: int
    mileage: int
    components: List[ComponentWear]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_bike(cls, bike: Bike) -> "BikeWithComponents":
        data = bike.model_dump(exclude={"components"})
        return cls(**data, components=bike.component_wear())


class BikeWithUser(BaseModel):
    """A bike together with its owner as reported by the user service.

    ``user`` is ``None`` when the user service is unavailable.
    """

    bike_id: UUID
    model: str
    mileage: int
    user: Optional[Dict[str, Any]] = None
