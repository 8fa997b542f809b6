"""
Pydantic models for bike components.

``Component`` is the stored record.  ``ComponentCreate`` and
``ComponentUpdate`` are request bodies; ``ComponentWear`` adds the
derived mileage values, which are computed on demand from the owning
bike's mileage and never persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


MAX_COMPONENT_MILEAGE = 1_000_000


class ComponentName(str, Enum):
    HANDLEBARS = "handlebars"
    FRAME = "frame"
    WHEELS = "wheels"


class ComponentBase(BaseModel):
    """Stored fields of a component."""

    id: Optional[UUID] = None
    bike_id: UUID
    name: ComponentName = Field(..., examples=["handlebars"])
    brand: Optional[str] = Field(None, max_length=100, examples=["Shimano"])
    model: Optional[str] = Field(None, max_length=100, examples=["Deore XT"])
    installed_at: datetime
    installed_mileage: int = Field(0, ge=0, examples=[1000])
    max_mileage: int = Field(..., ge=1, le=MAX_COMPONENT_MILEAGE, examples=[5000])
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Component(ComponentBase):
    """A replaceable part attached to exactly one bike."""

    def current_mileage(self, bike_mileage: int) -> int:
        """Distance ridden on this component since it was installed."""
        return bike_mileage - self.installed_mileage

    def needs_replacement(self, bike_mileage: int) -> bool:
        return self.current_mileage(bike_mileage) >= self.max_mileage


class ComponentWear(ComponentBase):
    """Component with wear values derived from the bike's mileage."""

    current_mileage: int
    needs_replacement: bool

    @classmethod
    def from_component(cls, component: Component, bike_mileage: int) -> "ComponentWear":
        return cls(
            **component.model_dump(),
            current_mileage=component.current_mileage(bike_mileage),
            needs_replacement=component.needs_replacement(bike_mileage),
        )


class ComponentCreate(BaseModel):
    """Request body for attaching a component to a bike.

    ``installed_at`` defaults to the time of the request.
    """

    bike_id: str = Field(..., examples=["123e4567-e89b-12d3-a456-426614174000"])
    name: ComponentName = Field(..., examples=["handlebars"])
    brand: Optional[str] = Field(None, max_length=100, examples=["Shimano"])
    model: Optional[str] = Field(None, max_length=100, examples=["Deore XT"])
    installed_at: Optional[datetime] = None
    installed_mileage: int = Field(0, ge=0, examples=[1000])
    max_mileage: int = Field(..., ge=1, le=MAX_COMPONENT_MILEAGE, examples=[5000])


class ComponentUpdate(BaseModel):
    """Partial update of a component.

    ``None``, empty strings and zero all mean "keep the stored value".
    As a consequence ``installed_mileage`` cannot be reset to 0 here.
    """

    name: Optional[ComponentName] = None
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    installed_at: Optional[datetime] = None
    installed_mileage: Optional[int] = Field(None, ge=0)
    max_mileage: Optional[int] = Field(None, ge=0, le=MAX_COMPONENT_MILEAGE)

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name_is_unset(cls, value):
        return None if value == "" else value
