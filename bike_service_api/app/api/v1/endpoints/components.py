"""
Component endpoints for API v1.

A component has no owner of its own; access is decided by the owner of
the bike it is attached to.  Each route therefore loads the component,
then its bike, and applies the ownership rule before delegating.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from bike_service_api.app.api.deps import get_bike_service, get_component_service
from bike_service_api.app.core.security import ensure_owner_or_admin, get_current_user
from bike_service_api.app.schemas.auth import TokenPayload
from bike_service_api.app.schemas.common import Envelope
from bike_service_api.app.schemas.component import Component, ComponentCreate, ComponentUpdate
from bike_service_api.app.services.bike_service import BikeService
from bike_service_api.app.services.component_service import ComponentService


router = APIRouter()


async def _load_owned_component(
    component_id: str,
    current_user: TokenPayload,
    bike_service: BikeService,
    component_service: ComponentService,
) -> Component:
    component = await component_service.get_component_by_id(component_id)
    bike = await bike_service.get_bike_by_id(component.bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "component", component_id)
    return component


@router.post("", response_model=Envelope[Component], status_code=status.HTTP_201_CREATED)
async def create_component(
    body: ComponentCreate,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
    component_service: ComponentService = Depends(get_component_service),
) -> Envelope[Component]:
    """Attach a component to one of the caller's bikes.

    ``installed_at`` defaults to the current time when omitted.
    """
    bike = await bike_service.get_bike_by_id(body.bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "bike", body.bike_id)

    component = Component(
        bike_id=bike.bike_id,
        name=body.name,
        brand=body.brand,
        model=body.model,
        installed_at=body.installed_at or datetime.now(timezone.utc),
        installed_mileage=body.installed_mileage,
        max_mileage=body.max_mileage,
    )
    created = await component_service.create_component(component)
    return Envelope(message="Component created successfully", data=created)


@router.get("/{component_id}", response_model=Envelope[Component])
async def get_component(
    component_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
    component_service: ComponentService = Depends(get_component_service),
) -> Envelope[Component]:
    component = await _load_owned_component(component_id, current_user, bike_service, component_service)
    return Envelope(message="Component found", data=component)


@router.put("/{component_id}", response_model=Envelope[Component])
async def update_component(
    component_id: str,
    changes: ComponentUpdate,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
    component_service: ComponentService = Depends(get_component_service),
) -> Envelope[Component]:
    """Update a component.  Omitted, empty and zero fields are kept."""
    component = await _load_owned_component(component_id, current_user, bike_service, component_service)
    updated = await component_service.update_component(component.id, changes)
    return Envelope(message="Component updated successfully", data=updated)


@router.delete("/{component_id}", response_model=Envelope)
async def delete_component(
    component_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
    component_service: ComponentService = Depends(get_component_service),
) -> Envelope:
    component = await _load_owned_component(component_id, current_user, bike_service, component_service)
    await component_service.delete_component(component.id)
    return Envelope(message="Component deleted successfully")
