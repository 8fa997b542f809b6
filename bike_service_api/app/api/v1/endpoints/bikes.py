"""
Bike endpoints for API v1.

Every route requires a bearer token.  Routes addressing a single bike
load it first and then apply the ownership rule: administrators may act
on any bike, other callers only on their own.  Domain errors raised by
the services are turned into HTTP responses by the application‑level
exception handler registered in ``main``.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials

from bike_service_api.app.api.deps import get_bike_service, get_user_client
from bike_service_api.app.clients.user_client import UserServiceClient, UserServiceError
from bike_service_api.app.core.security import ensure_owner_or_admin, get_current_user, security
from bike_service_api.app.schemas.auth import TokenPayload
from bike_service_api.app.schemas.bike import (
    Bike,
    BikeCreate,
    BikeUpdate,
    BikeWithComponents,
    BikeWithUser,
)
from bike_service_api.app.schemas.common import Envelope
from bike_service_api.app.services.bike_service import BikeService


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=Envelope[Bike], status_code=status.HTTP_201_CREATED)
async def create_bike(
    body: BikeCreate,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
) -> Envelope[Bike]:
    """Create a bike owned by the caller.

    The owner is always the ``user_id`` from the token; a new
    ``bike_id`` is generated by the service.
    """
    bike = Bike(user_id=current_user.user_id, **body.model_dump())
    created = await bike_service.create_bike(bike)
    return Envelope(message="Bike created successfully", data=created)


@router.get("/my", response_model=Envelope[List[Bike]])
async def get_my_bikes(
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
) -> Envelope[List[Bike]]:
    """List the caller's bikes."""
    bikes = await bike_service.get_bikes_by_user_id(current_user.user_id)
    return Envelope(message="Bikes retrieved successfully", data=bikes)


@router.get("/{bike_id}", response_model=Envelope[Bike])
async def get_bike(
    bike_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
) -> Envelope[Bike]:
    bike = await bike_service.get_bike_by_id(bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "bike", bike_id)
    return Envelope(message="Bike found", data=bike)


@router.put("/{bike_id}", response_model=Envelope[Bike])
async def update_bike(
    bike_id: str,
    changes: BikeUpdate,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
) -> Envelope[Bike]:
    """Update a bike.

    Omitted fields, empty strings and zeros leave the stored values
    unchanged.
    """
    bike = await bike_service.get_bike_by_id(bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "bike", bike_id)
    updated = await bike_service.update_bike(bike.bike_id, changes)
    return Envelope(message="Bike updated successfully", data=updated)


@router.delete("/{bike_id}", response_model=Envelope)
async def delete_bike(
    bike_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
) -> Envelope:
    """Delete a bike and all of its components."""
    bike = await bike_service.get_bike_by_id(bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "bike", bike_id)
    await bike_service.delete_bike(bike.bike_id)
    return Envelope(message="Bike deleted successfully")


@router.get("/{bike_id}/with-components", response_model=Envelope[BikeWithComponents])
async def get_bike_with_components(
    bike_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    bike_service: BikeService = Depends(get_bike_service),
) -> Envelope[BikeWithComponents]:
    """Return a bike with its components and their wear values."""
    bike = await bike_service.get_bike_with_components(bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "bike", bike_id)
    return Envelope(message="Bike with components found", data=BikeWithComponents.from_bike(bike))


@router.get("/{bike_id}/with-user", response_model=Envelope[BikeWithUser])
async def get_bike_with_user(
    bike_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    bike_service: BikeService = Depends(get_bike_service),
    user_client: Optional[UserServiceClient] = Depends(get_user_client),
) -> Envelope[BikeWithUser]:
    """Return a bike together with its owner's profile.

    The owner is fetched from the user service with the caller's token.
    If that call fails, or no user service is configured, ``user`` is
    ``null`` and the request still succeeds.
    """
    bike = await bike_service.get_bike_by_id(bike_id)
    ensure_owner_or_admin(current_user, bike.user_id, "bike", bike_id)

    user = None
    if user_client is not None:
        token = credentials.credentials if credentials else None
        try:
            user = await run_in_threadpool(user_client.get_user, bike.user_id, token)
        except UserServiceError as exc:
            logger.warning(
                "Failed to get user from user service bike_id=%s user_id=%s: %s",
                bike_id,
                bike.user_id,
                exc,
            )
        if user is not None and not isinstance(user, dict):
            logger.warning("User service returned a non-object body user_id=%s", bike.user_id)
            user = None

    response = BikeWithUser(bike_id=bike.bike_id, model=bike.model, mileage=bike.mileage, user=user)
    return Envelope(message="Bike with user found", data=response)
