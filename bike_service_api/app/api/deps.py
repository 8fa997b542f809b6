"""
FastAPI dependencies that hand endpoints their collaborators.

Everything is looked up on ``request.app.state.container``, which
``create_app`` populates.  Endpoints never import module‑level service
instances.
"""

from typing import Optional

from fastapi import Request

from ..clients.user_client import UserServiceClient
from ..container import ServiceContainer
from ..services.bike_service import BikeService
from ..services.component_service import ComponentService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_bike_service(request: Request) -> BikeService:
    return get_container(request).bike_service


def get_component_service(request: Request) -> ComponentService:
    return get_container(request).component_service


def get_user_client(request: Request) -> Optional[UserServiceClient]:
    return get_container(request).user_client
