"""
Explicit wiring of the service's collaborators.

``build_container`` turns a ``Settings`` instance into repositories,
cache, services, token service and user client.  Both transport
surfaces receive the same container, so the public API and the RPC
surface share one cache and one set of services.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .clients.user_client import UserServiceClient
from .core.cache import CachePort, build_cache
from .core.config import Settings
from .core.db import get_database_path
from .core.security import JWTTokenService
from .repositories.bike_repository import SqliteBikeRepository
from .repositories.component_repository import SqliteComponentRepository
from .services.bike_service import BikeService
from .services.component_service import ComponentService


logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    db_path: str
    cache: CachePort
    bike_service: BikeService
    component_service: ComponentService
    token_service: JWTTokenService
    user_client: Optional[UserServiceClient] = None

    def close(self) -> None:
        self.cache.close()
        if self.user_client is not None:
            self.user_client.close()


def build_container(
    settings: Settings,
    cache: Optional[CachePort] = None,
    user_client: Optional[UserServiceClient] = None,
) -> ServiceContainer:
    """Create every collaborator from ``settings``.

    ``cache`` and ``user_client`` may be supplied to replace the ones
    derived from settings, which is how tests inject doubles.  Without
    ``USER_SERVICE_URL`` no user client is created and owner enrichment
    is skipped.
    """
    db_path = get_database_path(settings.database_url)
    if cache is None:
        cache = build_cache(settings.redis_url)
    if user_client is None and settings.user_service_url:
        user_client = UserServiceClient(
            settings.user_service_url,
            timeout=settings.user_service_timeout,
            retries=settings.user_service_retries,
        )
    elif user_client is None:
        logger.info("USER_SERVICE_URL not set, owner enrichment disabled")

    bike_repo = SqliteBikeRepository(db_path)
    component_repo = SqliteComponentRepository(db_path)
    return ServiceContainer(
        settings=settings,
        db_path=db_path,
        cache=cache,
        bike_service=BikeService(
            bike_repo,
            component_repo,
            cache,
            cache_ttl_seconds=settings.bike_cache_ttl_seconds,
        ),
        component_service=ComponentService(component_repo, cache),
        token_service=JWTTokenService(settings.secret_key),
        user_client=user_client,
    )
