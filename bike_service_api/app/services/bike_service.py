"""
Business logic for bikes.

``BikeService`` owns the bike lifecycle, composes bikes with their
components and keeps the single‑bike cache in step with storage.  The
cache is populated lazily by ``get_bike_by_id`` and invalidated after
every successful mutation; it is never the source of truth, so every
cache failure is logged and ignored.
"""

import logging
from typing import List, Optional, Union
from uuid import UUID, uuid4

from pydantic import ValidationError as PydanticValidationError

from ..core.cache import CachePort, bike_cache_key
from ..core.exceptions import BikeServiceError, CacheError
from ..repositories.base import BikeRepository, ComponentRepository
from ..schemas.bike import Bike, BikeUpdate
from .validation import parse_identifier, validate_record


logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 15 * 60


class BikeService:
    """Service for managing bikes.

    Parameters
    ----------
    bike_repo, component_repo
        Storage for bikes and their components.
    cache
        Advisory cache for single‑bike lookups.
    cache_ttl_seconds
        Lifetime of a cached bike; bounds how long a stale entry can be
        served if an invalidation fails.
    """

    def __init__(
        self,
        bike_repo: BikeRepository,
        component_repo: ComponentRepository,
        cache: CachePort,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self.bike_repo = bike_repo
        self.component_repo = component_repo
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

    async def create_bike(self, bike: Bike) -> Bike:
        """Validate and store a new bike.

        A ``bike_id`` is generated when the caller did not supply one.
        Nothing is written to the cache; the first read fills it.
        """
        bike = validate_record(bike)
        if bike.bike_id is None:
            bike.bike_id = uuid4()
        try:
            created = self.bike_repo.create_bike(bike)
        except BikeServiceError as exc:
            logger.error("Failed to create bike user_id=%s: %s", bike.user_id, exc)
            raise
        logger.info("Bike created bike_id=%s user_id=%s", created.bike_id, created.user_id)
        return created

    async def get_bike_by_id(self, bike_id: Union[str, UUID]) -> Bike:
        """Return a bike, serving it from the cache when possible."""
        bike_uuid = parse_identifier(bike_id, "bike")
        cache_key = bike_cache_key(bike_uuid)

        cached = self._read_cache(cache_key)
        if cached is not None:
            logger.debug("Bike found in cache bike_id=%s", bike_uuid)
            return cached

        try:
            bike = self.bike_repo.get_bike_by_id(bike_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to get bike bike_id=%s: %s", bike_uuid, exc)
            raise

        try:
            self.cache.set(cache_key, bike.model_dump_json().encode("utf-8"), self.cache_ttl_seconds)
        except CacheError as exc:
            logger.warning("Failed to cache bike bike_id=%s: %s", bike_uuid, exc)
        return bike

    async def get_bikes_by_user_id(self, user_id: Union[str, UUID]) -> List[Bike]:
        """Return every bike owned by ``user_id``.  Lists are never cached."""
        user_uuid = parse_identifier(user_id, "user")
        try:
            bikes = self.bike_repo.get_bikes_by_user_id(user_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to get bikes user_id=%s: %s", user_uuid, exc)
            raise
        logger.info("Retrieved bikes user_id=%s bikes_count=%s", user_uuid, len(bikes))
        return bikes

    async def update_bike(self, bike_id: Union[str, UUID], changes: BikeUpdate) -> Bike:
        """Merge ``changes`` into the stored bike and drop its cache entry.

        Fields left as ``None``, ``""`` or ``0`` keep their stored value.
        """
        bike_uuid = parse_identifier(bike_id, "bike")
        changes = validate_record(changes)
        try:
            updated = self.bike_repo.update_bike(bike_uuid, changes)
        except BikeServiceError as exc:
            logger.error("Failed to update bike bike_id=%s: %s", bike_uuid, exc)
            raise
        self._invalidate(bike_uuid)
        logger.info("Bike updated bike_id=%s", bike_uuid)
        return updated

    async def delete_bike(self, bike_id: Union[str, UUID]) -> None:
        """Delete a bike together with its components and drop its cache entry."""
        bike_uuid = parse_identifier(bike_id, "bike")
        try:
            self.bike_repo.delete_bike(bike_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to delete bike bike_id=%s: %s", bike_uuid, exc)
            raise
        self._invalidate(bike_uuid)
        logger.info("Bike deleted bike_id=%s", bike_uuid)

    async def get_bike_with_components(self, bike_id: Union[str, UUID]) -> Bike:
        """Return a bike with its ``components`` list filled in.

        A failure while loading components degrades to an empty list;
        only a failure to load the bike itself is raised.
        """
        bike_uuid = parse_identifier(bike_id, "bike")
        try:
            bike = self.bike_repo.get_bike_by_id(bike_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to get bike bike_id=%s: %s", bike_uuid, exc)
            raise

        try:
            components = self.component_repo.get_components_by_bike_id(bike_uuid)
        except BikeServiceError as exc:
            logger.warning("Failed to get components bike_id=%s: %s", bike_uuid, exc)
            components = []

        bike.components = components
        logger.info(
            "Retrieved bike with components bike_id=%s components_count=%s",
            bike_uuid,
            len(components),
        )
        return bike

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------
    def _read_cache(self, cache_key: str) -> Optional[Bike]:
        try:
            data = self.cache.get(cache_key)
        except CacheError as exc:
            logger.warning("Cache read failed key=%s: %s", cache_key, exc)
            return None
        if data is None:
            return None
        try:
            return Bike.model_validate_json(data)
        except PydanticValidationError as exc:
            logger.warning("Discarding undecodable cache entry key=%s: %s", cache_key, exc)
            return None

    def _invalidate(self, bike_id: UUID) -> None:
        try:
            self.cache.delete(bike_cache_key(bike_id))
        except CacheError as exc:
            logger.warning("Failed to invalidate bike cache bike_id=%s: %s", bike_id, exc)
