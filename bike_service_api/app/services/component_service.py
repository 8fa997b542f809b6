"""
Business logic for bike components.

Components are never cached on their own; they are only read as part
of their bike.  Every mutation therefore invalidates the cache entry of
the owning bike, keyed by ``bike_id``, and never a component key.
"""

import logging
from typing import List, Union
from uuid import UUID, uuid4

from ..core.cache import CachePort, bike_cache_key
from ..core.exceptions import BikeServiceError, CacheError, NotFoundError
from ..repositories.base import ComponentRepository
from ..schemas.component import Component, ComponentUpdate
from .validation import parse_identifier, validate_record


logger = logging.getLogger(__name__)


class ComponentService:
    """Service for managing components attached to bikes."""

    def __init__(self, component_repo: ComponentRepository, cache: CachePort) -> None:
        self.component_repo = component_repo
        self.cache = cache

    async def create_component(self, component: Component) -> Component:
        """Validate and store a component, then invalidate its bike's cache entry."""
        component = validate_record(component)
        if component.id is None:
            component.id = uuid4()
        try:
            created = self.component_repo.create_component(component)
        except BikeServiceError as exc:
            logger.error("Failed to create component bike_id=%s: %s", component.bike_id, exc)
            raise
        self._invalidate_bike(created.bike_id)
        logger.info(
            "Component created component_id=%s bike_id=%s name=%s",
            created.id,
            created.bike_id,
            created.name.value,
        )
        return created

    async def get_component_by_id(self, component_id: Union[str, UUID]) -> Component:
        component_uuid = parse_identifier(component_id, "component")
        try:
            component = self.component_repo.get_component_by_id(component_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to get component component_id=%s: %s", component_uuid, exc)
            raise
        logger.debug("Retrieved component component_id=%s bike_id=%s", component_uuid, component.bike_id)
        return component

    async def get_components_by_bike_id(self, bike_id: Union[str, UUID]) -> List[Component]:
        bike_uuid = parse_identifier(bike_id, "bike")
        try:
            components = self.component_repo.get_components_by_bike_id(bike_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to get components bike_id=%s: %s", bike_uuid, exc)
            raise
        logger.info("Retrieved components bike_id=%s components_count=%s", bike_uuid, len(components))
        return components

    async def update_component(self, component_id: Union[str, UUID], changes: ComponentUpdate) -> Component:
        """Merge ``changes`` into the stored component.

        Fields left as ``None``, ``""`` or ``0`` keep their stored value.
        The cache entry of the owning bike is invalidated on success.
        """
        component_uuid = parse_identifier(component_id, "component")
        changes = validate_record(changes)
        try:
            updated = self.component_repo.update_component(component_uuid, changes)
        except BikeServiceError as exc:
            logger.error("Failed to update component component_id=%s: %s", component_uuid, exc)
            raise
        self._invalidate_bike(updated.bike_id)
        logger.info("Component updated component_id=%s", component_uuid)
        return updated

    async def delete_component(self, component_id: Union[str, UUID]) -> None:
        """Delete a component.

        The component is loaded first to learn which bike's cache entry
        to invalidate.  If it cannot be loaded the delete is aborted with
        ``NotFoundError`` rather than attempted blind.
        """
        component_uuid = parse_identifier(component_id, "component")
        try:
            component = self.component_repo.get_component_by_id(component_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to get component component_id=%s: %s", component_uuid, exc)
            raise NotFoundError("component not found") from exc

        try:
            self.component_repo.delete_component(component_uuid)
        except BikeServiceError as exc:
            logger.error("Failed to delete component component_id=%s: %s", component_uuid, exc)
            raise
        self._invalidate_bike(component.bike_id)
        logger.info("Component deleted component_id=%s", component_uuid)

    def _invalidate_bike(self, bike_id: UUID) -> None:
        try:
            self.cache.delete(bike_cache_key(bike_id))
        except CacheError as exc:
            logger.warning("Failed to invalidate bike cache bike_id=%s: %s", bike_id, exc)
