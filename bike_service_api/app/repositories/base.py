"""
Storage contracts for bikes and components.

Implementations must raise ``NotFoundError`` when a point lookup finds
nothing or a mutation affects zero rows, ``ReferenceNotFoundError`` when
an insert references a missing owner or bike, ``ValidationError`` for
rows the schema rejects, and ``StorageError`` for anything else.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from ..schemas.bike import Bike, BikeUpdate
from ..schemas.component import Component, ComponentUpdate


class BikeRepository(ABC):

    @abstractmethod
    def create_bike(self, bike: Bike) -> Bike:
        """Insert ``bike`` and return it with server‑set timestamps."""

    @abstractmethod
    def get_bike_by_id(self, bike_id: UUID) -> Bike:
        ...

    @abstractmethod
    def get_bikes_by_user_id(self, user_id: UUID) -> List[Bike]:
        ...

    @abstractmethod
    def update_bike(self, bike_id: UUID, changes: BikeUpdate) -> Bike:
        """Merge ``changes`` into the stored row.

        Unset, empty and zero fields keep the stored value.
        """

    @abstractmethod
    def delete_bike(self, bike_id: UUID) -> None:
        """Delete the bike and every component attached to it."""


class ComponentRepository(ABC):

    @abstractmethod
    def create_component(self, component: Component) -> Component:
        ...

    @abstractmethod
    def get_component_by_id(self, component_id: UUID) -> Component:
        ...

    @abstractmethod
    def get_components_by_bike_id(self, bike_id: UUID) -> List[Component]:
        ...

    @abstractmethod
    def update_component(self, component_id: UUID, changes: ComponentUpdate) -> Component:
        """Merge ``changes`` into the stored row, like ``update_bike``."""

    @abstractmethod
    def delete_component(self, component_id: UUID) -> None:
        ...
