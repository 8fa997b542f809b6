"""
Service tests for ComponentService.

Component mutations must invalidate the cache entry of the owning bike,
never a key derived from the component's own id.
"""
import uuid
from datetime import datetime, timezone

import pytest

from bike_service_api.app.container import build_container
from bike_service_api.app.core.cache import bike_cache_key
from bike_service_api.app.core.exceptions import (
    InvalidIdentifierError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from bike_service_api.app.schemas.bike import Bike, BikeType
from bike_service_api.app.schemas.component import Component, ComponentName, ComponentUpdate
from conftest import FailingCache


INSTALLED_AT = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def bike_factory(bike_service):
    async def _create(mileage: int = 500) -> Bike:
        return await bike_service.create_bike(
            Bike(user_id=uuid.uuid4(), type=BikeType.ROAD, model="Allez", mileage=mileage)
        )

    return _create


def new_component(bike_id, **overrides) -> Component:
    fields = {
        "bike_id": bike_id,
        "name": ComponentName.WHEELS,
        "brand": "Mavic",
        "model": "Aksium",
        "installed_at": INSTALLED_AT,
        "installed_mileage": 100,
        "max_mileage": 5000,
    }
    fields.update(overrides)
    return Component(**fields)


class TestCreateComponent:
    @pytest.mark.asyncio
    async def test_create_and_read_back(self, component_service, bike_factory):
        bike = await bike_factory()

        created = await component_service.create_component(new_component(bike.bike_id))
        fetched = await component_service.get_component_by_id(str(created.id))

        assert created.id is not None
        assert fetched.bike_id == bike.bike_id
        assert fetched.name == ComponentName.WHEELS
        assert fetched.installed_at == INSTALLED_AT
        assert fetched.max_mileage == 5000

    @pytest.mark.asyncio
    async def test_unknown_bike_is_a_reference_error(self, component_service):
        with pytest.raises(ReferenceNotFoundError):
            await component_service.create_component(new_component(uuid.uuid4()))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_mileage", [0, 1_000_001])
    async def test_max_mileage_out_of_range(self, component_service, bike_factory, max_mileage):
        bike = await bike_factory()
        component = Component.model_construct(**{
            **new_component(bike.bike_id).model_dump(),
            "max_mileage": max_mileage,
        })

        with pytest.raises(ValidationError):
            await component_service.create_component(component)

    @pytest.mark.asyncio
    async def test_create_invalidates_owning_bike(self, component_service, bike_service, bike_factory, cache):
        bike = await bike_factory()
        await bike_service.get_bike_by_id(bike.bike_id)
        assert bike_cache_key(bike.bike_id) in cache

        created = await component_service.create_component(new_component(bike.bike_id))

        assert bike_cache_key(bike.bike_id) not in cache
        assert bike_cache_key(created.id) not in cache.keys_for("delete")


class TestReadComponents:
    @pytest.mark.asyncio
    async def test_missing_component(self, component_service):
        with pytest.raises(NotFoundError):
            await component_service.get_component_by_id(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_malformed_component_id(self, component_service):
        with pytest.raises(InvalidIdentifierError):
            await component_service.get_component_by_id("123")

    @pytest.mark.asyncio
    async def test_list_by_bike(self, component_service, bike_factory):
        bike = await bike_factory()
        other = await bike_factory()
        await component_service.create_component(new_component(bike.bike_id, name=ComponentName.FRAME))
        await component_service.create_component(new_component(bike.bike_id, name=ComponentName.HANDLEBARS))
        await component_service.create_component(new_component(other.bike_id))

        components = await component_service.get_components_by_bike_id(bike.bike_id)

        assert sorted(c.name.value for c in components) == ["frame", "handlebars"]


class TestUpdateComponent:
    @pytest.mark.asyncio
    async def test_zero_and_empty_fields_are_kept(self, component_service, bike_factory):
        bike = await bike_factory()
        created = await component_service.create_component(new_component(bike.bike_id))

        updated = await component_service.update_component(
            created.id,
            ComponentUpdate(name="", brand="", installed_mileage=0, max_mileage=0, model="Crossride"),
        )

        assert updated.name == ComponentName.WHEELS
        assert updated.brand == "Mavic"
        assert updated.installed_mileage == 100
        assert updated.max_mileage == 5000
        assert updated.model == "Crossride"

    @pytest.mark.asyncio
    async def test_update_invalidates_owning_bike(self, component_service, bike_service, bike_factory, cache):
        bike = await bike_factory()
        created = await component_service.create_component(new_component(bike.bike_id))
        await bike_service.get_bike_by_id(bike.bike_id)

        await component_service.update_component(created.id, ComponentUpdate(max_mileage=6000))

        assert bike_cache_key(bike.bike_id) not in cache
        assert cache.keys_for("delete")[-1] == f"bike:{bike.bike_id}"

    @pytest.mark.asyncio
    async def test_update_missing_component(self, component_service):
        with pytest.raises(NotFoundError):
            await component_service.update_component(uuid.uuid4(), ComponentUpdate(brand="SRAM"))


class TestDeleteComponent:
    @pytest.mark.asyncio
    async def test_delete_invalidates_owning_bike(self, component_service, bike_service, bike_factory, cache):
        bike = await bike_factory()
        created = await component_service.create_component(new_component(bike.bike_id))
        await bike_service.get_bike_by_id(bike.bike_id)

        await component_service.delete_component(created.id)

        assert bike_cache_key(bike.bike_id) not in cache
        with pytest.raises(NotFoundError):
            await component_service.get_component_by_id(created.id)

    @pytest.mark.asyncio
    async def test_delete_missing_component_is_aborted(self, component_service, cache):
        with pytest.raises(NotFoundError):
            await component_service.delete_component(uuid.uuid4())

        assert cache.keys_for("delete") == []

    @pytest.mark.asyncio
    async def test_delete_succeeds_when_cache_is_down(self, settings, bike_factory, component_service):
        bike = await bike_factory()
        created = await component_service.create_component(new_component(bike.bike_id))
        failing = build_container(settings, cache=FailingCache()).component_service

        await failing.delete_component(created.id)

        assert await component_service.get_components_by_bike_id(bike.bike_id) == []
