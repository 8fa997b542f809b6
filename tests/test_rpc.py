"""
Tests for the internal GetBikes procedure.
"""
import uuid

import pytest
from fastapi.testclient import TestClient

from bike_service_api.app.core.exceptions import StorageError
from bike_service_api.app.rpc.server import GET_BIKES_PATH, create_rpc_app
from bike_service_api.app.schemas.bike import Bike, BikeType


@pytest.fixture
def rpc_client(container):
    with TestClient(create_rpc_app(container)) as test_client:
        yield test_client


class TestGetBikes:
    def test_returns_bike_summaries(self, rpc_client: TestClient, bike_service):
        owner = uuid.uuid4()
        created = bike_service.bike_repo.create_bike(
            Bike(bike_id=uuid.uuid4(), user_id=owner, type=BikeType.BMX, model="Mongoose", mileage=120)
        )
        bike_service.bike_repo.create_bike(Bike(bike_id=uuid.uuid4(), user_id=uuid.uuid4(), type=BikeType.ROAD))

        response = rpc_client.post(GET_BIKES_PATH, json={"user_id": str(owner)})

        assert response.status_code == 200
        assert response.json() == {
            "bikes": [{"bike_id": str(created.bike_id), "model": "Mongoose", "mileage": 120}]
        }

    def test_unknown_user_gets_empty_list(self, rpc_client: TestClient):
        response = rpc_client.post(GET_BIKES_PATH, json={"user_id": str(uuid.uuid4())})

        assert response.status_code == 200
        assert response.json() == {"bikes": []}

    @pytest.mark.parametrize("user_id", ["", "not-a-uuid"])
    def test_invalid_user_id_gets_empty_list(self, rpc_client: TestClient, user_id):
        response = rpc_client.post(GET_BIKES_PATH, json={"user_id": user_id})

        assert response.status_code == 200
        assert response.json() == {"bikes": []}

    @pytest.mark.parametrize(
        "body",
        [{"user_id": 123}, {"user_id": None}, {"user_id": ["a"]}, ["not", "an", "object"], "plain"],
    )
    def test_malformed_body_gets_empty_list(self, rpc_client: TestClient, body):
        response = rpc_client.post(GET_BIKES_PATH, json=body)

        assert response.status_code == 200
        assert response.json() == {"bikes": []}

    def test_missing_body_gets_empty_list(self, rpc_client: TestClient):
        response = rpc_client.post(GET_BIKES_PATH)

        assert response.status_code == 200
        assert response.json() == {"bikes": []}

    def test_storage_failure_gets_empty_list(self, rpc_client: TestClient, bike_service):
        class BrokenBikes:
            def get_bikes_by_user_id(self, user_id):
                raise StorageError("database is locked")

        bike_service.bike_repo = BrokenBikes()

        response = rpc_client.post(GET_BIKES_PATH, json={"user_id": str(uuid.uuid4())})

        assert response.status_code == 200
        assert response.json() == {"bikes": []}

    def test_health(self, rpc_client: TestClient):
        assert rpc_client.get("/health").json() == {"status": "ok"}
