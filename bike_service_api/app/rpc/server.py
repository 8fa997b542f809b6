"""
Read‑only RPC application for other services.

Exposes a single procedure, ``webike.BikeService/GetBikes``, which
lists a user's bikes in a reduced shape.  The procedure never fails:
any failure, from a malformed request body to a storage error, yields
an empty list so callers can treat "no bikes" and "unknown" alike.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..container import ServiceContainer
from ..core.db import init_db
from ..core.exceptions import BikeServiceError


logger = logging.getLogger(__name__)

GET_BIKES_PATH = "/webike.BikeService/GetBikes"


class GetBikesRequest(BaseModel):
    user_id: str = ""


class BikeSummary(BaseModel):
    bike_id: UUID
    model: str
    mileage: int


class GetBikesResponse(BaseModel):
    bikes: List[BikeSummary] = []


def create_rpc_app(container: ServiceContainer) -> FastAPI:
    """Build the RPC application on top of an existing service container."""
    app = FastAPI(title=f"{container.settings.project_name} RPC", version=container.settings.api_version)
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # A malformed request is answered like any other failure: no bikes.
        logger.warning("RPC %s rejected malformed request: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=200, content=GetBikesResponse().model_dump())

    @app.post(GET_BIKES_PATH, response_model=GetBikesResponse)
    async def get_bikes(request: GetBikesRequest) -> GetBikesResponse:
        logger.info("RPC GetBikes called user_id=%s", request.user_id)
        try:
            bikes = await container.bike_service.get_bikes_by_user_id(request.user_id)
        except BikeServiceError as exc:
            logger.error("RPC GetBikes failed user_id=%s: %s", request.user_id, exc)
            return GetBikesResponse(bikes=[])

        summaries = [
            BikeSummary(bike_id=bike.bike_id, model=bike.model, mileage=bike.mileage)
            for bike in bikes
        ]
        logger.info("RPC GetBikes success user_id=%s bikes_count=%s", request.user_id, len(summaries))
        return GetBikesResponse(bikes=summaries)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    # Either surface may come up first; migrations are idempotent.
    @app.on_event("startup")
    async def startup_event() -> None:
        init_db(container.db_path)

    return app
