"""Unified entry point for the public HTTP API and the internal RPC surface.

This script launches both applications concurrently, each on its own
port, sharing one service container (and therefore one cache).  It is
intended to be executed from the project root, for example under
Docker, where you only specify a single Python file to run.

Configuration is read from environment variables; see
``bike_service_api/app/core/config.py`` for the supported names.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from bike_service_api.app.container import build_container
from bike_service_api.app.core.config import Settings
from bike_service_api.app.core.logging_config import setup_logging
from bike_service_api.app.main import create_app
from bike_service_api.app.rpc.server import create_rpc_app


async def serve(app, host: str, port: int, log_level: str) -> None:
    """Serve a single ASGI app with Uvicorn."""
    # Logging is configured by setup_logging; uvicorn must not install its own.
    config = Config(app=app, host=host, port=port, reload=False, log_level=log_level.lower(), log_config=None)
    server = Server(config)
    await server.serve()


async def main() -> None:
    """Run the HTTP API and the RPC surface concurrently."""
    settings = Settings()
    setup_logging(settings)
    container = build_container(settings)
    http_app = create_app(container=container)
    rpc_app = create_rpc_app(container)

    logging.info("Starting HTTP server on %s:%s", settings.http_host, settings.http_port)
    logging.info("Starting RPC server on %s:%s", settings.rpc_host, settings.rpc_port)
    tasks = [
        asyncio.create_task(serve(http_app, settings.http_host, settings.http_port, settings.log_level)),
        asyncio.create_task(serve(rpc_app, settings.rpc_host, settings.rpc_port, settings.log_level)),
    ]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in done:
            if exception := task.exception():
                logging.exception("Exception in service", exc_info=exception)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        container.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
