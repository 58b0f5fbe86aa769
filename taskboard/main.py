"""Main aiohttp application module."""
import logging
import os
import sys
from typing import Optional

from aiohttp import web

from taskboard.config import Config
from taskboard.routes import setup_routes, storage_key
from taskboard.storage import Storage, create_storage


logger = logging.getLogger(__name__)


async def close_storage(app: web.Application):
    """Close the storage backend when the application shuts down"""
    logger.info("Closing storage...")
    app[storage_key].close()
    logger.info("Storage closed")


def init_app(config: Optional[Config] = None,
             storage: Optional[Storage] = None) -> web.Application:
    """
    Build the application.

    Args:
        config: Service settings; read from the environment when omitted
        storage: Backend to serve; built from ``config`` when omitted

    Returns:
        The root application with the API mounted at ``config.api_prefix``
    """
    config = config or Config.from_env()
    logger.info("Initializing application...")
    app = web.Application()
    app[storage_key] = storage if storage is not None else create_storage(config)

    api = web.Application()
    setup_routes(api)
    app.add_subapp(config.api_prefix, api)
    logger.info(f"API mounted at {config.api_prefix}")

    app.on_cleanup.append(close_storage)
    logger.info("Application lifecycle hooks registered")

    return app


def run_app(config: Optional[Config] = None):
    """Run the aiohttp application"""
    config = config or Config.from_env()

    logger.info("=" * 50)
    logger.info("Starting taskboard service")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Process ID: {os.getpid()}")
    logger.info(f"Storage backend: {config.storage}")
    logger.info("=" * 50)

    app = init_app(config)

    logger.info(f"Starting web server on http://{config.host}:{config.port}")
    web.run_app(app, host=config.host, port=config.port,
                access_log_format='%a "%r" %s %b "%{Referer}i" "%{User-Agent}i" %Tfs',
                print=None)

    logger.info("Server shutdown complete")


if __name__ == "__main__":
    run_app()
