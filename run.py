"""Entry point for the billing analytics backend.

Starts the FastAPI application with Uvicorn.  Configuration is read
from environment variables (see ``billing_backend.app.core.config``);
``DATABASE_URL`` must be set, otherwise the process logs the problem
and exits with status 1 before binding a port.

Usage:
    DATABASE_URL=bills.db python run.py
"""
import asyncio
import logging
import sys

from uvicorn import Config, Server

from billing_backend.app.core.config import Settings
from billing_backend.app.core.errors import ConfigurationError
from billing_backend.app.core.logging_config import setup_logging
from billing_backend.app.main import create_app

logger = logging.getLogger("billing_backend.run")


async def serve(app_settings: Settings) -> None:
    """Serve the application until interrupted."""
    app = create_app(app_settings)
    config = Config(app=app, host=app_settings.host, port=app_settings.port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


def main() -> int:
    app_settings = Settings()
    setup_logging(app_settings.log_level, app_settings.log_file or None)
    try:
        app_settings.require_database_url()
    except ConfigurationError as exc:
        logger.critical("%s", exc.message)
        return 1
    logger.info("Billing backend listening on http://%s:%s", app_settings.host, app_settings.port)
    asyncio.run(serve(app_settings))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
