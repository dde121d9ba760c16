"""Entry point for the Guest Registry API server.

This script serves the FastAPI application with Uvicorn.  It is
intended to be executed from the project root, for example under
Docker or a process supervisor::

    python run.py

Configuration such as PORT, APP_ENV, DATABASE_URL and ADMIN_TOKEN is
read from environment variables (see ``guest_registry_api/app/core/config.py``).

On SIGINT/SIGTERM Uvicorn stops accepting connections and waits up to
``SHUTDOWN_GRACE_SECONDS`` for in-flight requests before the
application's shutdown hook closes the database.  Uncaught exceptions,
in the main thread or in the event loop, are logged and end the
process with exit code 1 so the supervisor can restart it.
"""
import asyncio
import logging
import sys
from typing import Any, Dict

from uvicorn import Config, Server

from guest_registry_api.app.core.config import settings
from guest_registry_api.app.main import app

logger = logging.getLogger("guest_registry_api.run")


def _log_uncaught(exc_type, exc_value, exc_tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_tb))


async def serve() -> int:
    """Run the server until it exits; return the process exit code."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )
    server = Server(config)
    faults = []

    def _on_loop_fault(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        logger.critical(
            "Unhandled exception in event loop: %s",
            context.get("message"),
            exc_info=context.get("exception"),
        )
        faults.append(context)
        server.should_exit = True

    asyncio.get_running_loop().set_exception_handler(_on_loop_fault)
    logger.info("Server running on http://localhost:%s (environment=%s)", settings.port, settings.environment)
    await server.serve()
    return 1 if faults else 0


def main() -> None:
    sys.excepthook = _log_uncaught
    try:
        exit_code = asyncio.run(serve())
    except (KeyboardInterrupt, SystemExit):
        exit_code = 0
    except Exception:
        logger.exception("Failed to start server")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
