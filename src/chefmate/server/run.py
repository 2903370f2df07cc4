"""Entry point serving the ChefMate API with uvicorn."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional

import uvicorn

from chefmate.config import get_settings
from chefmate.logging_utils import configure_from_settings

APP_IMPORT_PATH = "chefmate.server.app:app"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

logger = logging.getLogger(__name__)


def _env_float(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid {name} '{raw}': {exc}") from exc
    if value <= 0:
        raise SystemExit(f"{name} must be greater than 0 when provided.")
    return value


def _env_port() -> int:
    raw = os.environ.get("CHEFMATE_SERVER_PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid CHEFMATE_SERVER_PORT '{raw}': {exc}") from exc


async def _serve_for(server: uvicorn.Server, seconds: float) -> None:
    async def _stop_later() -> None:
        await asyncio.sleep(seconds)
        server.should_exit = True

    asyncio.create_task(_stop_later())
    await server.serve()


def main(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the API.

    ``CHEFMATE_SERVER_HOST`` and ``CHEFMATE_SERVER_PORT`` apply when no
    explicit bind is given. ``CHEFMATE_SERVER_DURATION`` stops the server
    after that many seconds and ``RELOAD=1`` enables auto-reload; the two
    cannot be combined.
    """

    settings = get_settings()
    configure_from_settings(settings)

    bind_host = host or os.environ.get("CHEFMATE_SERVER_HOST", DEFAULT_HOST)
    bind_port = port or _env_port()
    reload_enabled = os.environ.get("RELOAD") == "1"
    duration = _env_float("CHEFMATE_SERVER_DURATION")
    if reload_enabled and duration is not None:
        raise SystemExit("Use RELOAD=0 when setting CHEFMATE_SERVER_DURATION.")

    logger.info(
        "Starting ChefMate API on %s:%s with %s store",
        bind_host,
        bind_port,
        settings.store_backend,
    )
    # log_config=None keeps the redacting root handler in charge of uvicorn's loggers.
    if reload_enabled:
        uvicorn.run(APP_IMPORT_PATH, host=bind_host, port=bind_port, reload=True, log_config=None)
        return

    server = uvicorn.Server(
        uvicorn.Config(APP_IMPORT_PATH, host=bind_host, port=bind_port, log_config=None)
    )
    if duration is not None:
        asyncio.run(_serve_for(server, duration))
        return
    server.run()


if __name__ == "__main__":
    main()
