"""aiohttp application serving the staff API, the live feed and the front-end.

`create_app` wires a :class:`BloodDrive` into the routes; `start_server`
launches it on a `TCPSite` and blocks until the loop is cancelled.
"""

import asyncio
import logging
from pathlib import Path

from aiohttp import web

from blood_drive.handlers import (
    DRIVE,
    actions_routes,
    common_routes,
    handle_errors,
    log_requests,
)
from blood_drive.services.drive import BloodDrive

logger = logging.getLogger(__name__)


async def _flush_on_shutdown(app: web.Application) -> None:
    await app[DRIVE].flush()


def create_app(drive: BloodDrive, public_dir: Path | None = None) -> web.Application:
    app = web.Application(middlewares=[log_requests, handle_errors])
    app[DRIVE] = drive
    app.router.add_routes(common_routes)
    app.router.add_routes(actions_routes)
    # Serve the displays (HTML, JS, CSS) when the folder is there
    if public_dir is not None and public_dir.is_dir():
        app.router.add_static("/", str(public_dir), show_index=False)
    app.on_shutdown.append(_flush_on_shutdown)
    return app


async def start_server(app: web.Application, host: str, port: int) -> None:
    """Run *app* until cancelled. This coroutine **never returns** on its own."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()

    logger.info("BloodDrive -> http://localhost:%d", port)

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
