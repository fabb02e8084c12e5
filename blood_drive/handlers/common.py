import logging

from aiohttp import WSMsgType, web

from blood_drive.handlers.keys import get_drive
from blood_drive.services.reports import export_donors_csv
from blood_drive.utils.time import utc_now

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.get("/health")
async def health(_request: web.Request) -> web.Response:
    return web.json_response({"ok": True, "time": utc_now().isoformat()})


@routes.get("/api/state")
async def state(request: web.Request) -> web.Response:
    return web.json_response(get_drive(request).get_state().model_dump(mode="json"))


@routes.get("/api/export.csv")
async def export_csv(request: web.Request) -> web.Response:
    csv_text = export_donors_csv(get_drive(request).donors())
    return web.Response(
        text=csv_text,
        content_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="donors.csv"'},
    )


@routes.post("/api/reset")
async def reset(request: web.Request) -> web.Response:
    await get_drive(request).reset()
    return web.json_response({"ok": True})


@routes.get("/ws")
async def websocket(request: web.Request) -> web.WebSocketResponse:
    """Live feed for displays: current state on connect, then every flush."""
    drive = get_drive(request)
    ws = web.WebSocketResponse(heartbeat=30)
    await ws.prepare(request)
    await drive.subscribe(ws)
    logger.info("Display connected (%d total)", len(drive.hub))
    try:
        async for msg in ws:
            if msg.type == WSMsgType.ERROR:
                logger.warning("Display connection error: %s", ws.exception())
    finally:
        drive.hub.unsubscribe(ws)
        logger.info("Display disconnected (%d left)", len(drive.hub))
    return ws
