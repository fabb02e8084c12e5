import logging

from aiohttp import web

from blood_drive.utils.exceptions import BloodDriveError

logger = logging.getLogger(__name__)


@web.middleware
async def log_requests(request: web.Request, handler):
    logger.info("%s %s", request.method, request.path)
    return await handler(request)


@web.middleware
async def handle_errors(request: web.Request, handler):
    """Turn classified failures into ``{"error": ...}`` answers."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except BloodDriveError as e:
        if e.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e.message)
        return web.json_response({"error": e.message}, status=e.status)
    except Exception:
        logger.exception("Cause an exception on %s %s", request.method, request.path)
        return web.json_response({"error": "Internal error"}, status=500)
