"""Staff actions: one POST route per donor transition or bulk fill."""

from typing import Any

from aiohttp import web

from blood_drive.handlers.keys import get_drive
from blood_drive.utils.exceptions import NotFound, ValidationError

routes = web.RouteTableDef()


async def _body(request: web.Request) -> dict[str, Any]:
    if not request.can_read_body:
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body must be JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


async def _donor_id(request: web.Request) -> str:
    donor_id = (await _body(request)).get("id")
    if not donor_id:
        raise NotFound("Not found")
    return str(donor_id)


def _flag(body: dict[str, Any], key: str, default: bool) -> bool:
    value = body.get(key, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


def _optional_int(body: dict[str, Any], key: str) -> int | None:
    value = body.get(key)
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")
    if number < 0:
        raise ValidationError(f"{key} must not be negative")
    return number


@routes.post("/api/register")
async def register(request: web.Request) -> web.Response:
    body = await _body(request)
    donor = await get_drive(request).register(
        full_name=str(body.get("full_name") or ""),
        phone=str(body.get("phone") or ""),
        pre_registered=_flag(body, "pre_registered", False),
        photo_consent=_flag(body, "photo_consent", True),
        has_photo=_flag(body, "has_photo", False),
    )
    return web.json_response(donor.model_dump(mode="json"))


@routes.post("/api/action/send-to-screening")
async def send_to_screening(request: web.Request) -> web.Response:
    donor = await get_drive(request).send_to_screening(await _donor_id(request))
    return web.json_response(donor.model_dump(mode="json"))


@routes.post("/api/action/approve")
async def approve(request: web.Request) -> web.Response:
    donor = await get_drive(request).approve(await _donor_id(request))
    return web.json_response(donor.model_dump(mode="json"))


@routes.post("/api/action/reject")
async def reject(request: web.Request) -> web.Response:
    body = await _body(request)
    if not body.get("id"):
        raise NotFound("Not found")
    donor = await get_drive(request).reject(
        str(body["id"]), reason=str(body.get("reason") or "")
    )
    return web.json_response(donor.model_dump(mode="json"))


@routes.post("/api/action/move-to-bed")
async def move_to_bed(request: web.Request) -> web.Response:
    await get_drive(request).move_to_bed(await _donor_id(request))
    return web.json_response({"ok": True, "moved": 1})


@routes.post("/api/action/fill-beds-fifo")
async def fill_beds_fifo(request: web.Request) -> web.Response:
    moved = await get_drive(request).fill_beds_fifo()
    return web.json_response({"moved": moved})


@routes.post("/api/action/fill-beds-4p2")
async def fill_beds_quota(request: web.Request) -> web.Response:
    body = await _body(request)
    moved = await get_drive(request).fill_beds_quota(
        _optional_int(body, "pre"), _optional_int(body, "walk")
    )
    return web.json_response({"moved": moved})


@routes.post("/api/action/to-recovery")
async def to_recovery(request: web.Request) -> web.Response:
    donor = await get_drive(request).to_recovery(await _donor_id(request))
    return web.json_response(donor.model_dump(mode="json"))


@routes.post("/api/action/recovered")
async def recovered(request: web.Request) -> web.Response:
    donor = await get_drive(request).recovered(await _donor_id(request))
    return web.json_response(donor.model_dump(mode="json"))


@routes.post("/api/action/complete")
async def complete(request: web.Request) -> web.Response:
    donor = await get_drive(request).complete(await _donor_id(request))
    return web.json_response(donor.model_dump(mode="json"))
