from aiohttp import web

from blood_drive.services.drive import BloodDrive

DRIVE = web.AppKey("drive", BloodDrive)


def get_drive(request: web.Request) -> BloodDrive:
    return request.app[DRIVE]
