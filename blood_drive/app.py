import asyncio
import logging
import sys

from blood_drive.config import settings
from blood_drive.services.broadcasts import BroadcastHub
from blood_drive.services.drive import BloodDrive
from blood_drive.services.persistence import SnapshotFile, load_snapshot
from blood_drive.services.scheduler import schedule_jobs
from blood_drive.webapp.server import create_app, start_server


def setup_logging() -> None:
    # Console and ./logs/blood_drive.log
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = settings.LOG_DIR / "blood_drive.log"

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )
    # log_requests already prints one line per request
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.INFO)


async def main():
    setup_logging()
    logging.info("Blood drive starting…")

    snapshot_file = SnapshotFile(settings.DB_PATH)
    drive = BloodDrive(settings, snapshot_file, BroadcastHub(), load_snapshot(snapshot_file))
    # Make sure a snapshot exists from the first second
    await snapshot_file.write_snapshot(drive.store.snapshot())

    scheduler = schedule_jobs(settings)
    app = create_app(drive, settings.PUBLIC_DIR)
    try:
        await start_server(app, settings.HOST, settings.PORT)
    finally:
        scheduler.shutdown(wait=False)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
