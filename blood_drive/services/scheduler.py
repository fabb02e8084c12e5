import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from blood_drive.config import Settings

logger = logging.getLogger(__name__)


async def daily_backup(db_path: Path, backup_dir: Path) -> Optional[Path]:
    if not db_path.exists():
        logger.info("No snapshot to back up at %s", db_path)
        return None
    backup_dir.mkdir(parents=True, exist_ok=True)
    backup_path = backup_dir / f"{db_path.name}_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}"
    shutil.copy(db_path, backup_path)
    logger.info("Snapshot backed up to %s", backup_path)
    return backup_path


def schedule_jobs(settings: Settings) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.TIMEZONE)
    scheduler.add_job(
        daily_backup,
        "cron",
        hour=settings.BACKUP_HOUR,
        minute=0,
        args=[settings.DB_PATH, settings.backup_dir],
    )
    scheduler.start()
    return scheduler
