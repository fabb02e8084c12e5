from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    DB_PATH: Path = Path.home() / "blood_drive.json"
    # Daily copies of the snapshot; defaults to DB_PATH.parent / "backups"
    BACKUP_DIR: Path | None = None
    # Front-end files (registration desk, screening, beds display)
    PUBLIC_DIR: Path = Path.cwd() / "public"
    LOG_DIR: Path = Path(__file__).resolve().parent / "logs"
    LOG_LEVEL: str = "INFO"

    # --- Donation room ---
    MAX_BEDS: int = Field(default=6, ge=1)
    MAX_QUEUE: int = Field(default=6, ge=1)  # chairs
    PRE_QUOTA: int = Field(default=4, ge=0)  # strict 4+2
    WALK_QUOTA: int = Field(default=2, ge=0)

    # Window in which mutations collapse into one write / one push
    FLUSH_DELAY_MS: int = Field(default=50, ge=0)
    BACKUP_HOUR: int = Field(default=3, ge=0, le=23)
    TIMEZONE: str = "UTC"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    @property
    def backup_dir(self) -> Path:
        return self.BACKUP_DIR or self.DB_PATH.parent / "backups"

    @property
    def flush_delay(self) -> float:
        return self.FLUSH_DELAY_MS / 1000


settings = Settings()
