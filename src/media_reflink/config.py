"""Configuration via pydantic-settings (.env + env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReflinkConfig(BaseSettings):
    """All configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="REFLINK_",
        extra="ignore",
    )

    # -- Paths --
    map_file: Path = Path(".data/data.yaml")
    source_dir: Path = Path("/mnt/media/SOURCE")
    library_dir: Path = Path("/mnt/media/ANIME")
    log_dir: Path = Path(".data/logs")

    # -- Behavior --
    dry_run: bool = False
    verbose: bool = False
    log_level: str = "INFO"

    @property
    def log_file(self) -> Path:
        """Debug log file, rotated at 5 MB with the last 10 kept."""
        return self.log_dir / "media-reflink.log"

    def setup_logging(self) -> None:
        """Console shows stage + message; the log file keeps full debug detail.

        Matching is chatty at DEBUG (one line per lookup stage), so the
        console follows log_level while the file always records DEBUG.
        """
        logger.remove()

        def _with_stage(record):
            record["extra"].setdefault("stage", "-")
            return True

        logger.add(
            sys.stderr,
            format="<level>{level: <7}</level> [{extra[stage]}] {message}",
            level=self.log_level.upper(),
            filter=_with_stage,
            colorize=None,
        )

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_file),
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | "
                "{extra[stage]: <8} | {function}:{line} | {message}"
            ),
            level="DEBUG",
            rotation="5 MB",
            retention=10,
            encoding="utf-8",
            filter=_with_stage,
        )
