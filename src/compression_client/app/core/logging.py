import sys
from pathlib import Path

from loguru import logger

from .config import Settings


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)

    log_file = Path(settings.absolute_log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_file),
        level=settings.LOG_LEVEL,
        rotation="10 MB",
        retention=5,
        enqueue=True,
    )
