import logging

from trustcore.core.config import settings


def configure_logging(level: str | int | None = None) -> logging.Logger:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=level or settings.LOG_LEVEL,
    )
    return logging.getLogger("trustcore")
