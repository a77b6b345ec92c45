from __future__ import annotations

from logging.config import dictConfig

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the root logger.

    Uvicorn keeps its own loggers; ours propagate to root.
    """
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["console"],
                "level": (level or settings.LOG_LEVEL).upper(),
            },
        }
    )
