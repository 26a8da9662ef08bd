"""Logging setup for processes embedding the Shelfwise core."""

import logging
from pathlib import Path
from typing import List, Optional

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging from settings.

    Args:
        settings: Settings to read LOG_LEVEL / LOG_FILE from (default: cached settings)
    """
    settings = settings or get_settings()

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    logging.getLogger(__name__).info(
        f"Logging configured for {settings.APP_NAME} (level={settings.LOG_LEVEL})"
    )
