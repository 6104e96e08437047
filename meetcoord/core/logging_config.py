# meetcoord/core/logging_config.py
import logging

from meetcoord.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure the root handler for the service.

    Calling this more than once is harmless: `force=True` replaces any handler
    installed by a previous call (e.g. the app factory running twice in tests).
    """
    settings = get_settings()
    resolved = (level or settings.LOG_LEVEL or "INFO").upper()

    logging.basicConfig(level=resolved, format=LOG_FORMAT, force=True)
    logging.getLogger("meetcoord").setLevel(resolved)
