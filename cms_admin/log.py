import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _resolve_log_level(value: str) -> int:
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str | None = None) -> logging.Logger:
    """Install a root handler unless the host already configured one.

    The level comes from ``level_name`` or the ``LOG_LEVEL`` environment
    variable and falls back to INFO for unknown names.
    """
    log_level = _resolve_log_level(
        (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    )

    if not logging.getLogger().handlers:
        logging.basicConfig(level=log_level, format=DEFAULT_FORMAT)

    logger = logging.getLogger("cms_admin")
    logger.setLevel(log_level)
    return logger
