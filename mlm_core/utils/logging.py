"""
Logging setup.

Configures loguru sinks from settings.
"""

import sys

from loguru import logger

from mlm_core.config.settings import Settings, settings as default_settings


def setup_logging(config: Settings | None = None) -> None:
    """Configure stderr sink and rotating file sink."""
    config = config or default_settings

    logger.remove()
    logger.add(sys.stderr, level=config.log_level)

    if config.log_file:
        logger.add(
            config.log_file,
            rotation="1 day",
            retention="7 days",
            level=config.log_level,
            encoding="utf-8",
        )

    logger.info(
        "Logging configured",
        extra={"environment": config.environment, "level": config.log_level},
    )
