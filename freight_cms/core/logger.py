"""
Structured logging setup.
"""

import logging
from typing import Optional

import structlog

from freight_cms.core.config import ConfigManager, get_config


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    config_manager: Optional[ConfigManager] = None,
) -> None:
    """
    Configure structlog for the portal client.

    Args:
        level: Log level name; defaults to LOG_LEVEL
        json_output: Render JSON lines instead of console output; defaults to LOG_JSON
        config_manager: Optional config manager (defaults to global instance)
    """
    config_manager = config_manager or get_config()
    level = level or config_manager.env.log_level
    if json_output is None:
        json_output = config_manager.env.log_json

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )
