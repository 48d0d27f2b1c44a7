"""
Central logging configuration for spcalendar_expander.

Keeps package diagnostics at INFO by default while allowing per-occurrence
DEBUG tracing to be switched on from the environment for troubleshooting.
"""

import logging
import os
from typing import Optional

PACKAGE_LOGGERS = [
    "spcalendar_expander",
    "spcalendar_expander.sp_grammar",
    "spcalendar_expander.sp_rule_builder",
    "spcalendar_expander.sp_appointment_parser",
    "spcalendar_expander.sp_expander",
    "spcalendar_expander.sp_exception_merger",
    "spcalendar_expander.config_loader",
]

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for spcalendar_expander.

    Args:
        debug_mode: Whether to enable debug logging for package modules
        force_debug: Override debug mode setting (None to use env var detection)
        level: Root log level name, e.g. Config.log_level (None to derive from debug mode)

    Environment Variables:
        SPCALENDAR_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        SPCALENDAR_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR); takes
            precedence over the level argument
    """
    env_debug = os.getenv("SPCALENDAR_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("SPCALENDAR_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if level is not None and level.upper() in _LEVEL_NAMES:
        root_level = getattr(logging, level.upper())
    if env_log_level in _LEVEL_NAMES:
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if the host application has not configured one
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s")
        )
        root_logger.addHandler(handler)

    logger_config: dict[str, int] = {
        "dateutil": logging.WARNING,
    }

    package_level = logging.DEBUG if final_debug else logging.INFO
    for module in PACKAGE_LOGGERS:
        logger_config[module] = package_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for spcalendar_expander modules.")
    else:
        root_logger.info("Production logging configuration applied.")


def reset_logging_to_debug() -> None:
    """Reset package and dependency loggers to DEBUG for troubleshooting."""
    logging.getLogger().setLevel(logging.DEBUG)
    for logger_name in ["dateutil", *PACKAGE_LOGGERS]:
        logging.getLogger(logger_name).setLevel(logging.DEBUG)

    logging.getLogger().info("All loggers reset to DEBUG level for troubleshooting")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}

    for logger_name in ["spcalendar_expander", "dateutil"]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)

    return status
