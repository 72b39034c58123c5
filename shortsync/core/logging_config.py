"""Loguru setup shared by the CLI, the API and the services."""

import sys
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[project_id]}</magenta> | <cyan>{extra[name]}</cyan> | <level>{message}</level>"
)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Configure console logging and an optional JSON-lines log file.

    Every record carries `project_id` and `name` extras so one attempt can be
    followed across services; records logged without a bound project show "-".

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file (rotated, zip-compressed, one JSON record per line)
        rotation: Log rotation size
        retention: Log retention period
    """
    logger.remove()
    logger.configure(extra={"project_id": "-", "name": "shortsync"})

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level.upper(), colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            level=log_level.upper(),
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=True,
        )


def get_logger(name: str, **context: Any) -> Any:
    """
    Get a logger bound to a module name and optional context.

    Args:
        name: Logger name (typically __name__)
        **context: Additional context fields (project_id, stage, segment, etc.)

    Returns:
        Logger instance with bound context
    """
    return logger.bind(name=name, **context)


setup_logging()
