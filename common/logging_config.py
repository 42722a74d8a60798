"""Logging setup shared by the tracker, the peers and the shell."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _make_formatter(correlation_id: Optional[str] = None) -> logging.Formatter:
    if correlation_id:
        return logging.Formatter(
            f'%(asctime)s - %(name)s - %(levelname)s - [{correlation_id}] - %(message)s',
            datefmt=DATE_FORMAT
        )
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    correlation_id: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Installs a stdout handler on the component logger and on the shared
    package loggers (common, tracker, peer, cli) so module loggers obtained
    with get_logger(__name__) end up on the same stream.

    Args:
        component_name: Name of the component (e.g., 'tracker', 'peer', 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO
        correlation_id: Optional correlation ID to include in log format (e.g. the peer name)

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_make_formatter(correlation_id))

    for name in (component_name, 'common', 'tracker', 'peer', 'cli'):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if not logger.handlers:
            logger.addHandler(handler)
            logger.propagate = False

    return logging.getLogger(component_name)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
