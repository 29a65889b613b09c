"""
Daemon logging policy.

The daemon always logs to stderr and, when `logging.file` is configured, to
that file as well. Records carry the package version after their timestamp so
a log that spans daemon restarts shows which build wrote each line.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from mpvpaper_stop import __version__
from mpvpaper_stop.common.config import LoggingConfig
from mpvpaper_stop.common.errors import ConfigurationError

__all__ = [
    "logging_setup",
    "logLevel_resolve",
    "handlers_create",
    "versionTag_insert",
]


def logLevel_resolve(logging_config: LoggingConfig, verbose: bool = False) -> int:
    """`--verbose` forces DEBUG; otherwise the configured level applies."""
    if verbose:
        return logging.DEBUG
    return getattr(logging, logging_config.level.upper())


def handlers_create(log_file: Optional[str]) -> list[logging.Handler]:
    """
    Build the stderr handler plus an optional file handler.

    Raises:
        ConfigurationError: If the log file cannot be opened for appending.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if not log_file:
        return handlers
    try:
        handlers.append(logging.FileHandler(log_file))
    except OSError as exc:
        raise ConfigurationError(f"Cannot open log file {log_file}: {exc}") from exc
    return handlers


def versionTag_insert(log_format: str) -> str:
    """Place a `[vX.Y.Z]` tag after the timestamp, or first if there is none."""
    tag = f"[v{__version__}]"
    if "%(asctime)s" in log_format:
        return log_format.replace("%(asctime)s", f"%(asctime)s {tag}", 1)
    return f"{tag} {log_format}"


def logging_setup(logging_config: LoggingConfig, verbose: bool = False) -> int:
    """
    Configure the root logger for the daemon process.

    Replaces any handlers installed earlier, so calling it again after a
    config change takes effect.

    Args:
        logging_config:
            `logging` section of the runtime config.
        verbose:
            Command-line `-v`; overrides the configured level.

    Returns:
        The numeric level now in effect.

    Raises:
        ConfigurationError: If the configured log file cannot be opened.
    """
    level = logLevel_resolve(logging_config, verbose)
    logging.basicConfig(
        level=level,
        format=versionTag_insert(logging_config.format),
        handlers=handlers_create(logging_config.file),
        force=True,
    )
    return level
