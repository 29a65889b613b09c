"""mpvpaper-stop command-line interface"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Optional, Sequence

from mpvpaper_stop import __version__
from mpvpaper_stop.common.errors import MpvpaperStopError
from mpvpaper_stop.common.settings import settings

logger = logging.getLogger(__name__)

__all__ = [
    "arguments_parse",
    "parser_create",
    "logLevelOverride_get",
    "main",
]


def parser_create() -> argparse.ArgumentParser:
    """
    Create fully populated argument parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="mpvpaper-stop",
        description="Pause mpvpaper while windows are open on the active Hyprland workspace",
    )
    parser.add_argument("--version", action="version", version=f"mpvpaper-stop {__version__}")
    coreArgs_populate(parser)
    colorArgs_populate(parser)
    loggingArgs_populate(parser)
    return parser


def coreArgs_populate(parser: argparse.ArgumentParser) -> None:
    """
    Populate socket, timing, and process arguments.

    Args:
        parser: Target argument parser.
    """
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enables verbose output"
    )
    parser.add_argument(
        "-f", "--fork", action="store_true", help="Forks the process into the background"
    )
    parser.add_argument(
        "-p",
        "--socket-path",
        type=str,
        default=None,
        dest="socket_path",
        metavar="PATH",
        help=f"Path to the mpvpaper socket (default: {settings.DEFAULT_PLAYER_SOCKET_PATH})",
    )
    parser.add_argument(
        "-w",
        "--socket-wait-time",
        type=str,
        default=None,
        dest="socket_wait_time",
        metavar="MS",
        help=(
            "Wait time for the socket in milliseconds "
            f"(default: {settings.DEFAULT_SOCKET_WAIT_MS})"
        ),
    )
    parser.add_argument(
        "-t",
        "--period",
        type=str,
        default=None,
        metavar="MS",
        help=f"Polling period in milliseconds (default: {settings.DEFAULT_PERIOD_MS})",
    )
    parser.add_argument(
        "--wm-backend",
        type=str,
        choices=["socket", "command"],
        default=None,
        dest="wm_backend",
        help="Query Hyprland via its socket or via hyprctl (default: socket)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations)",
    )


def colorArgs_populate(parser: argparse.ArgumentParser) -> None:
    """
    Populate color backend selection. Selections accumulate.

    Args:
        parser: Target argument parser.
    """
    parser.add_argument(
        "-c",
        action="append",
        choices=["pywal", "matugen"],
        dest="color_backends",
        metavar="BACKEND",
        help="Chooses color backend (pywal or matugen); may be repeated",
    )
    parser.add_argument(
        "--pywal",
        action="append_const",
        const="pywal",
        dest="color_backends",
        help="Runs pywal on pause",
    )
    parser.add_argument(
        "--matugen",
        action="append_const",
        const="matugen",
        dest="color_backends",
        help="Runs matugen on pause",
    )


def loggingArgs_populate(parser: argparse.ArgumentParser) -> None:
    """
    Populate logging arguments.

    Args:
        parser: Target argument parser.
    """
    parser.add_argument(
        "--log-file", type=str, default=None, dest="log_file", help="Also log to this file"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (overrides config)"
    )
    parser.add_argument(
        "--info", action="store_true", help="Enable info logging (overrides config)"
    )
    parser.add_argument(
        "--warning", action="store_true", help="Enable warning logging (overrides config)"
    )
    parser.add_argument(
        "--error", action="store_true", help="Enable error logging (overrides config)"
    )
    parser.add_argument(
        "--critical", action="store_true", help="Enable critical logging (overrides config)"
    )


def arguments_parse(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments and resolve the log level override.

    Args:
        argv: Argument list; defaults to `sys.argv[1:]`.

    Returns:
        Parsed CLI arguments with `log_level` set.
    """
    args = parser_create().parse_args(argv)
    args.log_level = logLevelOverride_get(args)
    return args


def logLevelOverride_get(args: argparse.Namespace) -> str | None:
    """
    Resolve explicit log level override flags.

    Args:
        args: Parsed CLI args.

    Returns:
        Selected log level or None.
    """
    if args.critical:
        return "CRITICAL"
    if args.error:
        return "ERROR"
    if args.warning:
        return "WARNING"
    if args.info:
        return "INFO"
    if args.debug:
        return "DEBUG"
    return None


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Main entry point for the mpvpaper-stop command"""
    args = arguments_parse(argv)

    from mpvpaper_stop.daemon.bootstrap import configFromArgs_load
    from mpvpaper_stop.daemon.daemon_logging import logging_setup
    from mpvpaper_stop.daemon.main import daemon_run

    try:
        config = configFromArgs_load(args)
        logging_setup(config.logging, verbose=config.verbose)
    except MpvpaperStopError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        daemon_run(config)
    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)
    except MpvpaperStopError as e:
        logger.error("%s", e)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
