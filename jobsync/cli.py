"""
Command-Line Entry Point

Builds the configuration from arguments, environment and an optional YAML
file, then runs the synchronizer until interrupted.

Author: JobSync Project
License: MIT
"""

import argparse
import signal
import sys
from typing import Optional, List, Dict, Any

from . import __version__
from .config.config_loader import load_config
from .core.cancellation import CancellationContext
from .core.synchronizer import Synchronizer
from .utils.logger import SyncLogger


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="jobsync",
        description="Periodically mirror a source directory into a replica directory."
    )
    parser.add_argument("-s", "--source-path", help="Path to the source directory.")
    parser.add_argument("-r", "--replica-path", help="Path to the replica directory.")
    parser.add_argument("-i", "--interval", type=int, help="Interval between cycles in milliseconds.")
    parser.add_argument("-l", "--log-file", help="Path to the log file.")
    parser.add_argument(
        "-v", "--verbose", type=int, choices=[0, 1, 2],
        help="Verbosity: 0 = errors, 1 = + important (default), 2 = everything."
    )
    parser.add_argument(
        "-f", "--fragile", action="store_true", default=None,
        help="Stop synchronizing on the first error."
    )
    parser.add_argument(
        "-c", "--comparator",
        help="File comparison: NONE, BINARY (default), MD5 or SHA256."
    )
    parser.add_argument("--max-workers", type=int, help="Upper bound on concurrent file workers.")
    parser.add_argument("--config", help="Path to a YAML configuration file.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def args_to_overrides(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """Map parsed arguments onto configuration sections."""
    return {
        "sync": {
            "source_path": args.source_path,
            "replica_path": args.replica_path,
            "interval": args.interval,
            "fragile": args.fragile,
            "comparator": args.comparator,
            "max_workers": args.max_workers,
        },
        "logging": {
            "log_file_path": args.log_file,
            "verbose": args.verbose,
        },
    }


def install_signal_handlers(logger: SyncLogger, cancellation: CancellationContext):
    """Turn SIGINT/SIGTERM into a cancellation request."""
    def _handler(signum, frame):
        logger.log("Cancellation requested. Stopping synchronization...")
        cancellation.cancel()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run JobSync.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, args_to_overrides(args))
    except (ValueError, FileNotFoundError) as e:
        SyncLogger.log_critical_error(f"Invalid configuration, unable to proceed. {e}")
        return 1

    try:
        with SyncLogger(
            config.logging.log_file_path,
            config.logging.verbose,
            config.logging.json_format
        ) as logger:
            cancellation = CancellationContext()
            synchronizer = Synchronizer(config.sync, logger, cancellation)
            install_signal_handlers(logger, cancellation)

            synchronizer.start()
            logger.log("Synchronization process completed.")
    except Exception as e:
        SyncLogger.log_critical_error(f"Critical error occured, unable to proceed. {e}")
        return 1

    return 0


def run():
    """Console script entry point."""
    sys.exit(main())
