#!/usr/bin/env python3
"""Command-line interface for the attachee target process."""

import argparse
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for direct script execution
script_dir = Path(__file__).parent.parent
if str(script_dir) not in sys.path:
    sys.path.insert(0, str(script_dir))

from attachee import __version__
from attachee.app import AttacheeApp, default_config
from attachee.polling_loop import LoopOutcome
from attachee.shutdown import parse_signal

# Rich imports for console output
from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

ENV_INTERVAL = "ATTACHEE_INTERVAL"
ENV_PID_FILE = "ATTACHEE_PID_FILE"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value!r}")
    return number


def _signal_arg(value: str):
    try:
        sig = parse_signal(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    if sig.name in ("SIGKILL", "SIGSTOP"):
        raise argparse.ArgumentTypeError(f"{sig.name} cannot be handled")
    return sig


def _dump_signal_arg(value: str):
    if value.strip().lower() == "none":
        return None
    return _signal_arg(value)


def _configure_logging(level_name: str):
    """Send diagnostics to stderr so stdout only carries lifecycle lines."""
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger("attachee").setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attachee",
        description="Long-running target process for attach and introspection tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Run until SIGTERM/SIGHUP (shutdown) or Ctrl+C (interrupt):
  attachee

  # Faster ticks and a PID file for tooling to pick up:
  attachee --interval 0.2 --pid-file /tmp/attachee.pid

  # Dump all thread stacks on SIGUSR1 instead of SIGQUIT:
  attachee --dump-signal USR1

Environment:
  {ENV_INTERVAL}  default for --interval
  {ENV_PID_FILE}  default for --pid-file
        """
    )

    parser.add_argument("--interval", type=_positive_float, default=None, help="Seconds between loop iterations (default: 1.0)")
    parser.add_argument("--progress-every", type=_positive_int, default=10, help="Print a progress line every N iterations (default: 10)")
    parser.add_argument("--max-iterations", type=_positive_int, default=None, help="Stop after N iterations (default: run until signaled)")
    parser.add_argument("--shutdown-signal", type=_signal_arg, action="append", default=None, dest="shutdown_signals", metavar="NAME", help="Signal that triggers a graceful shutdown; repeatable (default: TERM, HUP)")
    parser.add_argument("--dump-signal", type=_dump_signal_arg, default=argparse.SUPPRESS, metavar="NAME", help="Signal that dumps all thread stacks to stderr, or 'none' (default: QUIT)")
    parser.add_argument("--pid-file", type=str, default=None, help="Write the process ID to this file while running")
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Log level for stderr diagnostics (default: WARNING)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> dict:
    """Merge command-line flags over environment defaults over built-in defaults."""
    config = default_config()

    interval = args.interval
    if interval is None and os.environ.get(ENV_INTERVAL):
        try:
            interval = _positive_float(os.environ[ENV_INTERVAL])
        except argparse.ArgumentTypeError as e:
            parser.error(f"{ENV_INTERVAL}: {e}")
    if interval is not None:
        config["interval"] = interval

    config["progress_every"] = args.progress_every
    config["max_iterations"] = args.max_iterations

    if args.shutdown_signals:
        config["shutdown_signals"] = list(dict.fromkeys(args.shutdown_signals))
    if hasattr(args, "dump_signal"):
        config["dump_signal"] = args.dump_signal

    pid_file = args.pid_file or os.environ.get(ENV_PID_FILE) or None
    config["pid_file"] = pid_file

    return config


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    config = build_config(parser, args)
    logger.debug(f"Configuration: {config}")

    app = AttacheeApp(config)
    try:
        outcome = app.run()
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    except OSError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_ERROR

    if outcome is LoopOutcome.INTERRUPTED:
        return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
