"""Lifecycle of the target process: banner, loop, shutdown, exit."""

import faulthandler
import logging
import os
import signal
import sys
import threading
from typing import Any, Dict, Optional

from rich.console import Console

from attachee.display import ConsoleReporter
from attachee.exit_flag import STOP_REQUESTED
from attachee.pidfile import remove_pid_file, write_pid_file
from attachee.polling_loop import LoopOutcome, PollingLoop, interrupt_reason
from attachee.runtime_info import collect_runtime_properties
from attachee.shutdown import (
    ShutdownHandler,
    default_shutdown_signals,
    install_signal_handlers,
    restore_signal_handlers,
)

logger = logging.getLogger(__name__)


def default_config() -> Dict[str, Any]:
    """Configuration used when nothing is overridden."""
    return {
        "interval": 1.0,
        "progress_every": 10,
        "max_iterations": None,
        "shutdown_signals": default_shutdown_signals(),
        "dump_signal": getattr(signal, "SIGQUIT", None),
        "pid_file": None,
    }


def _register_thread_dump(signum: signal.Signals) -> bool:
    if not hasattr(faulthandler, "register"):
        logger.warning("Thread dumps on signal are not supported on this platform")
        return False
    try:
        faulthandler.register(signum, file=sys.stderr, all_threads=True, chain=False)
    except (OSError, ValueError, RuntimeError) as e:
        # stderr without a real file descriptor (captured or embedded)
        logger.warning(f"Thread dump on {signum.name} unavailable: {e}")
        return False
    logger.debug(f"Thread dump registered on {signum.name}")
    return True


class AttacheeApp:
    """Run the target process until it is shut down or interrupted."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        console: Optional[Console] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        self.config = default_config()
        if config:
            self.config.update(config)

        self.stop_event = stop_event if stop_event is not None else STOP_REQUESTED
        self.reporter = ConsoleReporter(console)
        self.shutdown_handler = ShutdownHandler(self.reporter, self.stop_event)
        self.loop = PollingLoop(
            self.reporter,
            self.stop_event,
            interval=self.config["interval"],
            progress_every=self.config["progress_every"],
            max_iterations=self.config["max_iterations"],
        )
        self.pid = os.getpid()

    @property
    def counter(self) -> int:
        return self.loop.counter

    def run(self) -> LoopOutcome:
        """
        Run the full lifecycle and return how the loop ended.

        The PID file (if configured) is written before anything is printed;
        an OSError from writing it propagates before the banner.
        """
        pid_file = self.config.get("pid_file")
        if pid_file:
            write_pid_file(pid_file, self.pid)

        previous_handlers = {}
        dump_signal = self.config.get("dump_signal")
        dump_registered = False
        try:
            self.reporter.banner(self.pid)
            self.reporter.properties(collect_runtime_properties())

            previous_handlers = install_signal_handlers(
                self.shutdown_handler, self.config["shutdown_signals"]
            )
            if dump_signal is not None:
                dump_registered = _register_thread_dump(dump_signal)

            return self.loop.run()
        except KeyboardInterrupt as e:
            logger.info("Interrupted during startup")
            self.reporter.interrupted(interrupt_reason(e))
            return LoopOutcome.INTERRUPTED
        finally:
            if dump_registered:
                faulthandler.unregister(dump_signal)
            restore_signal_handlers(previous_handlers)
            if pid_file:
                remove_pid_file(pid_file, self.pid)
            self.reporter.exited()
