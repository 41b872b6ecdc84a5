"""Shutdown handling for termination signals.

The handler is registered once at startup with ``signal.signal`` and runs
on the main thread whenever a shutdown signal arrives. It announces the
shutdown and sets the stop flag the polling loop waits on.
"""

import logging
import signal
import threading
from typing import Dict, Iterable, List, Union

from attachee.display import ConsoleReporter

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_SIGNALS = ("SIGTERM", "SIGHUP")


def parse_signal(name: Union[str, int]) -> signal.Signals:
    """
    Resolve a signal given as ``TERM``, ``SIGTERM`` or ``15``.

    Raises:
        ValueError: if the name is not a signal on this platform
    """
    if isinstance(name, int):
        try:
            return signal.Signals(name)
        except ValueError:
            raise ValueError(f"Unknown signal number: {name}") from None

    text = name.strip()
    if text.isdigit():
        try:
            return signal.Signals(int(text))
        except ValueError:
            raise ValueError(f"Unknown signal number: {text}") from None

    upper = text.upper()
    if not upper.startswith("SIG"):
        upper = "SIG" + upper
    # Exclude SIG_DFL / SIG_IGN and similar handler constants
    if upper.startswith("SIG_"):
        raise ValueError(f"Unknown signal: {text}")
    try:
        return signal.Signals[upper]
    except KeyError:
        raise ValueError(f"Unknown signal: {text}") from None


def default_shutdown_signals() -> List[signal.Signals]:
    """Shutdown signals available on this platform."""
    return [getattr(signal, name) for name in DEFAULT_SHUTDOWN_SIGNALS if hasattr(signal, name)]


class ShutdownHandler:
    """Signal handler that requests a stop of the polling loop."""

    def __init__(self, reporter: ConsoleReporter, stop_event: threading.Event):
        self.reporter = reporter
        self.stop_event = stop_event
        self._lock = threading.Lock()
        self.invoked = False

    def __call__(self, signum=None, frame=None):
        # Later requests are no-ops; the first one already stopped the loop
        if not self._lock.acquire(blocking=False):
            return
        try:
            if self.invoked:
                logger.debug(f"Shutdown already requested, ignoring signal {signum}")
                return
            self.invoked = True
        finally:
            self._lock.release()

        if signum is not None:
            logger.info(f"Received {signal.Signals(signum).name}, requesting shutdown")
        self.reporter.shutting_down()

        # Runs on the main thread, which may hold the event's lock inside wait()
        setter = threading.Thread(target=self.stop_event.set, name="attachee-shutdown", daemon=True)
        setter.start()


def install_signal_handlers(
    handler: ShutdownHandler, signals: Iterable[signal.Signals]
) -> Dict[signal.Signals, object]:
    """
    Register ``handler`` for each of ``signals``.

    Must be called from the main thread.

    Returns:
        Dict of signal -> previous handler, for restore_signal_handlers()
    """
    previous = {}
    try:
        for sig in signals:
            previous[sig] = signal.signal(sig, handler)
            logger.debug(f"Installed shutdown handler for {sig.name}")
    except (OSError, ValueError):
        restore_signal_handlers(previous)
        raise
    return previous


def restore_signal_handlers(previous: Dict[signal.Signals, object]) -> None:
    """Put back the handlers returned by install_signal_handlers()."""
    for sig, old_handler in previous.items():
        signal.signal(sig, old_handler if old_handler is not None else signal.SIG_DFL)
