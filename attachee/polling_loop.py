"""Cooperative once-per-interval polling loop."""

import enum
import logging
import threading
from typing import Callable, Optional

from attachee.display import ConsoleReporter

logger = logging.getLogger(__name__)


class LoopOutcome(enum.Enum):
    """How the polling loop ended."""

    SHUTDOWN = "shutdown"
    INTERRUPTED = "interrupted"


def interrupt_reason(exc: BaseException) -> str:
    message = str(exc)
    return message if message else type(exc).__name__


class PollingLoop:
    """
    Increment a counter once per interval until the stop flag is set.

    Each iteration increments the counter, prints a progress line when the
    counter is a multiple of ``progress_every``, then waits up to
    ``interval`` seconds. The wait returns early when the stop flag is set.
    A KeyboardInterrupt anywhere in the iteration ends the loop.
    """

    def __init__(
        self,
        reporter: ConsoleReporter,
        stop_event: threading.Event,
        interval: float = 1.0,
        progress_every: int = 10,
        max_iterations: Optional[int] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if progress_every < 1:
            raise ValueError(f"progress_every must be at least 1, got {progress_every}")
        if max_iterations is not None and max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")

        self.reporter = reporter
        self.stop_event = stop_event
        self.interval = interval
        self.progress_every = progress_every
        self.max_iterations = max_iterations
        # wait(timeout) -> True once stop was requested
        self.wait = wait if wait is not None else stop_event.wait
        self.counter = 0

    def _step(self) -> bool:
        """Run one iteration. Returns True when the loop should stop."""
        self.counter += 1
        if self.counter % self.progress_every == 0:
            self.reporter.progress(self.counter)

        if self.max_iterations is not None and self.counter >= self.max_iterations:
            logger.info(f"Reached max iterations ({self.max_iterations})")
            return True

        return self.wait(self.interval)

    def run(self) -> LoopOutcome:
        """Run until shut down or interrupted."""
        logger.debug(f"Polling every {self.interval}s, progress every {self.progress_every}")
        try:
            while not self.stop_event.is_set():
                if self._step():
                    break
        except KeyboardInterrupt as e:
            logger.info(f"Wait interrupted at counter={self.counter}")
            self.reporter.interrupted(interrupt_reason(e))
            return LoopOutcome.INTERRUPTED

        logger.info(f"Loop stopped at counter={self.counter}")
        return LoopOutcome.SHUTDOWN
