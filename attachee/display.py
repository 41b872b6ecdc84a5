"""Console output for the target process using rich."""

import threading
from typing import Dict, Optional

from rich.console import Console
from rich.text import Text

APP_NAME = "attachee"


class ConsoleReporter:
    """Print the lifecycle lines of the target process to stdout."""

    def __init__(self, console: Optional[Console] = None, name: str = APP_NAME):
        """Initialize the reporter."""
        self.lock = threading.Lock()
        self.console = console if console is not None else Console(highlight=False)
        self.name = name

        # State
        self.banner_shown = False
        self.exited_shown = False

    def _emit(self, text: Text):
        self.console.print(text, soft_wrap=True, highlight=False)

    def banner(self, pid: int):
        """Print the startup banner, once."""
        with self.lock:
            if self.banner_shown:
                return
            self.banner_shown = True
        line = Text(f"{self.name} started. ", style="bold green")
        line.append(f"PID: {pid}", style="bright_white")
        self._emit(line)

    def properties(self, props: Dict[str, str]):
        """Print the labeled runtime properties followed by a blank line."""
        self._emit(Text("Runtime Properties:", style="bold"))
        for label, value in props.items():
            line = Text(f"  {label}: ", style="dim")
            line.append(value, style="cyan")
            self._emit(line)
        self._emit(Text(""))

    def progress(self, counter: int):
        """Print a progress line."""
        self._emit(Text(f"{self.name} running... counter={counter}"))

    def shutting_down(self):
        """Print the shutdown notice."""
        self._emit(Text(f"{self.name} shutting down...", style="yellow"))

    def interrupted(self, reason: str):
        """Print the interruption notice."""
        self._emit(Text(f"Interrupted: {reason}", style="yellow"))

    def exited(self):
        """Print the final exit notice, once."""
        with self.lock:
            if self.exited_shown:
                return
            self.exited_shown = True
        self._emit(Text(f"{self.name} exited.", style="bold"))
