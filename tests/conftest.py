import io

import pytest
from rich.console import Console

from attachee.display import ConsoleReporter


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, force_terminal=False, color_system=None, width=200)


@pytest.fixture
def reporter(console):
    return ConsoleReporter(console)


@pytest.fixture
def lines(output):
    """Captured stdout lines so far."""
    return lambda: output.getvalue().splitlines()
