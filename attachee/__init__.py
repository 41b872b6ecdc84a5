"""attachee - a long-running target process for attach and introspection tools."""

__version__ = "1.0.0"

from attachee.app import AttacheeApp
from attachee.polling_loop import LoopOutcome, PollingLoop
from attachee.runtime_info import collect_runtime_properties
from attachee.shutdown import ShutdownHandler, parse_signal

__all__ = [
    'AttacheeApp',
    'LoopOutcome',
    'PollingLoop',
    'collect_runtime_properties',
    'ShutdownHandler',
    'parse_signal',
]
