"""Runtime descriptors printed once at startup."""

import logging
import platform
import sys
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

UNAVAILABLE = "<unavailable>"


def _vm_name() -> str:
    cache_tag = sys.implementation.cache_tag
    return cache_tag if cache_tag else sys.implementation.name


# Ordered (label, reader) pairs, printed in this order
RUNTIME_DESCRIPTORS: List[Tuple[str, Callable[[], str]]] = [
    ("python.version", platform.python_version),
    ("python.implementation", platform.python_implementation),
    ("python.vm.name", _vm_name),
    ("python.compiler", platform.python_compiler),
    ("python.build", lambda: " ".join(platform.python_build())),
]


def _read_descriptor(label: str, reader: Callable[[], str]) -> str:
    try:
        value = reader()
    except Exception as e:
        logger.debug(f"Could not read {label}: {e}")
        return UNAVAILABLE
    if value is None:
        return UNAVAILABLE
    value = str(value).strip()
    return value if value else UNAVAILABLE


def collect_runtime_properties(
    descriptors: Optional[List[Tuple[str, Callable[[], str]]]] = None
) -> Dict[str, str]:
    """
    Collect the runtime descriptors shown in the startup banner.

    A descriptor that is missing, empty or raises while being read is
    reported as ``<unavailable>``; collection itself never fails.

    Args:
        descriptors: (label, reader) pairs, defaults to RUNTIME_DESCRIPTORS

    Returns:
        Dict of label -> value, in descriptor order
    """
    if descriptors is None:
        descriptors = RUNTIME_DESCRIPTORS

    return {label: _read_descriptor(label, reader) for label, reader in descriptors}
