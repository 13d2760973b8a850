"""
connlib.diagnostics
===================

Wall-clock timing of metric computations.  The orchestrator wraps
every routine call in :func:`timed_call` and reports the result with
:func:`log_timing`.  Timings are diagnostic only and never stored on
the returned networks.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Tuple

from .network import Network
from .settings import ConnectivitySettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodTiming:
    """Elapsed wall-clock time of one method computation."""

    method: str
    elapsed_ms: float


def timed_call(
    method: str,
    function: Callable[[ConnectivitySettings], Network],
    settings: ConnectivitySettings,
) -> Tuple[Network, MethodTiming]:
    """Call ``function(settings)`` and measure how long it takes.

    Exceptions raised by ``function`` propagate unchanged and no
    timing is produced for the failed call.
    """
    start = time.perf_counter()
    network = function(settings)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    return network, MethodTiming(str(method), elapsed_ms)


def log_timing(timing: MethodTiming) -> None:
    logger.info("Calculated %s in %.1f msecs.", timing.method, timing.elapsed_ms)


__all__ = [
    'MethodTiming',
    'timed_call',
    'log_timing',
]
