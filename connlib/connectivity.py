"""
connlib.connectivity
====================

This module defines :class:`Connectivity`, the high level entry point
that turns a :class:`~connlib.settings.ConnectivitySettings` bundle
into one or more :class:`~connlib.network.Network` results.

Two paths are offered:

* :meth:`Connectivity.calculate` answers "what is *the* network" for
  callers that want a single result.  The requested methods are tested
  against :data:`~connlib.methods.DISPATCH_ORDER` and the first match
  is computed.  If nothing matches a warning is logged and the empty
  sentinel ``Network()`` is returned.
* :meth:`Connectivity.calculate_multi_methods` computes every
  recognised method and returns the networks in
  :data:`~connlib.methods.ENUMERATION_ORDER`, whatever the order of the
  request.  Routines flagged ``concurrent_safe`` in the registry are
  submitted to a thread pool, each with its own copy of the settings.
  The others act as barriers: every task submitted before one is
  joined, the routine then runs alone on the calling thread against
  the caller's settings, and later tasks are only submitted once it
  returns.  Results are collected in enumeration order.

Errors raised by a metric routine are not caught: they propagate to
the caller, tasks that have not started yet are cancelled and no
partial result is returned.

Examples
--------
>>> from connlib import Connectivity, ConnectivitySettings
>>> settings = ConnectivitySettings(methods=['PLI', 'COR'], data=trials, sfreq=250.0)
>>> networks = Connectivity().calculate_multi_methods(settings)
>>> [net.method for net in networks]
['COR', 'PLI']
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from .diagnostics import MethodTiming, log_timing, timed_call
from .methods import ENUMERATION_ORDER, ConnectivityMethod
from .network import Network
from .registry import MetricEntry, MetricRegistry, default_registry
from .settings import ConnectivitySettings

logger = logging.getLogger(__name__)


class Connectivity:
    """Dispatch connectivity methods and collect their networks.

    Parameters
    ----------
    registry : MetricRegistry | None, optional
        Routines to dispatch to.  Defaults to :func:`default_registry`.
    max_workers : int | None, optional
        Size of the thread pool used by the multi-method path.  ``None``
        lets :class:`concurrent.futures.ThreadPoolExecutor` choose;
        ``1`` runs the concurrent-safe methods one at a time off the
        calling thread.
    """

    def __init__(self, registry: Optional[MetricRegistry] = None, max_workers: Optional[int] = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be a positive integer")
        self.registry = registry if registry is not None else default_registry()
        self.max_workers = max_workers
        self.last_timings: List[MethodTiming] = []

    # -- single method --------------------------------------------------
    def calculate(self, settings: ConnectivitySettings) -> Network:
        """Compute the network of the highest priority requested method.

        The routine is called synchronously with ``settings`` itself.

        Returns
        -------
        Network
            The computed network, or the empty sentinel ``Network()`` if
            no requested method is known.
        """
        entry = self.registry.first_match(settings.methods)
        if entry is None:
            logger.warning("Connectivity method unknown: %s", ', '.join(settings.methods) or '<none>')
            return Network()
        network, timing = timed_call(entry.method.value, entry.function, settings)
        self.last_timings = [timing]
        log_timing(timing)
        return network

    # -- multiple methods -----------------------------------------------
    def _plan(self, settings: ConnectivitySettings) -> List[MetricEntry]:
        requested = self.registry.recognized(settings.methods)
        skipped = [tok for tok in settings.methods if tok not in self.registry]
        if skipped:
            logger.debug("Skipping unknown connectivity methods: %s", ', '.join(skipped))
        return [self.registry.resolve(m) for m in ENUMERATION_ORDER if m in requested]

    def calculate_by_method(self, settings: ConnectivitySettings) -> Dict[ConnectivityMethod, Network]:
        """Compute every recognised requested method.

        Returns
        -------
        dict
            Mapping from method to network.  Insertion order follows
            :data:`~connlib.methods.ENUMERATION_ORDER`.
        """
        plan = self._plan(settings)
        self.last_timings = []
        if not plan:
            return {}

        # copies for the pool are taken before anything runs so that they
        # never observe intermediates cached by other routines
        snapshots = {entry.method: settings.copy() for entry in plan if entry.concurrent_safe}
        outcomes: Dict[ConnectivityMethod, Tuple[Network, MethodTiming]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='connlib') as executor:
            futures: Dict[ConnectivityMethod, Future] = {}
            try:
                for entry in plan:
                    if entry.concurrent_safe:
                        futures[entry.method] = executor.submit(
                            timed_call, entry.method.value, entry.function, snapshots[entry.method]
                        )
                        continue
                    # an unsafe routine runs alone, against the caller's settings
                    self._join(futures, outcomes)
                    outcomes[entry.method] = timed_call(entry.method.value, entry.function, settings)
                self._join(futures, outcomes)
            except BaseException:
                for future in futures.values():
                    future.cancel()
                raise

        results: Dict[ConnectivityMethod, Network] = {}
        timings: List[MethodTiming] = []
        for entry in plan:
            network, timing = outcomes[entry.method]
            log_timing(timing)
            timings.append(timing)
            results[entry.method] = network
        self.last_timings = timings
        return results

    @staticmethod
    def _join(
        futures: Dict[ConnectivityMethod, Future],
        outcomes: Dict[ConnectivityMethod, Tuple[Network, MethodTiming]],
    ) -> None:
        """Wait for every submitted task, in submission order."""
        for method in list(futures):
            outcomes[method] = futures[method].result()
            del futures[method]

    def calculate_multi_methods(self, settings: ConnectivitySettings) -> List[Network]:
        """Compute every recognised requested method.

        Returns
        -------
        list of Network
            One network per recognised method in
            :data:`~connlib.methods.ENUMERATION_ORDER`.  Each network's
            ``method`` attribute names the method it was computed with.
            Empty if no requested method is recognised.
        """
        return list(self.calculate_by_method(settings).values())


def calculate(settings: ConnectivitySettings) -> Network:
    """Single-method dispatch with the default registry."""
    return Connectivity().calculate(settings)


def calculate_multi_methods(settings: ConnectivitySettings, max_workers: Optional[int] = None) -> List[Network]:
    """Multi-method computation with the default registry."""
    return Connectivity(max_workers=max_workers).calculate_multi_methods(settings)


__all__ = [
    'Connectivity',
    'calculate',
    'calculate_multi_methods',
]
