"""
connlib
=======

This package computes pairwise connectivity between signal channels
(for example EEG/MEG sensors or ROI time series) and returns each
result as a :class:`Network`.  Its centre is the orchestration layer in
:mod:`connlib.connectivity`, which resolves requested method
identifiers through a registry, runs them serially or on a thread pool,
times each computation and collects the networks in a fixed order.

The key modules include:

* ``methods`` – the closed vocabulary of method identifiers and the
  dispatch/enumeration orders.
* ``settings`` – the :class:`ConnectivitySettings` bundle holding the
  requested methods, window, trial count, trigger type, frequency band
  and input data.
* ``registry`` – mapping from method identifier to metric routine.
* ``metrics`` – reference implementations of correlation, coherence and
  phase synchrony measures.
* ``network`` – the :class:`Network` result type.
* ``connectivity`` – the :class:`Connectivity` orchestrator.
* ``diagnostics`` – per-method wall-clock timing.

See ``connlib.main`` for a command line example tying the pieces
together.
"""

from .errors import ConnectivityError, SettingsError, UnknownMethodError
from .methods import DISPATCH_ORDER, ENUMERATION_ORDER, ConnectivityMethod, parse_method
from .network import Network
from .settings import ConnectivitySettings
from .registry import MetricEntry, MetricRegistry, default_registry
from .diagnostics import MethodTiming
from .connectivity import Connectivity, calculate, calculate_multi_methods

__version__ = "0.1.0"

__all__ = [
    'ConnectivityError',
    'SettingsError',
    'UnknownMethodError',
    'ConnectivityMethod',
    'DISPATCH_ORDER',
    'ENUMERATION_ORDER',
    'parse_method',
    'Network',
    'ConnectivitySettings',
    'MetricEntry',
    'MetricRegistry',
    'default_registry',
    'MethodTiming',
    'Connectivity',
    'calculate',
    'calculate_multi_methods',
]
