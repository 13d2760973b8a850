"""
connlib.registry
================

This module maps connectivity method identifiers to the routines that
compute them.  Each :class:`MetricEntry` also records whether the
routine may run on a worker thread alongside other routines
(``concurrent_safe``).  Routines flagged unsafe are executed on the
orchestrating thread by :class:`connlib.connectivity.Connectivity`.

Use :func:`default_registry` for the shipped metrics, or build a
:class:`MetricRegistry` by hand to plug in other implementations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Union

from .errors import UnknownMethodError
from .methods import DISPATCH_ORDER, ENUMERATION_ORDER, ConnectivityMethod, parse_method
from .network import Network
from .settings import ConnectivitySettings
from . import metrics

MetricFunction = Callable[[ConnectivitySettings], Network]
MethodLike = Union[str, ConnectivityMethod]


@dataclass(frozen=True)
class MetricEntry:
    """A registered metric routine.

    Attributes
    ----------
    method : ConnectivityMethod
        Identifier the routine is registered under.
    function : callable
        ``function(settings) -> Network``.
    concurrent_safe : bool
        Whether the routine may run on a worker pool concurrently with
        other routines.
    """

    method: ConnectivityMethod
    function: MetricFunction
    concurrent_safe: bool = True


class MetricRegistry:
    """Lookup table from :class:`ConnectivityMethod` to :class:`MetricEntry`."""

    def __init__(self) -> None:
        self._entries: Dict[ConnectivityMethod, MetricEntry] = {}

    def register(
        self,
        method: MethodLike,
        function: MetricFunction,
        concurrent_safe: bool = True,
    ) -> MetricEntry:
        """Register ``function`` for ``method``, replacing any previous entry.

        Raises
        ------
        UnknownMethodError
            If ``method`` is not part of the vocabulary.
        """
        key = parse_method(method)
        entry = MetricEntry(key, function, concurrent_safe)
        self._entries[key] = entry
        return entry

    def resolve(self, method: MethodLike) -> MetricEntry:
        """Return the entry for ``method``.

        Raises
        ------
        UnknownMethodError
            If the token is unknown or no routine is registered for it.
        """
        key = parse_method(method)
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownMethodError(method) from None

    def __contains__(self, method: object) -> bool:
        try:
            key = parse_method(method)  # type: ignore[arg-type]
        except UnknownMethodError:
            return False
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MetricEntry]:
        for method in ENUMERATION_ORDER:
            if method in self._entries:
                yield self._entries[method]

    def methods(self) -> List[ConnectivityMethod]:
        """Registered methods in enumeration order."""
        return [entry.method for entry in self]

    def recognized(self, tokens: Iterable[object]) -> Set[ConnectivityMethod]:
        """Return the registered methods named in ``tokens``.

        Unknown or unregistered tokens are dropped.
        """
        return {parse_method(tok) for tok in tokens if tok in self}  # type: ignore[arg-type]

    def first_match(
        self,
        tokens: Iterable[object],
        order: Sequence[ConnectivityMethod] = DISPATCH_ORDER,
    ) -> Optional[MetricEntry]:
        """Return the entry of the first method in ``order`` requested by ``tokens``."""
        requested = self.recognized(tokens)
        for method in order:
            if method in requested:
                return self._entries[method]
        return None


def default_registry() -> MetricRegistry:
    """Return a registry holding all shipped metric routines.

    Coherence is flagged as not safe for concurrent execution and is
    therefore always run on the calling thread.
    """
    registry = MetricRegistry()
    registry.register(ConnectivityMethod.COR, metrics.compute_correlation)
    registry.register(ConnectivityMethod.XCOR, metrics.compute_cross_correlation)
    registry.register(ConnectivityMethod.PLI, metrics.compute_pli)
    registry.register(ConnectivityMethod.COH, metrics.compute_coherence, concurrent_safe=False)
    registry.register(ConnectivityMethod.IMAGCOH, metrics.compute_imag_coherence)
    registry.register(ConnectivityMethod.PLV, metrics.compute_plv)
    registry.register(ConnectivityMethod.WPLI, metrics.compute_wpli)
    registry.register(ConnectivityMethod.USPLI, metrics.compute_uspli)
    registry.register(ConnectivityMethod.DSWPLI, metrics.compute_dswpli)
    return registry


__all__ = [
    'MetricEntry',
    'MetricRegistry',
    'MetricFunction',
    'default_registry',
]
