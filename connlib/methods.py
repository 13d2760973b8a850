"""
connlib.methods
===============

The closed vocabulary of connectivity methods and the two fixed orders
in which the orchestrator walks it.

``DISPATCH_ORDER``
    Priority used by :meth:`connlib.connectivity.Connectivity.calculate`.
    When a settings bundle requests several methods the first one in this
    order is the single method computed.

``ENUMERATION_ORDER``
    Order of the results returned by
    :meth:`connlib.connectivity.Connectivity.calculate_multi_methods`.
    Consumers that index results by position rely on it, so it must not
    change between releases.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple, Union

from .errors import UnknownMethodError


class ConnectivityMethod(str, Enum):
    """Identifiers of the supported connectivity methods.

    The values are the case-sensitive tokens used in settings bundles.
    """

    COR = 'COR'
    XCOR = 'XCOR'
    PLI = 'PLI'
    COH = 'COH'
    IMAGCOH = 'IMAGCOH'
    PLV = 'PLV'
    WPLI = 'WPLI'
    USPLI = 'USPLI'
    DSWPLI = 'DSWPLI'

    def __str__(self) -> str:
        return self.value


DISPATCH_ORDER: Tuple[ConnectivityMethod, ...] = (
    ConnectivityMethod.COR,
    ConnectivityMethod.XCOR,
    ConnectivityMethod.PLI,
    ConnectivityMethod.COH,
    ConnectivityMethod.IMAGCOH,
    ConnectivityMethod.PLV,
    ConnectivityMethod.WPLI,
    ConnectivityMethod.USPLI,
    ConnectivityMethod.DSWPLI,
)

ENUMERATION_ORDER: Tuple[ConnectivityMethod, ...] = (
    ConnectivityMethod.WPLI,
    ConnectivityMethod.USPLI,
    ConnectivityMethod.COR,
    ConnectivityMethod.XCOR,
    ConnectivityMethod.PLI,
    ConnectivityMethod.COH,
    ConnectivityMethod.IMAGCOH,
    ConnectivityMethod.PLV,
    ConnectivityMethod.DSWPLI,
)


def parse_method(token: Union[str, ConnectivityMethod]) -> ConnectivityMethod:
    """Return the :class:`ConnectivityMethod` for ``token``.

    Matching is exact: ``'cor'`` or ``' COR'`` are not recognised.

    Raises
    ------
    UnknownMethodError
        If ``token`` is not part of the vocabulary.
    """
    if isinstance(token, ConnectivityMethod):
        return token
    if not isinstance(token, str):
        raise UnknownMethodError(token)
    try:
        return ConnectivityMethod(token)
    except ValueError:
        raise UnknownMethodError(token) from None


__all__ = [
    'ConnectivityMethod',
    'DISPATCH_ORDER',
    'ENUMERATION_ORDER',
    'parse_method',
]
