"""
connlib.errors
==============

Exception types raised by the connectivity package.  Everything derives
from :class:`ConnectivityError` so callers can catch package errors in one
place, while the mixed-in builtin bases keep ``except KeyError`` and
``except ValueError`` working for code that predates these classes.
"""

from __future__ import annotations


class ConnectivityError(Exception):
    """Base class for errors raised by :mod:`connlib`."""


class UnknownMethodError(ConnectivityError, KeyError):
    """A method identifier is not part of the known vocabulary."""

    def __init__(self, token: object) -> None:
        super().__init__(token)
        self.token = token

    def __str__(self) -> str:
        return f"Unknown connectivity method {self.token!r}"


class SettingsError(ConnectivityError, ValueError):
    """Connectivity settings are inconsistent or out of range."""


__all__ = [
    'ConnectivityError',
    'UnknownMethodError',
    'SettingsError',
]
