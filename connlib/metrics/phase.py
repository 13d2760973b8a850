"""
connlib.metrics.phase
=====================

Phase synchrony measures computed across trials from the cross
spectra and averaged over the frequency band.

``PLV``
    Phase locking value ``|<Sxy / |Sxy|>|``.

``PLI``
    Phase lag index ``|<sign(Im Sxy)>|`` (Stam et al., 2007).

``WPLI``
    Weighted phase lag index ``|<Im Sxy>| / <|Im Sxy|>`` (Vinck et al., 2011).

``USPLI``
    Unbiased estimator of the squared PLI,
    ``(N PLI^2 - 1) / (N - 1)`` for ``N`` trials.

``DSWPLI``
    Debiased estimator of the squared WPLI (Vinck et al., 2011).

The debiased estimators need at least two trials; with a single trial
they raise :class:`~connlib.errors.SettingsError`.
"""

from __future__ import annotations

import numpy as np

from ..errors import SettingsError
from ..methods import ConnectivityMethod
from ..network import Network
from ..settings import ConnectivitySettings
from .spectral import cross_spectra


def _network(values: np.ndarray, settings: ConnectivitySettings, method: ConnectivityMethod) -> Network:
    return Network.from_matrix(values, settings.labels, method.value, settings.freq_band)


def _require_trials(n_trials: int, method: ConnectivityMethod) -> None:
    if n_trials < 2:
        raise SettingsError(f"{method.value} requires at least two trials, got {n_trials}")


def compute_plv(settings: ConnectivitySettings) -> Network:
    csd = cross_spectra(settings).csd
    with np.errstate(divide='ignore', invalid='ignore'):
        unit = np.nan_to_num(csd / np.abs(csd), nan=0.0)
    plv = np.abs(unit.mean(axis=0)).mean(axis=-1)
    return _network(plv, settings, ConnectivityMethod.PLV)


def compute_pli(settings: ConnectivitySettings) -> Network:
    im = np.imag(cross_spectra(settings).csd)
    pli = np.abs(np.sign(im).mean(axis=0)).mean(axis=-1)
    return _network(pli, settings, ConnectivityMethod.PLI)


def compute_wpli(settings: ConnectivitySettings) -> Network:
    im = np.imag(cross_spectra(settings).csd)
    num = np.abs(im.mean(axis=0))
    den = np.abs(im).mean(axis=0)
    with np.errstate(divide='ignore', invalid='ignore'):
        wpli = np.nan_to_num(num / den, nan=0.0)
    return _network(wpli.mean(axis=-1), settings, ConnectivityMethod.WPLI)


def compute_uspli(settings: ConnectivitySettings) -> Network:
    im = np.imag(cross_spectra(settings).csd)
    n = im.shape[0]
    _require_trials(n, ConnectivityMethod.USPLI)
    pli = np.abs(np.sign(im).mean(axis=0))
    uspli = (n * pli ** 2 - 1.0) / (n - 1.0)
    return _network(uspli.mean(axis=-1), settings, ConnectivityMethod.USPLI)


def compute_dswpli(settings: ConnectivitySettings) -> Network:
    im = np.imag(cross_spectra(settings).csd)
    _require_trials(im.shape[0], ConnectivityMethod.DSWPLI)
    sum_im = im.sum(axis=0)
    sum_abs = np.abs(im).sum(axis=0)
    sum_sq = (im ** 2).sum(axis=0)
    with np.errstate(divide='ignore', invalid='ignore'):
        dswpli = np.nan_to_num((sum_im ** 2 - sum_sq) / (sum_abs ** 2 - sum_sq), nan=0.0)
    return _network(dswpli.mean(axis=-1), settings, ConnectivityMethod.DSWPLI)


__all__ = [
    'compute_plv',
    'compute_pli',
    'compute_wpli',
    'compute_uspli',
    'compute_dswpli',
]
