"""
connlib.metrics.coherence
=========================

Coherency based measures computed from trial-averaged cross spectra
and averaged over the frequency band.

``COH``
    Magnitude coherence ``|<Sxy>| / sqrt(<Sxx> <Syy>)``.

``IMAGCOH``
    Absolute imaginary part of coherency
    ``|Im(<Sxy>)| / sqrt(<Sxx> <Syy>)``, insensitive to zero-lag
    (volume conduction) coupling.
"""

from __future__ import annotations

import numpy as np

from ..methods import ConnectivityMethod
from ..network import Network
from ..settings import ConnectivitySettings
from .spectral import cross_spectra


def _coherency(settings: ConnectivitySettings) -> np.ndarray:
    spectra = cross_spectra(settings)
    mean_csd = spectra.csd.mean(axis=0)
    psd = spectra.psd()
    norm = np.sqrt(psd[:, np.newaxis, :] * psd[np.newaxis, :, :])
    with np.errstate(divide='ignore', invalid='ignore'):
        return mean_csd / norm


def compute_coherence(settings: ConnectivitySettings) -> Network:
    """Band-averaged magnitude coherence network."""
    coh = np.abs(_coherency(settings)).mean(axis=-1)
    return Network.from_matrix(
        coh, settings.labels, ConnectivityMethod.COH.value, settings.freq_band
    )


def compute_imag_coherence(settings: ConnectivitySettings) -> Network:
    """Band-averaged absolute imaginary coherence network."""
    icoh = np.abs(np.imag(_coherency(settings))).mean(axis=-1)
    return Network.from_matrix(
        icoh, settings.labels, ConnectivityMethod.IMAGCOH.value, settings.freq_band
    )


__all__ = [
    'compute_coherence',
    'compute_imag_coherence',
]
