"""
connlib.metrics.correlation
===========================

Time-domain connectivity measures.

``COR``
    Pearson correlation between every pair of channels, computed per
    trial and averaged across trials.

``XCOR``
    Maximum absolute normalised cross-correlation over all lags,
    computed per trial and averaged across trials.  At zero lag the
    normalised cross-correlation equals the Pearson coefficient.
"""

from __future__ import annotations

import numpy as np
from scipy import fft as sp_fft

from ..methods import ConnectivityMethod
from ..network import Network
from ..settings import ConnectivitySettings


def _zscore(trial: np.ndarray) -> np.ndarray:
    """Standardise each channel (row); flat channels become zeros."""
    centered = trial - trial.mean(axis=1, keepdims=True)
    std = trial.std(axis=1, keepdims=True)
    with np.errstate(divide='ignore', invalid='ignore'):
        z = np.where(std > 0, centered / std, 0.0)
    return z


def compute_correlation(settings: ConnectivitySettings) -> Network:
    """Trial-averaged Pearson correlation network."""
    epochs = settings.epochs()
    n_channels = epochs.shape[1]
    acc = np.zeros((n_channels, n_channels))
    for trial in epochs:
        with np.errstate(divide='ignore', invalid='ignore'):
            corr = np.corrcoef(trial)
        acc += np.nan_to_num(np.atleast_2d(corr), nan=0.0)
    acc /= len(epochs)
    return Network.from_matrix(acc, settings.labels, ConnectivityMethod.COR.value)


def compute_cross_correlation(settings: ConnectivitySettings) -> Network:
    """Trial-averaged peak absolute cross-correlation network."""
    epochs = settings.epochs()
    n_channels, n_times = epochs.shape[1], epochs.shape[2]
    n_fft = sp_fft.next_fast_len(2 * n_times - 1)
    acc = np.zeros((n_channels, n_channels))
    for trial in epochs:
        z = _zscore(trial)
        spectrum = sp_fft.rfft(z, n=n_fft, axis=-1)
        xcorr = sp_fft.irfft(
            spectrum[:, np.newaxis, :] * np.conj(spectrum[np.newaxis, :, :]), n=n_fft, axis=-1
        ) / n_times
        acc += np.max(np.abs(xcorr), axis=-1)
    acc /= len(epochs)
    return Network.from_matrix(acc, settings.labels, ConnectivityMethod.XCOR.value)


__all__ = [
    'compute_correlation',
    'compute_cross_correlation',
]
