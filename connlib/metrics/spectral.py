"""
connlib.metrics.spectral
========================

Cross-spectral estimation shared by the coherence and phase based
metrics.  Each trial is tapered with the window named in the settings,
transformed with a real FFT and reduced to the frequency bins inside
the configured band.  The pairwise cross spectra are cached in
``settings.intermediate`` so that several metrics computed from the
same settings object only pay for the FFT once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy import fft as sp_fft
from scipy.signal import get_window

from ..errors import SettingsError
from ..settings import ConnectivitySettings

logger = logging.getLogger(__name__)

CACHE_KEY = 'cross_spectra'

# names used by the settings form -> scipy window names
_WINDOW_ALIASES = {
    'hanning': 'hann',
    'hann': 'hann',
    'ones': 'boxcar',
    'boxcar': 'boxcar',
    'rectangular': 'boxcar',
}


@dataclass
class CrossSpectra:
    """Per-trial cross spectra restricted to a frequency band.

    Attributes
    ----------
    csd : np.ndarray
        Complex array of shape ``(n_trials, n_channels, n_channels, n_freqs)``
        with ``csd[t, i, j, f] = X_i(f) * conj(X_j(f))`` for trial ``t``.
    freqs : np.ndarray
        Frequencies (Hz) of the retained bins.
    """

    csd: np.ndarray
    freqs: np.ndarray

    @property
    def n_trials(self) -> int:
        return self.csd.shape[0]

    def psd(self) -> np.ndarray:
        """Trial-averaged auto spectra, shape ``(n_channels, n_freqs)``."""
        mean_csd = self.csd.mean(axis=0)
        return np.real(np.einsum('iif->if', mean_csd))


def taper(window_type: str, n_times: int) -> np.ndarray:
    """Return the taper of length ``n_times`` for ``window_type``."""
    name = _WINDOW_ALIASES.get(window_type.strip().lower(), window_type.strip().lower())
    try:
        return get_window(name, n_times, fftbins=False)
    except ValueError as exc:
        raise SettingsError(f"Unknown window type '{window_type}'") from exc


def _cache_key(settings: ConnectivitySettings, n_fft: int) -> Tuple:
    return (
        settings.window_type,
        n_fft,
        int(settings.n_trials),
        settings.freq_band,
        float(settings.sfreq),
        settings.data.shape,
    )


def cross_spectra(settings: ConnectivitySettings) -> CrossSpectra:
    """Compute (or fetch from cache) the band-limited cross spectra.

    Parameters
    ----------
    settings : ConnectivitySettings
        Settings providing data, sampling frequency, window type and
        frequency band.  The result is stored in
        ``settings.intermediate``.

    Returns
    -------
    CrossSpectra
        Cross spectra of the selected trials.

    Raises
    ------
    SettingsError
        If the window is unknown or no frequency bin lies in the band.
    """
    epochs = settings.epochs()
    n_times = epochs.shape[-1]
    n_fft = settings.n_fft or n_times
    key = _cache_key(settings, n_fft)

    cached = settings.intermediate.get(CACHE_KEY)
    if cached is not None and cached[0] == key:
        return cached[1]

    win = taper(settings.window_type, n_times)
    spectra = sp_fft.rfft(epochs * win, n=n_fft, axis=-1)
    freqs = sp_fft.rfftfreq(n_fft, d=1.0 / settings.sfreq)
    mask = (freqs >= settings.freq_low) & (freqs <= settings.freq_high)
    if not np.any(mask):
        raise SettingsError(
            f"No frequency bin between {settings.freq_low} and {settings.freq_high} Hz "
            f"(resolution {settings.sfreq / n_fft:.3f} Hz)"
        )
    spectra = spectra[..., mask]
    csd = spectra[:, :, np.newaxis, :] * np.conj(spectra[:, np.newaxis, :, :])
    result = CrossSpectra(csd=csd, freqs=freqs[mask])
    settings.intermediate[CACHE_KEY] = (key, result)
    logger.debug(
        "Computed cross spectra for %d trials, %d channels, %d bins",
        csd.shape[0], csd.shape[1], csd.shape[-1],
    )
    return result


__all__ = [
    'CrossSpectra',
    'cross_spectra',
    'taper',
]
