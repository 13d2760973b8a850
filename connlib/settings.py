"""
connlib.settings
================

This module defines :class:`ConnectivitySettings`, the configuration
bundle handed to the orchestrator and to every metric routine.  It
holds the requested method identifiers, the parameters exposed by the
connectivity settings form (window function, number of trials, trigger
type and frequency band) and the input signal data.

Metric routines store intermediate results such as cross spectra in
``intermediate``.  Because of that side effect the orchestrator hands
each routine that runs on its thread pool its own
:meth:`ConnectivitySettings.copy`.  Routines that are not safe to run
concurrently run alone against the caller's instance.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .errors import SettingsError


DEFAULTS: Dict[str, Any] = {
    'methods': ['COR'],
    'window_type': 'Hanning',
    'n_trials': 10,
    'trigger_type': '1',
    'freq_low': 7.0,
    'freq_high': 13.0,
}


def _unique(tokens: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for tok in tokens:
        if tok not in seen:
            seen.add(tok)
            out.append(tok)
    return out


@dataclass(eq=False)
class ConnectivitySettings:
    """Configuration and input data for a connectivity computation.

    Attributes
    ----------
    methods : list of str
        Requested method identifiers (e.g. ``['COR', 'PLI']``).  Order of
        first appearance is kept and duplicates are dropped.  Unknown
        tokens are kept as given; the orchestrator decides how to treat
        them.
    data : np.ndarray
        Signal data of shape ``(n_trials, n_channels, n_times)``.  A 2D
        array ``(n_channels, n_times)`` is treated as a single trial.
    sfreq : float, optional
        Sampling frequency in Hz.  Defaults to 1000.
    window_type : str, optional
        Taper applied before spectral estimation.  ``'Hanning'`` (default)
        and ``'Ones'`` are the names offered by the settings form; any
        other name understood by :func:`scipy.signal.get_window` works.
    n_trials : int, optional
        Number of most recent trials to use.  Defaults to 10.
    trigger_type : str, optional
        Trigger token the trials were cut around.  Defaults to ``'1'``.
    freq_low, freq_high : float, optional
        Frequency band in Hz for spectral methods.  Defaults to 7-13 Hz.
    labels : list of str, optional
        Channel names.  Generated as ``ch0``, ``ch1``, ... when omitted.
    n_fft : int | None, optional
        FFT length.  Defaults to the number of samples per trial.
    trigger_types : list of str, optional
        Trigger tokens known to the acquisition side.
    intermediate : dict
        Cache filled by metric routines.  Not part of the configuration.
    """

    methods: List[str] = field(default_factory=lambda: list(DEFAULTS['methods']))
    data: np.ndarray = field(default_factory=lambda: np.zeros((0, 0, 0)))
    sfreq: float = 1000.0
    window_type: str = DEFAULTS['window_type']
    n_trials: int = DEFAULTS['n_trials']
    trigger_type: str = DEFAULTS['trigger_type']
    freq_low: float = DEFAULTS['freq_low']
    freq_high: float = DEFAULTS['freq_high']
    labels: List[str] = field(default_factory=list)
    n_fft: Optional[int] = None
    trigger_types: List[str] = field(default_factory=list)
    intermediate: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.methods, str):
            self.methods = [self.methods]
        self.methods = _unique(str(m) for m in self.methods)
        data = np.asarray(self.data, dtype=float)
        if data.ndim == 2:
            data = data[np.newaxis, ...]
        self.data = data
        if not self.labels and data.ndim == 3:
            self.labels = [f"ch{i}" for i in range(data.shape[1])]
        self.labels = list(self.labels)
        self.trigger_types = _unique(self.trigger_types)

    # -- construction -------------------------------------------------
    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> 'ConnectivitySettings':
        """Create settings from a plain mapping such as a parsed config file.

        Raises
        ------
        SettingsError
            If the mapping contains keys that are not settings fields.
        """
        names = {f.name for f in fields(cls) if f.name != 'intermediate'}
        unknown = sorted(set(mapping) - names)
        if unknown:
            raise SettingsError(f"Unknown settings keys: {', '.join(unknown)}")
        return cls(**dict(mapping))

    def copy(self) -> 'ConnectivitySettings':
        """Return an independent deep copy, cached intermediates included."""
        return copy.deepcopy(self)

    # -- accessors ----------------------------------------------------
    def has_method(self, token: str) -> bool:
        return str(token) in self.methods

    @property
    def freq_band(self) -> Tuple[float, float]:
        return (float(self.freq_low), float(self.freq_high))

    @property
    def n_channels(self) -> int:
        return self.data.shape[1] if self.data.ndim == 3 else 0

    @property
    def n_times(self) -> int:
        return self.data.shape[2] if self.data.ndim == 3 else 0

    def epochs(self) -> np.ndarray:
        """Return the last ``n_trials`` trials of ``data``.

        All trials are returned when fewer than ``n_trials`` are
        available.
        """
        n = max(int(self.n_trials), 1)
        return self.data[-n:]

    def add_trigger_types(self, tokens: Iterable[str]) -> None:
        """Register trigger tokens, ignoring ones already known."""
        self.trigger_types = _unique(list(self.trigger_types) + [str(t) for t in tokens])

    def set_number_trials(self, n_trials: int) -> None:
        """Change the trial count and drop cached intermediates."""
        if int(n_trials) != self.n_trials:
            self.n_trials = int(n_trials)
            self.intermediate.clear()

    # -- validation ---------------------------------------------------
    def validate(self) -> None:
        """Check the settings for consistency.

        Raises
        ------
        SettingsError
            If the trial count, sampling frequency, frequency band,
            data shape or labels are invalid.
        """
        if int(self.n_trials) < 1:
            raise SettingsError("n_trials must be a positive integer")
        if self.sfreq <= 0:
            raise SettingsError("sfreq must be positive")
        if self.freq_low < 0 or self.freq_high < 0:
            raise SettingsError("frequency band limits must be non-negative")
        if self.freq_low > self.freq_high:
            raise SettingsError("freq_low must not exceed freq_high")
        if self.data.ndim != 3:
            raise SettingsError("data must have shape (n_trials, n_channels, n_times)")
        if self.data.size == 0:
            raise SettingsError("data is empty")
        if len(self.labels) != self.n_channels:
            raise SettingsError("Number of labels must match number of channels")
        if self.n_fft is not None and self.n_fft < self.n_times:
            raise SettingsError("n_fft must be at least the number of samples per trial")


__all__ = [
    'ConnectivitySettings',
    'DEFAULTS',
]
