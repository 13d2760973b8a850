"""
connlib.metrics
===============

Reference implementations of the connectivity measures known to the
orchestrator.  Every routine takes a
:class:`~connlib.settings.ConnectivitySettings` and returns a
:class:`~connlib.network.Network` tagged with its method identifier.

Modules
-------

spectral
    Tapered cross-spectral estimation shared by the frequency domain
    measures.  Results are cached on the settings object.

correlation
    ``COR`` and ``XCOR``.

coherence
    ``COH`` and ``IMAGCOH``.

phase
    ``PLI``, ``PLV``, ``WPLI``, ``USPLI`` and ``DSWPLI``.
"""

from .correlation import compute_correlation, compute_cross_correlation
from .coherence import compute_coherence, compute_imag_coherence
from .phase import compute_pli, compute_plv, compute_wpli, compute_uspli, compute_dswpli
from .spectral import CrossSpectra, cross_spectra

__all__ = [
    'compute_correlation',
    'compute_cross_correlation',
    'compute_coherence',
    'compute_imag_coherence',
    'compute_pli',
    'compute_plv',
    'compute_wpli',
    'compute_uspli',
    'compute_dswpli',
    'CrossSpectra',
    'cross_spectra',
]
