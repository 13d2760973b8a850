"""
connlib.network
===============

This module defines :class:`Network`, the result of one connectivity
method applied to a set of channels.  A network stores the symmetric
connectivity matrix along with the channel labels, the method that
produced it and the frequency band it was computed for.

A ``Network`` constructed without arguments is the empty sentinel
returned when no computation was performed (for example when the
requested method is unknown).  It is not a valid zero-weighted network
and callers should test :attr:`Network.is_empty` before using it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


@dataclass(eq=False)
class Network:
    """Encapsulate a connectivity matrix and its channel labels.

    Parameters
    ----------
    matrix : np.ndarray
        2D array of shape (N, N) holding the connectivity between N
        channels.  Symmetric with zeros on the diagonal.
    labels : Sequence[str]
        Channel names for the rows/columns of ``matrix``.
    method : str | None
        Identifier of the method that produced the matrix, e.g.
        ``'COR'``.  ``None`` for the empty sentinel.
    freq_band : tuple of float | None
        ``(low, high)`` band in Hz for spectral methods.
    """

    matrix: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    labels: List[str] = field(default_factory=list)
    method: Optional[str] = None
    freq_band: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        self.matrix = np.asarray(self.matrix, dtype=float)
        if self.matrix.ndim != 2 or self.matrix.shape[0] != self.matrix.shape[1]:
            raise ValueError("matrix must be a square 2D array")
        self.labels = list(self.labels)
        if self.labels and len(self.labels) != self.matrix.shape[0]:
            raise ValueError("Number of labels must match the matrix size")
        if self.method is not None:
            self.method = str(self.method)

    @classmethod
    def from_matrix(
        cls,
        matrix: np.ndarray,
        labels: Sequence[str],
        method: str,
        freq_band: Optional[Tuple[float, float]] = None,
    ) -> 'Network':
        """Build a network from a raw pairwise matrix.

        NaNs (zero-variance channels) are replaced by zero, the matrix
        is symmetrised and the diagonal is cleared.
        """
        mat = np.nan_to_num(np.asarray(matrix, dtype=float), nan=0.0)
        mat = (mat + mat.T) / 2.0
        np.fill_diagonal(mat, 0.0)
        return cls(matrix=mat, labels=list(labels), method=method, freq_band=freq_band)

    @property
    def is_empty(self) -> bool:
        """True for the sentinel returned when nothing was computed."""
        return self.method is None and self.matrix.size == 0

    @property
    def n_nodes(self) -> int:
        return self.matrix.shape[0]

    def copy(self) -> 'Network':
        """Return a deep copy of the network."""
        band = tuple(self.freq_band) if self.freq_band is not None else None
        return Network(self.matrix.copy(), list(self.labels), self.method, band)

    def threshold(self, value: float) -> 'Network':
        """Return a copy with edges weaker than ``value`` removed.

        Edges are compared by absolute value so negative correlations
        are kept when strong enough.
        """
        net = self.copy()
        net.matrix[np.abs(net.matrix) < value] = 0.0
        return net

    def degrees(self) -> np.ndarray:
        """Weighted degree (strength) of every node."""
        return np.sum(np.abs(self.matrix), axis=1)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the matrix as a labelled :class:`pandas.DataFrame`."""
        labels = self.labels or [str(i) for i in range(self.n_nodes)]
        return pd.DataFrame(self.matrix, index=labels, columns=labels)


__all__ = [
    'Network',
]
