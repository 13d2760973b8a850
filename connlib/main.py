"""
main
====

Command line driver showing how the components of ``connlib`` fit
together.  It is not meant to be a full application but a blueprint for
your own scripts or notebooks:

1. **Load trials** from a ``.npy`` file holding an array of shape
   ``(n_trials, n_channels, n_times)`` or ``(n_channels, n_times)``.
2. **Build settings** with :class:`connlib.settings.ConnectivitySettings`
   and validate them.
3. **Compute connectivity** with :class:`connlib.connectivity.Connectivity`,
   either for a single method (``--single``) or for every requested
   method.
4. **Save** the resulting matrices to an ``.npz`` archive keyed by method.

Example
-------
python -m connlib.main trials.npy --methods PLI COR --sfreq 250 --freq-low 8 --freq-high 12

"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .connectivity import Connectivity
from .errors import ConnectivityError
from .network import Network
from .settings import DEFAULTS, ConnectivitySettings

logger = logging.getLogger(__name__)


def build_settings(args: argparse.Namespace) -> ConnectivitySettings:
    data = np.load(args.data)
    settings = ConnectivitySettings(
        methods=args.methods,
        data=data,
        sfreq=args.sfreq,
        window_type=args.window,
        n_trials=args.trials,
        trigger_type=args.trigger,
        freq_low=args.freq_low,
        freq_high=args.freq_high,
    )
    settings.validate()
    return settings


def run(settings: ConnectivitySettings, single: bool = False, max_workers: Optional[int] = None) -> List[Network]:
    orchestrator = Connectivity(max_workers=max_workers)
    if single:
        network = orchestrator.calculate(settings)
        return [] if network.is_empty else [network]
    return orchestrator.calculate_multi_methods(settings)


def save_networks(networks: List[Network], path: Path) -> None:
    arrays = {net.method: net.matrix for net in networks}
    np.savez(path, labels=np.asarray(networks[0].labels if networks else []), **arrays)


def parse_args(args: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute connectivity networks from trial data")
    parser.add_argument('data', type=str, help='Path to a .npy array of trials')
    parser.add_argument(
        '--methods', nargs='+', default=list(DEFAULTS['methods']),
        help='Connectivity methods (COR XCOR PLI COH IMAGCOH PLV WPLI USPLI DSWPLI)')
    parser.add_argument('--sfreq', type=float, default=1000.0, help='Sampling frequency in Hz')
    parser.add_argument('--window', type=str, default=DEFAULTS['window_type'], help='Window type (Hanning, Ones)')
    parser.add_argument('--trials', type=int, default=DEFAULTS['n_trials'], help='Number of trials to use')
    parser.add_argument('--trigger', type=str, default=DEFAULTS['trigger_type'], help='Trigger type')
    parser.add_argument('--freq-low', type=float, default=DEFAULTS['freq_low'], help='Lower band limit in Hz')
    parser.add_argument('--freq-high', type=float, default=DEFAULTS['freq_high'], help='Upper band limit in Hz')
    parser.add_argument('--single', action='store_true', help='Only compute the highest priority method')
    parser.add_argument('--workers', type=int, default=None, help='Thread pool size')
    parser.add_argument('--output', type=str, default=None, help='Write matrices to this .npz file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log timing information')
    return parser.parse_args(args)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv or [])
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        settings = build_settings(args)
        networks = run(settings, single=args.single, max_workers=args.workers)
    except (ConnectivityError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    if not networks:
        print("No network computed")
        return 1
    for net in networks:
        print(f"{net.method}: {net.n_nodes} nodes, mean strength {net.degrees().mean():.4f}")
    if args.output:
        save_networks(networks, Path(args.output))
        print(f"Networks written to {args.output}")
    return 0


def cli() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == '__main__':
    cli()
