"""Tests for the multi-method orchestration in :mod:`connlib.connectivity`."""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, List

import numpy as np
import pytest

from connlib import metrics
from connlib.connectivity import Connectivity, calculate, calculate_multi_methods
from connlib.methods import ENUMERATION_ORDER, ConnectivityMethod
from connlib.metrics.spectral import CACHE_KEY
from connlib.network import Network
from connlib.registry import MetricRegistry
from connlib.settings import ConnectivitySettings

WAIT = 10.0


def _trials(n_trials: int = 6, n_channels: int = 3, n_times: int = 100, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n_trials, n_channels, n_times))


def _settings(methods: List[str], data: np.ndarray = None) -> ConnectivitySettings:
    return ConnectivitySettings(
        methods=methods,
        data=_trials() if data is None else data,
        sfreq=100.0,
        freq_low=7.0,
        freq_high=13.0,
    )


def _recording_registry(calls: Dict[str, str], unsafe=('COH',)) -> MetricRegistry:
    """Registry whose routines record the thread they ran on."""
    registry = MetricRegistry()
    for method in ConnectivityMethod:
        def routine(settings, name=method.value):
            calls[name] = threading.current_thread().name
            return Network.from_matrix(np.eye(settings.n_channels), settings.labels, name)
        registry.register(method, routine, concurrent_safe=method.value not in unsafe)
    return registry


# -- single dispatch -------------------------------------------------------
@pytest.mark.parametrize('method', [m.value for m in ConnectivityMethod])
def test_single_dispatch_matches_direct_call(method):
    settings = _settings([method])
    expected = Connectivity().registry.resolve(method).function(settings.copy())
    network = Connectivity().calculate(settings)
    assert network.method == method
    assert np.allclose(network.matrix, expected.matrix)


def test_single_dispatch_picks_highest_priority():
    calls: Dict[str, str] = {}
    orchestrator = Connectivity(registry=_recording_registry(calls))
    network = orchestrator.calculate(_settings(['DSWPLI', 'PLI', 'XCOR']))
    assert network.method == 'XCOR'
    assert list(calls) == ['XCOR']
    assert calls['XCOR'] == threading.current_thread().name


def test_single_dispatch_unknown_method_returns_sentinel(caplog):
    with caplog.at_level(logging.WARNING, logger='connlib'):
        network = Connectivity().calculate(_settings(['GRANGER', 'cor']))
    assert network.is_empty
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert 'unknown' in warnings[0].getMessage()


def test_module_level_calculate():
    assert calculate(_settings(['COR'])).method == 'COR'
    assert calculate(_settings([])).is_empty


# -- multi-method ------------------------------------------------------------
def test_multi_methods_follow_enumeration_order():
    settings = _settings(['PLI', 'COR'], data=_trials(n_trials=1, n_channels=2, n_times=100))
    networks = Connectivity().calculate_multi_methods(settings)
    assert len(networks) == 2
    assert [net.method for net in networks] == ['COR', 'PLI']
    assert np.allclose(networks[0].matrix, metrics.compute_correlation(settings.copy()).matrix)


def test_multi_methods_all_methods():
    requested = ['DSWPLI', 'COR', 'PLV', 'COH', 'IMAGCOH', 'XCOR', 'USPLI', 'PLI', 'WPLI']
    networks = calculate_multi_methods(_settings(requested))
    assert [net.method for net in networks] == [m.value for m in ENUMERATION_ORDER]


def test_multi_methods_skip_unknown_tokens():
    networks = Connectivity().calculate_multi_methods(_settings(['bogus', 'PLV', 'plv']))
    assert [net.method for net in networks] == ['PLV']


@pytest.mark.parametrize('methods', [[], ['bogus'], ['cor', 'Pli']])
def test_multi_methods_without_recognised_methods(methods):
    orchestrator = Connectivity()
    assert orchestrator.calculate_multi_methods(_settings(methods)) == []
    assert orchestrator.last_timings == []


def test_calculate_by_method_keys():
    results = Connectivity().calculate_by_method(_settings(['COH', 'WPLI', 'COR']))
    assert list(results) == [ConnectivityMethod.WPLI, ConnectivityMethod.COR, ConnectivityMethod.COH]
    assert all(net.method == method.value for method, net in results.items())


def test_unsafe_method_runs_on_calling_thread():
    calls: Dict[str, str] = {}
    orchestrator = Connectivity(registry=_recording_registry(calls))
    networks = orchestrator.calculate_multi_methods(_settings(['COH', 'WPLI']))
    assert [net.method for net in networks] == ['WPLI', 'COH']
    assert calls['COH'] == threading.current_thread().name
    assert calls['WPLI'] != threading.current_thread().name
    assert calls['WPLI'].startswith('connlib')


def test_shipped_coherence_and_wpli_together():
    settings = _settings(['COH', 'WPLI'])
    networks = Connectivity().calculate_multi_methods(settings)
    assert [net.method for net in networks] == ['WPLI', 'COH']
    assert np.allclose(networks[1].matrix, metrics.compute_coherence(settings.copy()).matrix)
    assert CACHE_KEY in settings.intermediate


def test_routines_receive_copies():
    seen: List[ConnectivitySettings] = []
    registry = MetricRegistry()

    def routine(settings):
        seen.append(settings)
        settings.intermediate['touched'] = True
        return Network.from_matrix(np.zeros((3, 3)), settings.labels, 'X')

    registry.register('COR', routine)
    registry.register('COH', routine, concurrent_safe=False)
    settings = _settings(['COR', 'COH'])
    Connectivity(registry=registry).calculate_multi_methods(settings)
    assert len(seen) == 2
    cor_settings, coh_settings = seen
    assert cor_settings is not settings
    assert coh_settings is settings
    assert settings.intermediate == {'touched': True}
    assert 'touched' in cor_settings.intermediate


def test_unsafe_method_runs_alone():
    lock = threading.Lock()
    running: set = set()
    overlap: Dict[str, set] = {}
    order: List[str] = []
    registry = MetricRegistry()

    def tracked(name, delay):
        def routine(settings):
            with lock:
                running.add(name)
            time.sleep(delay)
            with lock:
                running.discard(name)
                order.append(name)
            return Network.from_matrix(np.zeros((3, 3)), settings.labels, name)
        return routine

    def exclusive(settings):
        with lock:
            overlap['COH'] = set(running)
            order.append('COH')
        return Network.from_matrix(np.zeros((3, 3)), settings.labels, 'COH')

    registry.register('WPLI', tracked('WPLI', 0.2))
    registry.register('IMAGCOH', tracked('IMAGCOH', 0.2))
    registry.register('PLV', tracked('PLV', 0.2))
    registry.register('COH', exclusive, concurrent_safe=False)
    networks = Connectivity(registry=registry).calculate_multi_methods(
        _settings(['PLV', 'IMAGCOH', 'COH', 'WPLI'])
    )
    assert [net.method for net in networks] == ['WPLI', 'COH', 'IMAGCOH', 'PLV']
    assert overlap['COH'] == set()
    assert order.index('WPLI') < order.index('COH')
    assert order.index('COH') < order.index('IMAGCOH')
    assert order.index('COH') < order.index('PLV')


def test_isolation_from_mutation_after_submission():
    started = threading.Event()
    release = threading.Event()
    registry = MetricRegistry()

    def slow_sum(settings):
        started.set()
        assert release.wait(WAIT)
        total = settings.data.sum()
        return Network.from_matrix(np.full((3, 3), total), settings.labels, 'COR')

    registry.register('COR', slow_sum)
    settings = _settings(['COR'])
    expected = settings.data.sum()
    out: Dict[str, List[Network]] = {}
    worker = threading.Thread(
        target=lambda: out.setdefault('nets', Connectivity(registry=registry).calculate_multi_methods(settings))
    )
    worker.start()
    assert started.wait(WAIT)
    settings.data[:] = 0.0
    release.set()
    worker.join(WAIT)
    assert out['nets'][0].matrix[0, 1] == pytest.approx(expected)


def test_idempotent_on_value_equal_settings():
    requested = ['COR', 'XCOR', 'PLI', 'COH', 'IMAGCOH', 'PLV', 'WPLI', 'USPLI', 'DSWPLI']
    first = Connectivity().calculate_multi_methods(_settings(requested, data=_trials(seed=3)))
    second = Connectivity().calculate_multi_methods(_settings(requested, data=_trials(seed=3)))
    assert [n.method for n in first] == [n.method for n in second]
    for a, b in zip(first, second):
        assert np.array_equal(a.matrix, b.matrix)


def test_sequential_pool_gives_same_results():
    requested = ['PLV', 'COR', 'WPLI']
    parallel = Connectivity().calculate_multi_methods(_settings(requested))
    serial = Connectivity(max_workers=1).calculate_multi_methods(_settings(requested))
    for a, b in zip(parallel, serial):
        assert a.method == b.method
        assert np.array_equal(a.matrix, b.matrix)


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        Connectivity(max_workers=0)


# -- timing and failures -----------------------------------------------------
def test_timing_logged_per_method(caplog):
    orchestrator = Connectivity()
    with caplog.at_level(logging.INFO, logger='connlib'):
        orchestrator.calculate_multi_methods(_settings(['COR', 'WPLI', 'COH']))
    messages = [r.getMessage() for r in caplog.records if r.name == 'connlib.diagnostics']
    assert len(messages) == 3
    assert messages[0].startswith('Calculated WPLI in')
    assert messages[-1].endswith('msecs.')
    assert [t.method for t in orchestrator.last_timings] == ['WPLI', 'COR', 'COH']
    assert all(t.elapsed_ms >= 0.0 for t in orchestrator.last_timings)


def test_failure_propagates_without_partial_results(caplog):
    registry = MetricRegistry()
    registry.register('WPLI', lambda s: Network.from_matrix(np.zeros((3, 3)), s.labels, 'WPLI'))

    def broken(settings):
        raise RuntimeError('diverged')

    registry.register('COR', broken)
    registry.register('COH', lambda s: Network.from_matrix(np.zeros((3, 3)), s.labels, 'COH'), concurrent_safe=False)
    orchestrator = Connectivity(registry=registry)
    with caplog.at_level(logging.INFO, logger='connlib'):
        with pytest.raises(RuntimeError, match='diverged'):
            orchestrator.calculate_multi_methods(_settings(['COR', 'WPLI', 'COH']))
    messages = [r.getMessage() for r in caplog.records if r.name == 'connlib.diagnostics']
    assert not any('COR' in m for m in messages)
    assert not any('COH' in m for m in messages)
    assert orchestrator.last_timings == []


def test_failure_in_unsafe_method_propagates():
    registry = MetricRegistry()

    def broken(settings):
        raise ValueError('bad dimensions')

    registry.register('COH', broken, concurrent_safe=False)
    with pytest.raises(ValueError, match='bad dimensions'):
        Connectivity(registry=registry).calculate_multi_methods(_settings(['COH']))


def test_failure_on_single_dispatch_propagates():
    settings = _settings(['USPLI'], data=_trials(n_trials=1))
    with pytest.raises(ValueError):
        Connectivity().calculate(settings)
