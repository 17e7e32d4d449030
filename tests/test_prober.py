import threading
import time

import pytest

from tgeoip.probing import BaseCheck, ReachabilityProber, RetryPolicy
from tgeoip.probing import prober as prober_module

from conftest import FakeCheck, ip


def test_tcp_success_on_third_attempt(probe_config):
    tcp = FakeCheck('tcp', {'10.0.0.1': [False, False, True]})
    prober = ReachabilityProber(probe_config, tcp_check=tcp)

    assert prober.find_reachable([ip('10.0.0.1')]) == {ip('10.0.0.1')}
    assert tcp.calls['10.0.0.1'] == 3


def test_tcp_gives_up_after_three_attempts(probe_config):
    tcp = FakeCheck('tcp')
    prober = ReachabilityProber(probe_config, tcp_check=tcp)

    assert prober.probe([ip('10.0.0.2')]) == {ip('10.0.0.2'): False}
    assert tcp.calls['10.0.0.2'] == 3


def test_icmp_strategy_uses_icmp_only(probe_config):
    probe_config['strategy'] = 'icmp'
    icmp = FakeCheck('icmp', {'10.0.0.1': [True]})
    tcp = FakeCheck('tcp', default=True)
    prober = ReachabilityProber(probe_config, tcp_check=tcp, icmp_check=icmp)

    assert prober.find_reachable([ip('10.0.0.1'), ip('10.0.0.2')]) == {ip('10.0.0.1')}
    assert tcp.calls == {}


COMBOS = {
    # address: (icmp passes, tcp passes)
    '10.1.0.1': (True, True),
    '10.1.0.2': (True, False),
    '10.1.0.3': (False, True),
    '10.1.0.4': (False, False),
}


def combined_prober(probe_config, mode):
    probe_config.update({'strategy': 'combined', 'mode': mode})
    icmp = FakeCheck('icmp', {a: [ok] for a, (ok, _) in COMBOS.items()})
    tcp = FakeCheck('tcp', {a: [ok] for a, (_, ok) in COMBOS.items()})
    return ReachabilityProber(probe_config, tcp_check=tcp, icmp_check=icmp), icmp, tcp


@pytest.mark.parametrize('mode,expected', [
    ('either', {'10.1.0.1', '10.1.0.2', '10.1.0.3'}),
    (1, {'10.1.0.1', '10.1.0.2', '10.1.0.3'}),
    ('both', {'10.1.0.1'}),
    (2, {'10.1.0.1'}),
])
def test_combined_modes(probe_config, mode, expected):
    prober, _, _ = combined_prober(probe_config, mode)
    reachable = prober.find_reachable(ip(a) for a in COMBOS)
    assert {str(a) for a in reachable} == expected


def test_combined_runs_both_sequences_with_full_budgets(probe_config):
    prober, icmp, tcp = combined_prober(probe_config, 'either')
    prober.find_reachable(ip(a) for a in COMBOS)

    # A passing check stops after one attempt, a failing one uses all three
    assert icmp.calls == {'10.1.0.1': 1, '10.1.0.2': 1, '10.1.0.3': 3, '10.1.0.4': 3}
    assert tcp.calls == {'10.1.0.1': 1, '10.1.0.2': 3, '10.1.0.3': 1, '10.1.0.4': 3}


def test_combined_uses_looser_timeouts():
    prober = ReachabilityProber({'strategy': 'combined', 'mode': 'both'})
    assert prober.tcp_check.timeout == 5
    assert prober.icmp_check.timeout == 5
    assert prober.icmp_check.wait == 3


def test_solo_defaults():
    prober = ReachabilityProber({})
    assert prober.workers == 200
    assert prober.tcp_check.port == 443
    assert prober.tcp_check.timeout == 3
    assert prober.retry.attempts == 3
    assert prober.retry.retry_delay == 0.2

    icmp = ReachabilityProber({'strategy': 'icmp'}).icmp_check
    assert (icmp.timeout, icmp.wait) == (3, 2)


@pytest.mark.parametrize('config', [
    {'strategy': 'udp'},
    {'strategy': 'combined', 'mode': 3},
    {'strategy': 'combined', 'mode': 'sometimes'},
    {'workers': 0},
])
def test_invalid_configuration(config):
    with pytest.raises(ValueError):
        ReachabilityProber(config)


def test_result_independent_of_worker_count(probe_config):
    addresses = [ip(f'10.2.{i // 256}.{i % 256}') for i in range(600)]
    plan = {str(a): [i % 3 == 0, i % 5 == 0, i % 7 == 0] for i, a in enumerate(addresses)}

    results = []
    for workers in (1, 50, 200):
        probe_config['workers'] = workers
        prober = ReachabilityProber(probe_config, tcp_check=FakeCheck('tcp', plan))
        results.append(prober.find_reachable(addresses))

    assert results[0] == results[1] == results[2]
    assert len(results[0]) > 0


class SlowCheck(BaseCheck):
    name = "slow"

    def __init__(self):
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def attempt(self, address):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.01)
        with self._lock:
            self.active -= 1
        return True


def test_concurrency_is_bounded(probe_config):
    probe_config['workers'] = 4
    check = SlowCheck()
    prober = ReachabilityProber(probe_config, tcp_check=check)

    addresses = [ip(f'10.3.0.{i}') for i in range(40)]
    assert prober.find_reachable(addresses) == set(addresses)
    assert 1 <= check.peak <= 4


def test_duplicates_are_probed_once(probe_config):
    tcp = FakeCheck('tcp', default=True)
    prober = ReachabilityProber(probe_config, tcp_check=tcp)

    outcomes = prober.probe([ip('10.0.0.1'), ip('10.0.0.1'), ip('10.0.0.2')])
    assert len(outcomes) == 2
    assert tcp.calls == {'10.0.0.1': 1, '10.0.0.2': 1}


def test_empty_input(probe_config):
    assert ReachabilityProber(probe_config, tcp_check=FakeCheck('tcp')).probe([]) == {}


class BrokenCheck(BaseCheck):
    def attempt(self, address):
        raise RuntimeError("boom")


def test_failing_worker_counts_as_unreachable(probe_config):
    prober = ReachabilityProber(probe_config, tcp_check=BrokenCheck())
    assert prober.probe([ip('10.0.0.1')]) == {ip('10.0.0.1'): False}


def test_retry_pauses_between_attempts(monkeypatch):
    sleeps = []
    monkeypatch.setattr(prober_module.time, 'sleep', sleeps.append)

    policy = RetryPolicy(attempts=3, retry_delay=0.2)
    assert policy.run(FakeCheck('tcp'), ip('10.0.0.1')) is False
    assert sleeps == [0.2, 0.2]

    sleeps.clear()
    assert policy.run(FakeCheck('tcp', {'10.0.0.1': [False, True]}), ip('10.0.0.1')) is True
    assert sleeps == [0.2]
