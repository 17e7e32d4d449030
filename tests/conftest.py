import ipaddress
import threading

import pytest

from tgeoip.probing import BaseCheck


class FakeCheck(BaseCheck):
    """
    Deterministic check. `plan` maps an address string to the outcomes of
    its successive attempts; missing addresses always fail.
    """

    def __init__(self, name, plan=None, default=False):
        self.name = name
        self.plan = {k: list(v) for k, v in (plan or {}).items()}
        self.default = default
        self.calls = {}
        self._lock = threading.Lock()

    def attempt(self, address):
        key = str(address)
        with self._lock:
            n = self.calls.get(key, 0)
            self.calls[key] = n + 1
        outcomes = self.plan.get(key)
        if outcomes is None:
            return self.default
        return outcomes[min(n, len(outcomes) - 1)]


def ip(value):
    return ipaddress.IPv4Address(value)


@pytest.fixture
def probe_config():
    return {
        'strategy': 'tcp',
        'workers': 8,
        'attempts': 3,
        'retry_delay': 0,
        'progress_every': 0
    }
