"""
ICMP echo check
Wraps the system ping binary, one echo request per attempt.
"""

import ipaddress
import subprocess

from .base_check import BaseCheck


class ICMPCheck(BaseCheck):
    """Succeeds when `ping -c 1` exits cleanly within the bound"""

    name = "icmp"

    def __init__(self, timeout: float = 3, wait: float = 2, ping_path: str = 'ping'):
        """
        Args:
            timeout: Hard bound on the whole ping process
            wait: Seconds ping waits for the reply (-W)
            ping_path: ping binary to run
        """
        self.timeout = timeout
        self.wait = wait
        self.ping_path = ping_path

    def attempt(self, address: ipaddress.IPv4Address) -> bool:
        return self.ping(address, self.timeout)

    def ping(self, address: ipaddress.IPv4Address, timeout: float) -> bool:
        cmd = [self.ping_path, '-c', '1', '-W', _format_seconds(self.wait), str(address)]
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            return False
        except OSError:
            # Missing binary or no permission
            return False
        return result.returncode == 0

    def describe(self) -> str:
        return f"ICMP ping ({self.timeout}s bound, {self.wait}s wait)"


def _format_seconds(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
