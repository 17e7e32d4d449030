"""
Base class for reachability checks
A check performs exactly one attempt against one address.
"""

import ipaddress
from abc import ABC, abstractmethod


class BaseCheck(ABC):
    """Abstract base class for single-attempt probes"""

    name = "base_check"

    @abstractmethod
    def attempt(self, address: ipaddress.IPv4Address) -> bool:
        """
        Run one probe attempt.

        Transport errors must be reported as False, never raised.
        """
        pass

    def describe(self) -> str:
        return self.name
