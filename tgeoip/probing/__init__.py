"""
Reachability probing with bounded concurrency.
"""

from .base_check import BaseCheck
from .tcp_check import TCPCheck
from .icmp_check import ICMPCheck
from .prober import RetryPolicy, ReachabilityProber

__all__ = [
    'BaseCheck',
    'TCPCheck',
    'ICMPCheck',
    'RetryPolicy',
    'ReachabilityProber'
]
