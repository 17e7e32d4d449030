"""
Address helpers
Parsing and numeric ordering for IPv4 address and CIDR strings.
"""

import ipaddress
from functools import cmp_to_key
from typing import Iterable, List, Optional, Union


def parse_address(value: Union[str, int, ipaddress.IPv4Address]) -> Optional[ipaddress.IPv4Address]:
    """Parse an IPv4 address, returning None instead of raising"""
    if isinstance(value, ipaddress.IPv4Address):
        return value
    try:
        if isinstance(value, str):
            value = value.strip()
        return ipaddress.IPv4Address(value)
    except (ipaddress.AddressValueError, ValueError, TypeError):
        return None


def has_prefix_length(value: str) -> bool:
    """True when value ends in exactly one '/n' with n a decimal 0-32"""
    parts = value.split('/')
    if len(parts) != 2:
        return False
    length = parts[1]
    return length.isascii() and length.isdigit() and int(length) <= 32


def parse_prefix(value: str) -> Optional[ipaddress.IPv4Interface]:
    """
    Parse an 'a.b.c.d/n' string, returning None instead of raising.

    Host bits are kept so the written base address is compared as is.
    Netmask suffixes such as '/255.0.0.0' are rejected.
    """
    if not isinstance(value, str) or not has_prefix_length(value.strip()):
        return None
    try:
        return ipaddress.IPv4Interface(value.strip())
    except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError):
        return None


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def _compare_ips(a: str, b: str) -> int:
    ip_a = parse_address(a)
    ip_b = parse_address(b)
    if ip_a is None or ip_b is None:
        return _compare(a, b)
    return _compare(int(ip_a), int(ip_b))


def _compare_cidrs(a: str, b: str) -> int:
    net_a = parse_prefix(a)
    net_b = parse_prefix(b)
    if net_a is None or net_b is None:
        return _compare(a, b)
    by_base = _compare(int(net_a.ip), int(net_b.ip))
    if by_base:
        return by_base
    return _compare(net_a.network.prefixlen, net_b.network.prefixlen)


def sort_ip_strings(ips: Iterable[str]) -> List[str]:
    """
    Sort IP address strings numerically.

    Falls back to string comparison for any pair where one side
    does not parse.
    """
    return sorted(ips, key=cmp_to_key(_compare_ips))


def sort_cidr_strings(cidrs: Iterable[str]) -> List[str]:
    """
    Sort CIDR strings by base address, then by prefix length
    (coarser prefixes first at the same base).
    """
    return sorted(cidrs, key=cmp_to_key(_compare_cidrs))
