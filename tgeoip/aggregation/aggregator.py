"""
Range Aggregator
Merges a set of IPv4 addresses into the smallest list of CIDR prefixes.

Addresses are deduplicated and sorted, joined into contiguous ranges,
and each range is cut greedily: at every position take the largest
block the position is aligned to, shrunk until it fits the range.
"""

import ipaddress
from typing import Iterable, List, Tuple, Union

from ..core.addresses import parse_address

ADDRESS_BITS = 32

AddressLike = Union[ipaddress.IPv4Address, int, str]


def _trailing_zeros(value: int) -> int:
    if value == 0:
        return ADDRESS_BITS
    return min((value & -value).bit_length() - 1, ADDRESS_BITS)


def merge_ranges(values: Iterable[int]) -> List[Tuple[int, int]]:
    """Sort, deduplicate and join integers into closed [lo, hi] runs"""
    ordered = sorted(set(values))
    if not ordered:
        return []

    ranges = []
    lo = hi = ordered[0]
    for value in ordered[1:]:
        if value == hi + 1:
            hi = value
        else:
            ranges.append((lo, hi))
            lo = hi = value
    ranges.append((lo, hi))
    return ranges


def range_to_prefixes(lo: int, hi: int) -> List[ipaddress.IPv4Network]:
    """Decompose the closed range [lo, hi] into aligned prefixes"""
    prefixes = []
    cur = lo
    while cur <= hi:
        size_bits = _trailing_zeros(cur)
        while size_bits > 0 and cur + (1 << size_bits) - 1 > hi:
            size_bits -= 1
        prefixes.append(ipaddress.IPv4Network((cur, ADDRESS_BITS - size_bits)))
        cur += 1 << size_bits
    return prefixes


def aggregate(addresses: Iterable[AddressLike]) -> List[ipaddress.IPv4Network]:
    """
    Minimal prefix cover of an address set.

    Items may be IPv4Address objects, integers or strings; strings that
    do not parse are skipped. An empty input gives an empty list.
    """
    values = []
    for item in addresses:
        address = parse_address(item)
        if address is not None:
            values.append(int(address))

    prefixes = []
    for lo, hi in merge_ranges(values):
        prefixes.extend(range_to_prefixes(lo, hi))
    return prefixes


def aggregate_strings(lines: Iterable[str]) -> List[str]:
    """aggregate() for text input and output"""
    return [str(prefix) for prefix in aggregate(lines)]
