"""
Block Expander
Turns CIDR blocks into the host addresses they contain.
"""

import ipaddress
from itertools import chain, islice
from typing import Iterable, Iterator, List, Optional

from ..core.addresses import has_prefix_length


def parse_block(line: str) -> Optional[ipaddress.IPv4Network]:
    """
    Parse one IPv4 CIDR line.

    Host bits are masked off, so '10.0.0.7/30' becomes 10.0.0.4/30.
    Returns None for IPv6 input, bare addresses, netmask suffixes
    or anything else that does not parse.
    """
    if not line or ':' in line:
        return None
    line = line.strip()
    if not has_prefix_length(line):
        return None
    try:
        return ipaddress.IPv4Network(line, strict=False)
    except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError):
        return None


def iter_block_hosts(block: ipaddress.IPv4Network) -> Iterator[ipaddress.IPv4Address]:
    """
    Yield the usable hosts of a block in ascending order.

    Blocks holding more than two addresses lose their network and
    broadcast address; /31 and /32 are yielded whole.
    """
    first = int(block.network_address)
    last = int(block.broadcast_address)

    if block.num_addresses > 2:
        first += 1
        last -= 1

    for value in range(first, last + 1):
        yield ipaddress.IPv4Address(value)


def iter_candidates(lines: Iterable[str]) -> Iterator[ipaddress.IPv4Address]:
    """Lazily expand every parsable block, in input order"""
    blocks = (parse_block(line) for line in lines)
    return chain.from_iterable(iter_block_hosts(b) for b in blocks if b is not None)


def expand_blocks(lines: Iterable[str], limit: Optional[int] = None) -> List[ipaddress.IPv4Address]:
    """
    Build the candidate address list.

    Args:
        lines: Raw block strings
        limit: Keep only the first N candidates (0 or None means all)
    """
    candidates = iter_candidates(lines)
    if limit:
        candidates = islice(candidates, limit)
    return list(candidates)
