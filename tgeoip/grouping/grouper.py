"""
Country Grouper
Buckets reachable addresses by the tag a lookup returns for them.
Addresses without a tag are dropped.
"""

import ipaddress
from collections import defaultdict
from typing import Callable, Dict, Iterable, Optional, Set

Lookup = Callable[[ipaddress.IPv4Address], Optional[str]]


def group_by_tag(addresses: Iterable[ipaddress.IPv4Address], lookup: Lookup) -> Dict[str, Set[ipaddress.IPv4Address]]:
    """Group addresses by lookup result, skipping misses and empty tags"""
    buckets = defaultdict(set)
    for address in addresses:
        tag = lookup(address)
        if tag:
            buckets[tag].add(address)
    return dict(buckets)


class CountryGrouper:
    """
    Groups addresses by country and keeps track of what was dropped.
    """

    def __init__(self, lookup: Lookup):
        self.lookup = lookup
        self.buckets: Dict[str, Set[ipaddress.IPv4Address]] = {}
        self.unmatched = 0

    def process(self, addresses: Iterable[ipaddress.IPv4Address]) -> Dict[str, Set[ipaddress.IPv4Address]]:
        """
        Group addresses.

        Args:
            addresses: Reachable addresses

        Returns:
            Mapping of country code -> addresses
        """
        addresses = list(addresses)
        self.buckets = group_by_tag(addresses, self.lookup)

        grouped = sum(len(members) for members in self.buckets.values())
        self.unmatched = len(set(addresses)) - grouped

        self._print_summary()
        return self.buckets

    def _print_summary(self):
        print(f"[GEOIP] Countries: {len(self.buckets)}")
        if self.unmatched:
            print(f"[GEOIP] Without country: {self.unmatched}")

        largest = sorted(self.buckets.items(), key=lambda x: len(x[1]), reverse=True)
        for tag, members in largest[:5]:
            print(f"    {tag}: {len(members)} IPs")
