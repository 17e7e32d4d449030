"""
Collapses address sets into minimal aligned CIDR prefixes.
"""

from .aggregator import merge_ranges, range_to_prefixes, aggregate, aggregate_strings

__all__ = [
    'merge_ranges',
    'range_to_prefixes',
    'aggregate',
    'aggregate_strings'
]
