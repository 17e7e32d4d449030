"""
Block list loading and expansion to host addresses.
"""

from .source import load_cidrs, filter_ipv4_lines
from .expander import parse_block, iter_block_hosts, iter_candidates, expand_blocks

__all__ = [
    'load_cidrs',
    'filter_ipv4_lines',
    'parse_block',
    'iter_block_hosts',
    'iter_candidates',
    'expand_blocks'
]
