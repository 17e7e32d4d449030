"""
Attribution of reachable addresses to countries.
"""

from .geoip_lookup import MMDBCountryLookup
from .grouper import CountryGrouper, group_by_tag

__all__ = [
    'MMDBCountryLookup',
    'CountryGrouper',
    'group_by_tag'
]
