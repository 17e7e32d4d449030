"""
TGeoIP - reachable Telegram IPs grouped by country
"""

__version__ = '1.0.0'
