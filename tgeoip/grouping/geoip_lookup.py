"""
GeoIP Lookup
Maps an address to its country code using an MMDB database
(ipinfo lite layout by default).
"""

import ipaddress
from pathlib import Path
from typing import Optional

import maxminddb


class MMDBCountryLookup:
    """Reads a single string field from MMDB records"""

    def __init__(self, db_path: str, field: str = 'country_code'):
        self.db_path = Path(db_path)
        self.field = field

        if not self.db_path.exists():
            raise FileNotFoundError(f"GeoIP database not found: {self.db_path}")

        try:
            self.reader = maxminddb.open_database(str(self.db_path))
        except maxminddb.InvalidDatabaseError as e:
            raise RuntimeError(f"Cannot open MMDB file {self.db_path}: {e}")

        print(f"[GEOIP] Loaded database: {self.db_path}")

    def __call__(self, address: ipaddress.IPv4Address) -> Optional[str]:
        return self.lookup(address)

    def lookup(self, address: ipaddress.IPv4Address) -> Optional[str]:
        """Country code for the address, or None when unknown"""
        try:
            record = self.reader.get(str(address))
        except (ValueError, maxminddb.InvalidDatabaseError):
            return None

        if not isinstance(record, dict):
            return None

        tag = record.get(self.field)
        if isinstance(tag, str) and tag:
            return tag
        return None

    def close(self):
        self.reader.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
