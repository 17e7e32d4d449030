"""
Result Writer
Saves per-country address and CIDR lists.

For every tag T two files are written into the output directory:
    T.txt       reachable addresses, numeric order
    T-CIDR.txt  aggregated prefixes, base then length order
"""

import ipaddress
from pathlib import Path
from typing import Dict, Iterable, List, Set

from termcolor import colored

from ..aggregation import aggregate
from ..core.addresses import sort_cidr_strings, sort_ip_strings


def write_lines(file_path: Path, lines: List[str]) -> bool:
    """
    Write lines joined by newlines, without a trailing newline.
    Empty lists are not written.

    Returns:
        True if the file was written
    """
    if not lines:
        return False

    try:
        file_path.write_text('\n'.join(lines), encoding='utf-8')
    except OSError as e:
        print(colored(f"[WRITE] Error writing to file {file_path}: {e}", "red"))
        return False
    return True


class ResultWriter:
    """Writes grouped results to an output folder"""

    def __init__(self, output_dir: str = 'geoip'):
        self.output_dir = Path(output_dir)

    def save(self, buckets: Dict[str, Set[ipaddress.IPv4Address]]) -> List[Path]:
        """
        Save every bucket.

        Returns:
            Paths of the files written
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        print(f"[WRITE] Saving results for {len(buckets)} countries to '{self.output_dir}/'")

        written = []
        for tag in sorted(buckets):
            written.extend(self.save_bucket(tag, buckets[tag]))

        print(f"[WRITE] Wrote {len(written)} files")
        return written

    def save_bucket(self, tag: str, addresses: Iterable[ipaddress.IPv4Address]) -> List[Path]:
        addresses = list(addresses)
        written = []

        ip_lines = sort_ip_strings(str(a) for a in set(addresses))
        ip_path = self.output_dir / f"{tag}.txt"
        if write_lines(ip_path, ip_lines):
            written.append(ip_path)

        cidr_lines = sort_cidr_strings(str(p) for p in aggregate(addresses))
        cidr_path = self.output_dir / f"{tag}-CIDR.txt"
        if write_lines(cidr_path, cidr_lines):
            written.append(cidr_path)

        return written
