"""
Pipeline Runner
Load blocks -> expand -> probe -> group by country -> write.
"""

import os
from typing import Dict, Optional

from termcolor import colored

from .core.config import ConfigManager
from .expansion import expand_blocks, load_cidrs
from .grouping import CountryGrouper, MMDBCountryLookup
from .grouping.grouper import Lookup
from .output import ResultWriter
from .probing import ReachabilityProber


def resolve_db_path(config: ConfigManager) -> str:
    """GeoIP database path from config, falling back to the environment"""
    db_path = config.get('geoip', 'db_path')
    if db_path:
        return db_path

    env_name = config.get('geoip', 'db_env', default='DB_PATH')
    db_path = os.environ.get(env_name, '')
    if not db_path:
        raise ValueError(f"{env_name} environment variable not set. Use --local or --db to pick a database.")
    return db_path


def run_pipeline(
    config: ConfigManager,
    lookup: Optional[Lookup] = None,
    prober: Optional[ReachabilityProber] = None
) -> Dict:
    """
    Run the whole pipeline.

    Args:
        config: Loaded configuration
        lookup: Address -> country code callable (MMDB reader when omitted)
        prober: Prober to use (built from config when omitted)

    Returns:
        Result dict with success status and counts
    """
    owned_lookup = None
    if lookup is None:
        db_path = resolve_db_path(config)
        print(f"[RUN] Loading GeoIP database from: {db_path}")
        owned_lookup = MMDBCountryLookup(db_path, config.get('geoip', 'field', default='country_code'))
        lookup = owned_lookup

    try:
        return _run_steps(config, lookup, prober)
    finally:
        if owned_lookup is not None:
            owned_lookup.close()


def _run_steps(config: ConfigManager, lookup: Lookup, prober: Optional[ReachabilityProber]) -> Dict:
    source = config.get('source', 'url')

    print("[RUN] Step 1: Loading CIDR list from source...")
    try:
        cidrs = load_cidrs(source, config.get('source', default={}))
    except (RuntimeError, FileNotFoundError) as e:
        return {'success': False, 'error': f'Failed to load CIDR list: {e}'}
    print(f"[RUN] Loaded {len(cidrs)} IPv4 CIDR ranges")

    print("[RUN] Step 2: Expanding CIDRs to host IPs...")
    limit = config.get('limit', default=0)
    candidates = expand_blocks(cidrs, limit=limit)
    if limit:
        print(f"[RUN] >>> Limiting check to the first {limit} IPs <<<")
    print(f"[RUN] Expanded to {len(candidates)} IPs to check")

    if config.get('skip_check', default=False):
        print("[RUN] >>> Skipping connectivity check <<<")
        reachable = set(candidates)
    else:
        print("[RUN] Step 3: Finding reachable IPs...")
        if prober is None:
            prober = ReachabilityProber(config.get_probe_config())
        reachable = prober.find_reachable(candidates)
        print(f"[RUN] Found {len(reachable)} reachable IPs")

    result = {
        'success': True,
        'cidrs': len(cidrs),
        'candidates': len(candidates),
        'reachable': len(reachable),
        'countries': 0,
        'files': [],
        'output_dir': config.get('output', 'dir')
    }

    if not reachable:
        print(colored("[RUN] No IPs to process or save", "yellow"))
        return result

    print("[RUN] Step 4: Grouping IPs by country...")
    buckets = CountryGrouper(lookup).process(reachable)

    writer = ResultWriter(config.get('output', 'dir'))
    files = writer.save(buckets)

    result['countries'] = len(buckets)
    result['files'] = [str(f) for f in files]
    return result
