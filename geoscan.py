#!/usr/bin/env python3
"""
TGeoIP - Reachable Telegram IPs by Country

Usage:
    python geoscan.py run [options]                 Run the full pipeline
    python geoscan.py expand <source>               Print candidate IPs of a CIDR list
    python geoscan.py aggregate <file>              Aggregate an IP list into CIDRs
    python geoscan.py config-template [path]        Write the default config.json

Examples:
    python geoscan.py run --local
    python geoscan.py run --local --icmp --limit 1000
    python geoscan.py run --local --full 2 --workers 100
    DB_PATH=ipinfo_lite.mmdb python geoscan.py run --skip-check
    python geoscan.py aggregate geoip/NL.txt
"""

import sys
import argparse
from pathlib import Path

from termcolor import colored

from tgeoip.core.config import ConfigManager, normalize_mode
from tgeoip.expansion import iter_candidates, load_cidrs
from tgeoip.aggregation import aggregate_strings
from tgeoip.core.addresses import sort_cidr_strings


BANNER = r"""
 _____ ____            ___ ____
|_   _/ ___| ___  ___ |_ _|  _ \
  | || |  _ / _ \/ _ \ | || |_) |
  | || |_| |  __/ (_) || ||  __/
  |_| \____|\___|\___/|___|_|
    Reachable IPs by Country
"""


def print_banner():
    try:
        print(BANNER, file=sys.stderr)
    except UnicodeEncodeError:
        print("\n=== TGeoIP ===\n", file=sys.stderr)


def build_overrides(args) -> dict:
    """Translate run flags into config overrides"""
    probe = {}
    overrides = {'probe': probe}

    if args.full:
        probe['strategy'] = 'combined'
        probe['mode'] = normalize_mode(args.full)
    elif args.icmp:
        probe['strategy'] = 'icmp'

    if args.workers is not None:
        probe['workers'] = args.workers
    if args.port is not None:
        probe['port'] = args.port

    if args.limit:
        overrides['limit'] = args.limit
    if args.skip_check:
        overrides['skip_check'] = True
    if args.source:
        overrides.setdefault('source', {})['url'] = args.source
    if args.output:
        overrides['output'] = {'dir': args.output}

    if args.db:
        overrides['geoip'] = {'db_path': args.db}
    elif args.local:
        overrides['geoip'] = {'db_path': ConfigManager.DEFAULTS['geoip']['local_db_path']}

    return overrides


def cmd_run(args):
    """Run the full pipeline"""
    from tgeoip.runner import run_pipeline

    if args.full and args.full not in (1, 2):
        raise ValueError(
            f"Invalid --full value: {args.full}. Only values 1 (either passes) "
            f"or 2 (both must pass) are allowed."
        )

    if args.local:
        print("--- Running in Local Mode ---")
    else:
        print("--- Running in Environment Mode ---")

    config = ConfigManager(args.config, overrides=build_overrides(args))
    result = run_pipeline(config)

    if result['success']:
        print(colored("\n[OK] Process completed successfully", "green"))
        print(f"    CIDR ranges: {result['cidrs']}")
        print(f"    Candidates: {result['candidates']}")
        print(f"    Reachable: {result['reachable']}")
        print(f"    Countries: {result['countries']}")
        print(f"    Output: {result['output_dir']}/ ({len(result['files'])} files)")
    else:
        print(colored(f"\n[FAIL] {result.get('error', 'Unknown error')}", "red"))
        sys.exit(1)


def cmd_expand(args):
    """Print the candidate IPs of a CIDR list"""
    config = ConfigManager(args.config)
    cidrs = load_cidrs(args.source, config.get('source', default={}))

    count = 0
    for address in iter_candidates(cidrs):
        if args.limit and count >= args.limit:
            break
        print(address)
        count += 1

    print(f"[EXPAND] {len(cidrs)} ranges, {count} IPs", file=sys.stderr)


def cmd_aggregate(args):
    """Aggregate an IP list into CIDRs"""
    input_file = Path(args.file)
    if not input_file.exists():
        print(colored(f"\n[FAIL] File not found: {input_file}", "red"))
        sys.exit(1)

    with open(input_file, 'r', encoding='utf-8') as f:
        lines = [line.strip() for line in f if line.strip()]

    cidrs = sort_cidr_strings(aggregate_strings(lines))
    for cidr in cidrs:
        print(cidr)

    print(f"[AGGREGATE] {len(lines)} IPs -> {len(cidrs)} CIDRs", file=sys.stderr)


def cmd_config_template(args):
    """Write the default configuration"""
    ConfigManager().save_template(args.path)


def main():
    parser = argparse.ArgumentParser(
        description='TGeoIP - Reachable Telegram IPs by Country',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')

    # run
    p = subparsers.add_parser('run', help='Run the full pipeline')
    p.add_argument('--local', action='store_true', help='Use the local ipinfo_lite.mmdb instead of $DB_PATH')
    p.add_argument('--db', help='Path to the MMDB database')
    p.add_argument('--icmp', action='store_true', help='Use ICMP ping instead of the default TCP check')
    p.add_argument('--full', type=int, default=0,
                   help='Use both ICMP and TCP checks: 1=either passes, 2=both must pass')
    p.add_argument('--limit', type=int, default=0, help='Limit the number of IPs to check (0 means no limit)')
    p.add_argument('--skip-check', action='store_true',
                   help='Skip connectivity check and classify all expanded IPs')
    p.add_argument('--workers', type=int, help='Concurrent checks (default 200)')
    p.add_argument('--port', type=int, help='TCP port to check (default 443)')
    p.add_argument('--source', help='CIDR list URL or file')
    p.add_argument('--output', help="Output directory (default 'geoip')")
    p.add_argument('--config', help='Path to config.json')
    p.set_defaults(func=cmd_run)

    # expand
    p = subparsers.add_parser('expand', help='Print candidate IPs of a CIDR list')
    p.add_argument('source', help='CIDR list URL or file')
    p.add_argument('--limit', type=int, default=0, help='Stop after N IPs')
    p.add_argument('--config', help='Path to config.json')
    p.set_defaults(func=cmd_expand)

    # aggregate
    p = subparsers.add_parser('aggregate', help='Aggregate an IP list into CIDRs')
    p.add_argument('file', help='File with IPs (one per line)')
    p.set_defaults(func=cmd_aggregate)

    # config-template
    p = subparsers.add_parser('config-template', help='Write the default config.json')
    p.add_argument('path', nargs='?', default='./config.json', help='Output path')
    p.set_defaults(func=cmd_config_template)

    args = parser.parse_args()

    print_banner()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\n\n[!] Interrupted")
        sys.exit(1)
    except (ValueError, FileNotFoundError, RuntimeError) as e:
        print(colored(f"\n[FAIL] {e}", "red"))
        sys.exit(1)


if __name__ == '__main__':
    main()
