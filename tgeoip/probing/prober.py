"""
Reachability Prober
Checks candidate addresses with a bounded worker pool.

Strategies:
- tcp: TCP connect to a fixed port
- icmp: single echo request through the ping binary
- combined: both checks per address, joined with 'either' or 'both'
"""

import ipaddress
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, Iterable, Optional, Set

from termcolor import colored

from ..core.config import STRATEGIES, normalize_mode
from .base_check import BaseCheck
from .icmp_check import ICMPCheck
from .tcp_check import TCPCheck


class RetryPolicy:
    """Repeats a check until it succeeds or the attempts run out"""

    def __init__(self, attempts: int = 3, retry_delay: float = 0.2):
        self.attempts = attempts
        self.retry_delay = retry_delay

    def run(self, check: BaseCheck, address: ipaddress.IPv4Address) -> bool:
        for attempt in range(self.attempts):
            if check.attempt(address):
                return True
            if self.retry_delay > 0 and attempt < self.attempts - 1:
                time.sleep(self.retry_delay)
        return False


class ReachabilityProber:
    """
    Probes addresses concurrently and reports which ones answered.
    """

    def __init__(
        self,
        config: Dict,
        tcp_check: Optional[BaseCheck] = None,
        icmp_check: Optional[BaseCheck] = None
    ):
        """
        Initialize prober.

        Args:
            config: probe configuration dict with keys:
                - strategy: 'tcp' (default), 'icmp' or 'combined'
                - mode: 'either'/'both' (or 1/2) for the combined strategy
                - workers: Maximum concurrent probes (default 200)
                - port: TCP port (default 443)
                - attempts: Attempts per check (default 3)
                - retry_delay: Pause between attempts in seconds (default 0.2)
                - tcp_timeout / icmp_timeout / icmp_wait: solo strategy bounds
                - combined_tcp_timeout / combined_icmp_timeout / combined_icmp_wait
                - ping_path: ping binary (default 'ping')
                - progress_every: print progress after this many addresses
            tcp_check: Replaces the TCP check built from config
            icmp_check: Replaces the ICMP check built from config
        """
        self.strategy = config.get('strategy', 'tcp')
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Invalid probe strategy: {self.strategy!r}. Expected one of: {', '.join(STRATEGIES)}"
            )

        self.mode = None
        if self.strategy == 'combined':
            self.mode = normalize_mode(config.get('mode', 'either'))

        self.workers = config.get('workers', 200)
        if self.workers < 1:
            raise ValueError(f"Invalid worker count: {self.workers}")

        self.port = config.get('port', 443)
        self.progress_every = config.get('progress_every', 5000)
        self.retry = RetryPolicy(
            attempts=config.get('attempts', 3),
            retry_delay=config.get('retry_delay', 0.2)
        )

        ping_path = config.get('ping_path', 'ping')
        self.tcp_check = None
        self.icmp_check = None

        if self.strategy == 'tcp':
            self.tcp_check = tcp_check or TCPCheck(self.port, config.get('tcp_timeout', 3))
        elif self.strategy == 'icmp':
            self.icmp_check = icmp_check or ICMPCheck(
                config.get('icmp_timeout', 3),
                config.get('icmp_wait', 2),
                ping_path
            )
        else:
            self.tcp_check = tcp_check or TCPCheck(self.port, config.get('combined_tcp_timeout', 5))
            self.icmp_check = icmp_check or ICMPCheck(
                config.get('combined_icmp_timeout', 5),
                config.get('combined_icmp_wait', 3),
                ping_path
            )

    def describe(self) -> str:
        if self.strategy == 'tcp':
            return self.tcp_check.describe()
        if self.strategy == 'icmp':
            return self.icmp_check.describe()
        return f"{self.mode} of {self.icmp_check.describe()} / {self.tcp_check.describe()}"

    def check_address(self, address: ipaddress.IPv4Address) -> bool:
        """Full verdict for one address, retries included"""
        if self.strategy == 'tcp':
            return self.retry.run(self.tcp_check, address)
        if self.strategy == 'icmp':
            return self.retry.run(self.icmp_check, address)

        # Both sequences always run, even when the first decides the verdict
        icmp_passed = self.retry.run(self.icmp_check, address)
        tcp_passed = self.retry.run(self.tcp_check, address)

        if self.mode == 'either':
            return icmp_passed or tcp_passed
        return icmp_passed and tcp_passed

    def probe(self, addresses: Iterable[ipaddress.IPv4Address]) -> Dict[ipaddress.IPv4Address, bool]:
        """
        Probe every distinct address.

        Returns only after all tasks have finished.

        Returns:
            Mapping of address -> reachable
        """
        targets = list(dict.fromkeys(addresses))
        if not targets:
            print("[PROBE] No addresses to check")
            return {}

        print(f"[PROBE] Checking {len(targets)} IPs using {self.describe()} "
              f"with {self.workers} workers (up to {self.retry.attempts} tries each)...")

        outcomes = {}
        start = datetime.now()

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(self.check_address, address): address
                for address in targets
            }

            for done, future in enumerate(as_completed(futures), 1):
                address = futures[future]
                try:
                    outcomes[address] = bool(future.result())
                except Exception as e:
                    print(colored(f"  [PROBE] Worker failed for {address}: {e}", "red"))
                    outcomes[address] = False

                if self.progress_every and done % self.progress_every == 0 and done < len(targets):
                    reachable = sum(1 for ok in outcomes.values() if ok)
                    print(f"  [PROBE] {done}/{len(targets)} checked, {reachable} reachable")

        elapsed = (datetime.now() - start).total_seconds()
        reachable = sum(1 for ok in outcomes.values() if ok)
        print(f"[PROBE] Completed in {elapsed:.1f}s: {reachable}/{len(targets)} reachable")

        return outcomes

    def find_reachable(self, addresses: Iterable[ipaddress.IPv4Address]) -> Set[ipaddress.IPv4Address]:
        """Subset of addresses that passed the strategy"""
        outcomes = self.probe(addresses)
        return {address for address, ok in outcomes.items() if ok}
