"""
Block Source
Loads the published CIDR list from a URL or a local file.
"""

import random
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import requests


def filter_ipv4_lines(lines: Iterable[str]) -> List[str]:
    """Keep stripped, non-empty lines that are not IPv6 blocks"""
    blocks = []
    for line in lines:
        line = line.strip()
        if line and ':' not in line:
            blocks.append(line)
    return blocks


def load_cidrs(source: str, config: Optional[Dict] = None) -> List[str]:
    """
    Load candidate IPv4 blocks.

    Args:
        source: http(s) URL or path to a local text file
        config: source settings (timeout, max_retries, retry_delay)

    Returns:
        Raw block strings in source order
    """
    config = config or {}

    if source.startswith(('http://', 'https://')):
        text = _fetch(source, config)
    else:
        path = Path(source[7:] if source.startswith('file://') else source)
        if not path.exists():
            raise FileNotFoundError(f"Block list not found: {path}")
        text = path.read_text(encoding='utf-8-sig')

    return filter_ipv4_lines(text.splitlines())


def _fetch(url: str, config: Dict) -> str:
    """GET the list with retry and exponential backoff"""
    timeout = config.get('timeout', 30)
    max_retries = max(1, config.get('max_retries', 3))
    retry_delay = config.get('retry_delay', 2)

    last_error = None

    for attempt in range(max_retries):
        try:
            response = requests.get(url, timeout=timeout)

            if response.status_code in (500, 502, 503, 429):
                last_error = f"HTTP {response.status_code}"
            elif response.status_code != 200:
                raise RuntimeError(f"Bad status fetching {url}: HTTP {response.status_code}")
            else:
                return response.text

        except requests.exceptions.Timeout:
            last_error = f"Timeout after {timeout}s"
        except requests.exceptions.RequestException as e:
            last_error = f"Request failed: {e}"

        if attempt < max_retries - 1:
            delay = retry_delay * (2 ** attempt) + random.uniform(0, 1)
            print(f"  [SOURCE] {last_error}, retry {attempt + 1}/{max_retries} in {delay:.1f}s")
            time.sleep(delay)

    raise RuntimeError(last_error or "Max retries exceeded")
