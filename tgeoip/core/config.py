"""
Configuration Manager
Handles loading and validating configuration for a run.
"""

import copy
import json
from pathlib import Path
from typing import Dict, Any, Optional


STRATEGIES = ('tcp', 'icmp', 'combined')
COMBINED_MODES = ('either', 'both')

# Numeric -full values map onto combined modes
FULL_MODE_NAMES = {1: 'either', 2: 'both'}


class ConfigManager:
    """
    Manages configuration loading and validation.
    Provides defaults for missing values.
    """

    DEFAULTS = {
        'source': {
            'url': 'https://core.telegram.org/resources/cidr.txt',
            'timeout': 30,
            'max_retries': 3,
            'retry_delay': 2
        },
        'probe': {
            'strategy': 'tcp',
            'mode': 'either',
            'workers': 200,
            'port': 443,
            'attempts': 3,
            'retry_delay': 0.2,
            'tcp_timeout': 3,
            'icmp_timeout': 3,
            'icmp_wait': 2,
            # Looser profile when both checks run per address
            'combined_tcp_timeout': 5,
            'combined_icmp_timeout': 5,
            'combined_icmp_wait': 3,
            'ping_path': 'ping',
            'progress_every': 5000
        },
        'geoip': {
            'db_path': None,
            'local_db_path': 'ipinfo_lite.mmdb',
            'db_env': 'DB_PATH',
            'field': 'country_code'
        },
        'output': {
            'dir': 'geoip'
        },
        'limit': 0,
        'skip_check': False
    }

    def __init__(self, config_file: Optional[str] = None, overrides: Optional[Dict] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to config.json (optional, uses defaults if not provided)
            overrides: Values taking precedence over both defaults and file (CLI flags)
        """
        self.config_file = Path(config_file) if config_file else None
        self.config = self._load_config()
        if overrides:
            self.config = self._deep_merge(self.config, overrides)
        self.validate()

    def _load_config(self) -> Dict:
        """Load configuration, merging with defaults"""
        defaults = copy.deepcopy(self.DEFAULTS)
        if self.config_file and self.config_file.exists():
            user_config = self._load_json(self.config_file)
            print(f"[CONFIG] Loaded: {self.config_file}")
            return self._deep_merge(defaults, user_config)

        if self.config_file:
            print(f"[CONFIG] File not found, using defaults: {self.config_file}")
        return defaults

    def _load_json(self, path: Path) -> Dict:
        # Try different encodings (handles Windows BOM issues)
        for encoding in ['utf-8-sig', 'utf-8', 'utf-16', 'latin-1']:
            try:
                with open(path, 'r', encoding=encoding) as f:
                    return json.load(f)
            except (UnicodeDecodeError, UnicodeError):
                continue
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in config file: {e}")
        raise ValueError(f"Could not decode: {path}")

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """
        Deep merge two dictionaries.
        Override values take precedence.
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def validate(self):
        """Reject settings that cannot produce meaningful output"""
        probe = self.config['probe']

        strategy = probe.get('strategy')
        if strategy not in STRATEGIES:
            raise ValueError(
                f"Invalid probe strategy: {strategy!r}. Expected one of: {', '.join(STRATEGIES)}"
            )

        if strategy == 'combined':
            probe['mode'] = normalize_mode(probe.get('mode'))

        workers = probe.get('workers')
        if not isinstance(workers, int) or workers < 1:
            raise ValueError(f"Invalid worker count: {workers!r}. Must be a positive integer.")

        port = probe.get('port')
        if not isinstance(port, int) or not 1 <= port <= 65535:
            raise ValueError(f"Invalid port: {port!r}. Must be between 1 and 65535.")

        attempts = probe.get('attempts')
        if not isinstance(attempts, int) or attempts < 1:
            raise ValueError(f"Invalid attempt count: {attempts!r}. Must be at least 1.")

        limit = self.config.get('limit') or 0
        if not isinstance(limit, int) or limit < 0:
            raise ValueError(f"Invalid limit: {limit!r}. Must be 0 (no limit) or a positive integer.")

    def get(self, *keys, default: Any = None) -> Any:
        """
        Get nested configuration value.

        Args:
            *keys: Path to config value (e.g., 'probe', 'workers')
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_probe_config(self) -> Dict:
        return dict(self.config['probe'])

    def save_template(self, output_path: str):
        """Save default configuration as template"""
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        with open(output, 'w', encoding='utf-8') as f:
            json.dump(self.DEFAULTS, f, indent=2)

        print(f"[CONFIG] Template saved: {output}")


def normalize_mode(mode: Any) -> str:
    """
    Map a combined-mode selector to 'either' or 'both'.

    Accepts the mode names as well as the numeric -full values 1 and 2.
    """
    if isinstance(mode, str) and mode.strip().isdigit():
        mode = int(mode.strip())
    if isinstance(mode, int) and not isinstance(mode, bool):
        if mode in FULL_MODE_NAMES:
            return FULL_MODE_NAMES[mode]
        raise ValueError(
            f"Invalid full mode value: {mode}. Only values 1 (either passes) "
            f"or 2 (both must pass) are allowed."
        )
    if isinstance(mode, str) and mode.strip().lower() in COMBINED_MODES:
        return mode.strip().lower()
    raise ValueError(
        f"Invalid combined mode: {mode!r}. Expected one of: {', '.join(COMBINED_MODES)}"
    )
