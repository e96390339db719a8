"""
Scanner configuration
Browser profile tables, base directory and tuning knobs
"""

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from extension_scanner.patterns import SEARCH_STRINGS, unique_patterns


# Relative path from a user's home directory to each browser's profile root
MACOS_BROWSERS = {
    'Chrome': 'Library/Application Support/Google/Chrome',
    'Brave': 'Library/Application Support/BraveSoftware/Brave-Browser',
    'Edge': 'Library/Application Support/Microsoft Edge',
    'Chromium': 'Library/Application Support/Chromium',
}

WINDOWS_BROWSERS = {
    'Chrome': 'AppData/Local/Google/Chrome/User Data',
}

LINUX_BROWSERS = {
    'Chrome': '.config/google-chrome',
    'Brave': '.config/BraveSoftware/Brave-Browser',
    'Edge': '.config/microsoft-edge',
    'Chromium': '.config/chromium',
}


def browser_table(platform=None):
    """Return the browser -> profile root table for a platform"""
    platform = platform or sys.platform

    if platform == 'darwin':
        return dict(MACOS_BROWSERS)
    if platform.startswith('win'):
        return dict(WINDOWS_BROWSERS)
    return dict(LINUX_BROWSERS)


def default_base_dir(platform=None):
    """Directory holding one home directory per user"""
    platform = platform or sys.platform

    if platform == 'darwin':
        return Path('/Users')
    if platform.startswith('win'):
        return Path(os.environ.get('SystemDrive', 'C:') + '\\') / 'Users'
    return Path('/home')


def default_workers(pattern_count):
    return max(1, min(pattern_count, os.cpu_count() or 1))


@dataclass
class ScanConfig:
    """Settings for a single scan run"""

    base_dir: Path = field(default_factory=default_base_dir)
    browsers: dict = field(default_factory=browser_table)
    patterns: tuple = SEARCH_STRINGS
    workers: int = 0
    timeout: Optional[float] = None
    verbose: bool = False

    def __post_init__(self):
        self.base_dir = Path(os.path.abspath(os.path.expanduser(str(self.base_dir))))
        self.patterns = unique_patterns(self.patterns)
        if not self.workers or self.workers < 1:
            self.workers = default_workers(len(self.patterns))

    @classmethod
    def load(cls, config_path='config.json', **overrides):
        """
        Build configuration from defaults, config.json, environment and overrides

        Later sources win: config.json "scanner" section, then environment
        variables (a .env file is loaded first), then explicit keyword overrides.

        Args:
            config_path: Optional JSON config file
            **overrides: Values from the command line; None means "not given"

        Returns:
            ScanConfig
        """
        load_dotenv(find_dotenv(usecwd=True))

        values = {}
        values.update(_load_config_file(config_path))

        env_base = os.environ.get('USER_BASE_DIR')
        if env_base:
            values['base_dir'] = env_base

        env_workers = _parse_number(os.environ.get('SCAN_WORKERS'), int, 'SCAN_WORKERS')
        if env_workers is not None:
            values['workers'] = env_workers

        env_timeout = _parse_number(os.environ.get('SCAN_TIMEOUT'), float, 'SCAN_TIMEOUT')
        if env_timeout is not None:
            values['timeout'] = env_timeout

        for key, value in overrides.items():
            if value is not None:
                values[key] = value

        return cls(**values)


def _load_config_file(config_path):
    """Read the "scanner" section of a JSON config file, if there is one"""
    if not config_path:
        return {}

    config_path = Path(config_path)
    if not config_path.exists():
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            section = json.load(f).get('scanner', {})
    except (OSError, ValueError, AttributeError) as e:
        print(f"[!] Error loading config: {e}")
        return {}

    values = {}
    if section.get('user_base_dir'):
        values['base_dir'] = section['user_base_dir']

    workers = _parse_number(section.get('workers'), int, 'workers')
    if workers is not None:
        values['workers'] = workers

    timeout = _parse_number(section.get('timeout'), float, 'timeout')
    if timeout is not None:
        values['timeout'] = timeout

    return values


def _parse_number(raw, kind, name):
    if raw is None or raw == '':
        return None
    try:
        return kind(raw)
    except (TypeError, ValueError):
        print(f"[!] Warning: ignoring invalid {name} value: {raw!r}")
        return None
