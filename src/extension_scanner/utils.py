"""
Utility functions for the scanner
"""

import json
from pathlib import Path
from datetime import datetime, timezone


def save_json(data, file_path):
    """Save data to JSON file"""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_json(file_path):
    """Load data from JSON file"""
    with open(file_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_timestamp():
    """Get current UTC timestamp as an ISO-8601 instant"""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def get_run_label():
    """Local date string used to name a scan's staging directory"""
    return datetime.now().strftime('%Y%m%d_%H%M%S')


def log_verbose(enabled, *message):
    """Print a [VERBOSE] line when verbose output is enabled"""
    if enabled:
        print("[VERBOSE]", *message)


def format_bytes(bytes_size):
    """Format bytes to human readable"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_size < 1024:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024
    return f"{bytes_size:.2f} TB"
