"""
Report Builder
Assembles the deterministic scan_result.json payload
"""

import re
import socket
import subprocess
import sys
from pathlib import Path

from extension_scanner.models import ExtensionSummary, FileMatch, HostIdentity, ScanReport
from extension_scanner.utils import get_timestamp


DMI_SERIAL_PATH = Path('/sys/class/dmi/id/product_serial')


class ReportBuilder:
    """Builds a ScanReport from extensions that have matches"""

    def __init__(self, host_lookup=None):
        self.host_lookup = host_lookup or get_host_identity

    def build(self, entries):
        """
        Build the report for matched entries

        Args:
            entries (list): ExtensionEntry objects

        Returns:
            ScanReport, or None when no entry has a match
        """
        matched = [e for e in entries if e.matches]
        if not matched:
            return None

        found = []
        for entry in matched:
            file_matches = [
                FileMatch(file=path, strings=sorted(entry.matches[path]))
                for path in sorted(entry.matches)
            ]
            summary = ExtensionSummary(
                user=entry.user,
                browser=entry.browser,
                profile=entry.profile,
                extension_id=entry.extension_id,
                extension_name=entry.extension_name(),
                matches=file_matches,
            )
            found.append(summary)

            print(f"=> Matched extension: {entry.extension_id} "
                  f"(user={entry.user}, browser={entry.browser}, profile={entry.profile})")
            print(f"   Matched strings: [{' '.join(summary.strings())}]")

        return ScanReport(timestamp=get_timestamp(), host=self._safe_host_lookup(), found=found)

    def _safe_host_lookup(self):
        try:
            host = self.host_lookup()
        except Exception as e:
            print(f"[!] Host identity lookup failed: {e}")
            return HostIdentity()
        return host if host is not None else HostIdentity()


def get_host_identity():
    """Hostname and hardware serial number, empty strings where unavailable"""
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = ""
    return HostIdentity(hostname=hostname, serial_number=get_serial_number())


def get_serial_number(platform=None):
    """
    Best-effort hardware serial number lookup

    macOS: system_profiler, Windows: wmic, Linux: DMI sysfs (usually root only).
    """
    platform = platform or sys.platform

    try:
        if platform == 'darwin':
            output = _run(['system_profiler', 'SPHardwareDataType'])
            match = re.search(r'Serial Number[^:]*:\s*(\S+)', output)
            return match.group(1) if match else ""

        if platform.startswith('win'):
            output = _run(['wmic', 'bios', 'get', 'serialnumber'])
            lines = [line.strip() for line in output.splitlines() if line.strip()]
            return lines[1] if len(lines) > 1 else ""

        return DMI_SERIAL_PATH.read_text(encoding='utf-8', errors='replace').strip()
    except (OSError, subprocess.SubprocessError):
        return ""


def _run(command):
    result = subprocess.run(
        command,
        capture_output=True,
        text=True,
        timeout=30,
        check=False,
    )
    return result.stdout or ""
