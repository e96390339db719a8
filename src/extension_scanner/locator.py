"""
Extension Locator
Enumerates installed extensions across users, browsers and profiles
"""

import fnmatch
import os
from pathlib import Path

from extension_scanner.models import ExtensionEntry
from extension_scanner.utils import log_verbose


PROFILE_GLOBS = ('Default', 'Profile *')
EXTENSIONS_DIR = 'Extensions'
LOCAL_SETTINGS_DIR = 'Local Extension Settings'
PREFERENCES_FILE = 'Preferences'


class ExtensionLocator:
    """Finds extension code and local storage directories under a base directory"""

    def __init__(self, base_dir, browsers, verbose=False):
        self.base_dir = Path(os.path.abspath(os.path.expanduser(str(base_dir))))
        self.browsers = dict(browsers)
        self.verbose = verbose

    def locate(self):
        """
        Enumerate every extension installation

        Walks <base>/<user>/<browser root>/<profile>/Extensions/<id>. Directories
        that are missing or unreadable are skipped.

        Returns:
            list: ExtensionEntry objects with empty matches
        """
        entries = []

        for user_dir in self._subdirs(self.base_dir):
            for browser_name, relative_root in self.browsers.items():
                browser_root = user_dir / relative_root
                if not self._is_dir(browser_root):
                    log_verbose(self.verbose, f"Skipping: {browser_root} (doesn't exist)")
                    continue

                for profile_dir in self._profiles(browser_root):
                    entries.extend(self._profile_entries(user_dir.name, browser_name, profile_dir))

        log_verbose(self.verbose, f"Discovered {len(entries)} extension(s)")
        return entries

    def _profile_entries(self, user, browser, profile_dir):
        ext_dir = profile_dir / EXTENSIONS_DIR
        if not self._is_dir(ext_dir):
            return []

        data_dir = profile_dir / LOCAL_SETTINGS_DIR
        prefs_path = profile_dir / PREFERENCES_FILE

        entries = []
        for ext_id_dir in self._subdirs(ext_dir):
            data_path = data_dir / ext_id_dir.name
            entries.append(ExtensionEntry(
                user=user,
                browser=browser,
                profile=profile_dir.name,
                extension_id=ext_id_dir.name,
                code_path=ext_id_dir,
                data_path=data_path if self._is_dir(data_path) else None,
                preferences_path=prefs_path,
            ))
        return entries

    def _profiles(self, browser_root):
        return [
            d for d in self._subdirs(browser_root)
            if any(fnmatch.fnmatchcase(d.name, pattern) for pattern in PROFILE_GLOBS)
        ]

    def _subdirs(self, directory):
        """Sorted child directories, symlinks followed; [] if unreadable"""
        try:
            with os.scandir(directory) as it:
                children = [
                    Path(entry.path) for entry in it
                    if entry.is_dir()
                ]
        except OSError as e:
            log_verbose(self.verbose, f"Cannot read {directory}: {e}")
            return []
        return sorted(children, key=lambda p: p.name)

    @staticmethod
    def _is_dir(path):
        try:
            return path.is_dir()
        except OSError:
            return False


def scan_roots(entries):
    """Deduplicated code and data directories of all entries, in entry order"""
    seen = set()
    roots = []
    for entry in entries:
        for root in entry.roots:
            key = os.path.normpath(str(root))
            if key in seen:
                continue
            seen.add(key)
            roots.append(Path(key))
    return roots
