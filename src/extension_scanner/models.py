"""
Scan data model
Extension entries discovered on disk and the report built from them
"""

import json
from collections import namedtuple
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set


NO_NAME = "(no name)"

# A single (file, pattern) hit handed from the matcher to the attributor
MatchRecord = namedtuple('MatchRecord', ['file_path', 'pattern'])


@dataclass
class ExtensionEntry:
    """One installed extension in one browser profile"""

    user: str
    browser: str
    profile: str
    extension_id: str
    code_path: Path
    data_path: Optional[Path] = None
    preferences_path: Optional[Path] = None
    matches: Dict[str, Set[str]] = field(default_factory=dict)

    @property
    def key(self):
        return (self.user, self.browser, self.profile, self.extension_id)

    @property
    def roots(self):
        """Directories owned by this extension"""
        return [p for p in (self.code_path, self.data_path) if p is not None]

    def add_match(self, file_path, pattern):
        self.matches.setdefault(str(file_path), set()).add(pattern)

    def extension_name(self):
        """
        Resolve the display name from the newest version's manifest.json

        Extensions are unpacked as <id>/<version>/manifest.json. Localized names
        (__MSG_key__) are looked up in _locales/<locale>/messages.json.

        Returns:
            str: Extension name, or "(no name)" if it cannot be determined
        """
        try:
            versions = sorted(
                (p for p in Path(self.code_path).iterdir() if (p / 'manifest.json').is_file()),
                key=lambda p: _version_key(p.name),
            )
        except OSError:
            return NO_NAME

        if not versions:
            return NO_NAME

        version_dir = versions[-1]
        try:
            with open(version_dir / 'manifest.json', 'r', encoding='utf-8-sig') as f:
                manifest = json.load(f)
        except (OSError, ValueError):
            return NO_NAME

        name = manifest.get('name') if isinstance(manifest, dict) else None
        if not isinstance(name, str) or not name:
            return NO_NAME

        if name.startswith('__MSG_') and name.endswith('__'):
            msg_key = name[len('__MSG_'):-2]
            return _resolve_localized_string(version_dir, msg_key, manifest.get('default_locale'), NO_NAME)

        return name


def _version_key(name):
    parts = []
    for piece in name.replace('_', '.').split('.'):
        parts.append((0, int(piece), '') if piece.isdigit() else (1, 0, piece))
    return parts


def _resolve_localized_string(extension_dir, msg_key, default_locale, default):
    """Look a __MSG_ key up in the extension's _locales directory"""
    locales_dir = extension_dir / '_locales'
    if not locales_dir.is_dir():
        return default

    locale_priorities = [default_locale, 'en', 'en_US', 'en_GB']
    candidates = [locales_dir / loc for loc in locale_priorities if loc]
    try:
        candidates.extend(sorted(p for p in locales_dir.iterdir() if p.is_dir()))
    except OSError:
        pass

    # Chrome treats message keys case-insensitively
    wanted = msg_key.lower()
    for locale_dir in candidates:
        messages_path = locale_dir / 'messages.json'
        if not messages_path.is_file():
            continue
        try:
            with open(messages_path, 'r', encoding='utf-8-sig') as f:
                messages = json.load(f)
        except (OSError, ValueError):
            continue
        for key, value in messages.items():
            if key.lower() == wanted and isinstance(value, dict) and value.get('message'):
                return value['message']

    return default


@dataclass
class HostIdentity:
    hostname: str = ""
    serial_number: str = ""

    def to_dict(self):
        return {'hostname': self.hostname, 'serialNumber': self.serial_number}


@dataclass
class FileMatch:
    file: str
    strings: List[str]

    def to_dict(self):
        return {'file': self.file, 'strings': list(self.strings)}


@dataclass
class ExtensionSummary:
    """Report view of one matched extension"""

    user: str
    browser: str
    profile: str
    extension_id: str
    extension_name: str
    matches: List[FileMatch]

    def strings(self):
        found = set()
        for match in self.matches:
            found.update(match.strings)
        return sorted(found)

    def to_dict(self):
        return {
            'user': self.user,
            'browser': self.browser,
            'profile': self.profile,
            'extensionId': self.extension_id,
            'extensionName': self.extension_name,
            'matches': [m.to_dict() for m in self.matches],
        }


@dataclass
class ScanReport:
    """Final scan_result.json payload"""

    timestamp: str
    host: HostIdentity
    found: List[ExtensionSummary]

    def to_dict(self):
        return {
            'timestamp': self.timestamp,
            'hostIdentity': self.host.to_dict(),
            'found': [s.to_dict() for s in self.found],
        }

    @classmethod
    def from_dict(cls, data):
        """Rebuild a report from its serialized form"""
        host = data.get('hostIdentity') or {}
        found = []
        for item in data.get('found', []):
            found.append(ExtensionSummary(
                user=item.get('user', ''),
                browser=item.get('browser', ''),
                profile=item.get('profile', ''),
                extension_id=item.get('extensionId', ''),
                extension_name=item.get('extensionName') or NO_NAME,
                matches=[FileMatch(m.get('file', ''), list(m.get('strings', [])))
                         for m in item.get('matches', [])],
            ))
        return cls(
            timestamp=data.get('timestamp', ''),
            host=HostIdentity(host.get('hostname', ''), host.get('serialNumber', '')),
            found=found,
        )
