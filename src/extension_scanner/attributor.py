"""
Match Attributor
Maps matched files back to the extension that owns them
"""

import os

from extension_scanner.utils import log_verbose


class MatchAttributor:
    """Folds (file, pattern) records into ExtensionEntry.matches"""

    def __init__(self, entries, verbose=False):
        self.entries = list(entries)
        self.verbose = verbose

        # Longest root first so a nested directory beats its parent; sort is
        # stable, so equal lengths keep enumeration order.
        index = []
        for entry in self.entries:
            for root in entry.roots:
                index.append((os.path.normpath(str(root)), entry))
        self._index = sorted(index, key=lambda item: len(item[0]), reverse=True)

    def owner_of(self, file_path):
        """Entry whose code or data directory contains the file, or None"""
        path = os.path.normpath(str(file_path))
        for root, entry in self._index:
            if path == root or path.startswith(root + os.sep):
                return entry
        return None

    def attribute(self, records):
        """
        Attach every record to its owning entry

        Records are deduplicated before folding. Records outside every known
        directory are dropped.

        Args:
            records (list): MatchRecord items from the matcher

        Returns:
            list: Entries with at least one match, in enumeration order
        """
        discarded = 0
        for file_path, pattern in sorted(set(records)):
            owner = self.owner_of(file_path)
            if owner is None:
                discarded += 1
                continue
            owner.add_match(os.path.normpath(str(file_path)), pattern)

        if discarded:
            log_verbose(self.verbose, f"Discarded {discarded} match(es) outside known extension directories")

        return [entry for entry in self.entries if entry.matches]
