"""
Content Matcher
Fixed-string byte search for indicator patterns across extension files
"""

import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

from tqdm import tqdm

from extension_scanner.models import MatchRecord


class ScanInterrupted(Exception):
    """Raised when the scan deadline passes before matching completes."""


class ContentMatcher:
    """Searches every file under a set of roots for each pattern"""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, patterns, workers=1, timeout=None, verbose=False, progress=True):
        self.patterns = list(patterns)
        self.workers = max(1, workers)
        self.timeout = timeout
        self.verbose = verbose
        self.progress = progress
        self._deadline = None

    def match(self, roots):
        """
        Run one pass per pattern over all files below the roots

        Passes are independent and run on a thread pool. Each pattern's result
        is announced as soon as it and every earlier pattern have finished, so
        output stays in pattern order.

        Args:
            roots (list): Directories to scan

        Returns:
            list: MatchRecord for every (file, pattern) pair found
        """
        roots = [str(r) for r in roots]
        self._deadline = time.monotonic() + self.timeout if self.timeout else None

        total = len(self.patterns)
        per_pattern = [None] * total
        announced = 0

        with tqdm(total=total, desc="Pattern search", unit="pattern",
                  disable=not self.progress, leave=False) as pbar:
            with ThreadPoolExecutor(max_workers=min(self.workers, total or 1)) as pool:
                futures = {
                    pool.submit(self.search_pattern, roots, pattern): idx
                    for idx, pattern in enumerate(self.patterns)
                }
                try:
                    for future in as_completed(futures):
                        per_pattern[futures[future]] = future.result()
                        pbar.update(1)
                        while announced < total and per_pattern[announced] is not None:
                            self._announce(announced + 1, total, per_pattern[announced])
                            announced += 1
                except BaseException:
                    # Stop the remaining passes at their next file
                    self._deadline = 0
                    for future in futures:
                        future.cancel()
                    raise

        records = []
        for pattern, files in zip(self.patterns, per_pattern):
            records.extend(MatchRecord(path, pattern) for path in files)
        return records

    def _announce(self, idx, total, files):
        pattern = self.patterns[idx - 1]
        tqdm.write(f"[{idx}/{total}] Searching for pattern: {pattern}")
        if not files:
            tqdm.write(f"   => No matches for '{pattern}'")
            return
        tqdm.write(f"   => Found {len(files)} file(s) containing '{pattern}'")
        if self.verbose:
            for path in files:
                tqdm.write(f"[VERBOSE] Matched {pattern} in {path}")

    def search_pattern(self, roots, pattern):
        """Files below the roots whose contents contain the pattern"""
        needle = pattern.encode('utf-8')
        matched = []
        for path in iter_files(roots):
            self._check_deadline()
            if file_contains(path, needle, self.CHUNK_SIZE):
                matched.append(path)
        return matched

    def _check_deadline(self):
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise ScanInterrupted("scan deadline exceeded")


def iter_files(roots):
    """
    Yield regular files below each root, depth first

    Symlinks are not followed. Unreadable directories are skipped.
    """
    stack = list(reversed(roots))
    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            continue

        subdirs = []
        for entry in entries:
            try:
                if entry.is_file(follow_symlinks=False):
                    yield entry.path
                elif entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry.path)
            except OSError:
                continue
        stack.extend(reversed(subdirs))


def file_contains(path, needle, chunk_size=1024 * 1024):
    """
    Check whether a file contains a byte string

    Reads in chunks, carrying len(needle) - 1 bytes between chunks so a match
    across a chunk boundary is not missed. Returns False if the file cannot be
    read.
    """
    if not needle:
        return False

    overlap = len(needle) - 1
    tail = b''
    try:
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    return False
                window = tail + chunk
                if needle in window:
                    return True
                tail = window[-overlap:] if overlap else b''
    except OSError:
        return False
