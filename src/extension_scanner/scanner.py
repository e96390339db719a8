"""
Extension Scanner CLI
Scans Chromium browser profiles for extensions containing indicator strings,
writes a JSON report and zips the matched extensions
"""

import argparse
import os
import shutil
import sys
import tempfile
from pathlib import Path

from extension_scanner.attributor import MatchAttributor
from extension_scanner.collector import ArchiveError, Collector
from extension_scanner.config import ScanConfig
from extension_scanner.locator import ExtensionLocator, scan_roots
from extension_scanner.matcher import ContentMatcher, ScanInterrupted
from extension_scanner.report_builder import ReportBuilder
from extension_scanner.utils import get_run_label, log_verbose


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class ScanSetupError(Exception):
    """Raised when the scan cannot prepare its working directory."""


class ExtensionScanner:
    """Runs locate -> match -> attribute -> report -> collect"""

    def __init__(self, config, progress=True, host_lookup=None):
        self.config = config
        self.verbose = config.verbose
        self.locator = ExtensionLocator(config.base_dir, config.browsers, verbose=self.verbose)
        self.matcher = ContentMatcher(
            config.patterns,
            workers=config.workers,
            timeout=config.timeout,
            verbose=self.verbose,
            progress=progress,
        )
        self.reporter = ReportBuilder(host_lookup=host_lookup)

    def scan(self, output_path):
        """
        Complete scan pipeline

        Nothing is written to output_path unless at least one extension
        matched and the whole match phase finished.

        Args:
            output_path: Destination zip path (relative paths use the cwd)

        Returns:
            ScanReport, or None when nothing matched

        Raises:
            ScanSetupError: Staging directory could not be created
            ScanInterrupted: Deadline passed during matching
            ArchiveError: The zip could not be written
        """
        output_path = Path(os.path.abspath(os.path.expanduser(str(output_path))))
        print(f"[+] Output will be saved to: {output_path}")

        try:
            tmp_dir = Path(tempfile.mkdtemp(prefix='scan_ext_'))
        except OSError as e:
            raise ScanSetupError(f"Could not create temporary directory: {e}") from e
        log_verbose(self.verbose, f"Temporary directory: {tmp_dir}")

        try:
            return self._run(output_path, tmp_dir / f"scan-results-{get_run_label()}")
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            log_verbose(self.verbose, f"Removed temp directory: {tmp_dir}")

    def _run(self, output_path, staging_dir):
        log_verbose(self.verbose, f"Configured browsers: {', '.join(self.config.browsers)}")
        log_verbose(self.verbose, f"Search strings: {' '.join(self.config.patterns)}")
        log_verbose(self.verbose, "Enumerating extensions...")

        entries = self.locator.locate()
        roots = scan_roots(entries)
        print(f"[+] Number of extension directories to scan: {len(roots)}")
        for root in roots:
            log_verbose(self.verbose, f"Extension dir: {root}")

        if not roots:
            print("[✓] No extensions found to scan.")
            return None

        records = self.matcher.match(roots)
        if not records:
            print("[✓] No matching extensions found. Not creating zip.")
            return None

        log_verbose(self.verbose, "Final pass: building JSON and copying matched extensions...")
        matched = MatchAttributor(entries, verbose=self.verbose).attribute(records)
        report = self.reporter.build(matched)
        if report is None:
            print("[✓] No matching extensions found after final check. Not creating zip.")
            return None

        try:
            staging_dir.mkdir(parents=True)
        except OSError as e:
            raise ScanSetupError(f"Could not create staging directory: {e}") from e

        collector = Collector(staging_dir, verbose=self.verbose)
        for entry in matched:
            collector.collect(entry)
        collector.write_report(report)
        collector.archive(output_path)

        return report


def parse_cli_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='extension-scan',
        description='Scan Chromium browser extensions for known indicator strings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan every user on this machine
  sudo extension-scan -v /tmp/found_extensions.zip

  # Scan a copied home directory tree
  USER_BASE_DIR=/mnt/evidence/Users extension-scan ./found.zip
        """
    )

    parser.add_argument(
        'output',
        help='Path of the zip archive to create when matches are found'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Print every directory, match and skipped item'
    )
    parser.add_argument(
        '--base-dir',
        default=None,
        help='Directory containing user home directories (default: platform users dir or $USER_BASE_DIR)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Number of patterns searched in parallel'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Abort the scan (without writing results) after this many seconds'
    )
    parser.add_argument(
        '--config',
        default='config.json',
        help='Optional JSON config file with a "scanner" section (default: config.json)'
    )

    return parser.parse_args(argv)


def run_scan(output, config, progress=True, host_lookup=None):
    """Run a scan and map its outcome to a process exit code"""
    scanner = ExtensionScanner(config, progress=progress, host_lookup=host_lookup)

    try:
        scanner.scan(output)
    except ScanSetupError as e:
        print(f"[✗] Error: {e}")
        return EXIT_FAILURE
    except ArchiveError as e:
        print(f"[✗] Error creating zip: {e}")
        return EXIT_FAILURE
    except (ScanInterrupted, KeyboardInterrupt) as e:
        reason = str(e) or 'interrupted by user'
        print(f"\n[!] Scan interrupted ({reason}). No report was written.")
        return EXIT_INTERRUPTED

    print("[✓] Done.")
    return EXIT_OK


def main(argv=None):
    """CLI entry point"""
    args = parse_cli_args(argv)

    config = ScanConfig.load(
        config_path=args.config,
        base_dir=args.base_dir,
        workers=args.workers,
        timeout=args.timeout,
        verbose=args.verbose,
    )

    print("=" * 80)
    print("🔍 CHROME EXTENSION SCANNER")
    print("=" * 80)

    sys.exit(run_scan(args.output, config, progress=sys.stderr.isatty()))


if __name__ == "__main__":
    main()
