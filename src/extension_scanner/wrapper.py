"""
Scan summary wrapper
Runs a quiet scan and prints a colorized summary of the resulting archive
"""

import argparse
import contextlib
import io
import json
import sys
import tempfile
import zipfile
from pathlib import Path

from colorama import Fore, Style, init as colorama_init

from extension_scanner.collector import RESULT_FILE
from extension_scanner.config import ScanConfig
from extension_scanner.models import ScanReport
from extension_scanner.scanner import EXIT_FAILURE, EXIT_OK, run_scan


DEFAULT_OUTPUT = Path(tempfile.gettempdir()) / 'found_extensions.zip'


def _red(text):
    return f"{Fore.RED}{text}{Style.RESET_ALL}"


def _green(text):
    return f"{Fore.GREEN}{text}{Style.RESET_ALL}"


def read_report(zip_path):
    """Load scan_result.json from inside a result archive; None if absent"""
    try:
        with zipfile.ZipFile(zip_path) as zf:
            names = sorted(n for n in zf.namelist() if n.rsplit('/', 1)[-1] == RESULT_FILE)
            if not names:
                return None
            with zf.open(names[0]) as f:
                return ScanReport.from_dict(json.load(f))
    except (OSError, ValueError, zipfile.BadZipFile):
        return None


def format_summary(report):
    """Lines to print for a report; a single green line when nothing was found"""
    if report is None or not report.found:
        return [_green("No extension was found.")]

    lines = [
        _red(f"Number of extensions containing the specified strings: {len(report.found)}"),
        "Extensions found:",
    ]
    for summary in report.found:
        lines.append("")
        lines.append(f"{_red('User:')} {summary.user}")
        lines.append(f"{_red('Browser:')} {summary.browser}")
        lines.append(f"{_red('Profile:')} {summary.profile}")
        lines.append(f"{_red('Extension ID:')} {summary.extension_id}")
        lines.append(f"{_red('Extension Name:')} {summary.extension_name}")
        lines.append(_red('Matched Strings:'))
        strings = summary.strings()
        if not strings:
            lines.append("   (None listed?)")
        for s in strings:
            lines.append(f"   {s}")
    return lines


def summarize(output_path, config, host_lookup=None):
    """
    Remove a stale archive, scan quietly, then report on the new archive

    Returns:
        tuple: (exit code, ScanReport or None)
    """
    output_path = Path(output_path)
    try:
        output_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        print(_red(f"[✗] Cannot remove stale archive {output_path}: {e}"))
        return EXIT_FAILURE, None

    with contextlib.redirect_stdout(io.StringIO()):
        code = run_scan(output_path, config, progress=False, host_lookup=host_lookup)

    if code != EXIT_OK or not output_path.exists():
        return code, None
    return code, read_report(output_path)


def main(argv=None):
    """CLI entry point"""
    parser = argparse.ArgumentParser(
        prog='extension-scan-summary',
        description='Run the extension scan and print a short summary'
    )
    parser.add_argument(
        '--output',
        default=str(DEFAULT_OUTPUT),
        help=f'Where to place the result zip (default: {DEFAULT_OUTPUT})'
    )
    parser.add_argument(
        '--base-dir',
        default=None,
        help='Directory containing user home directories'
    )
    args = parser.parse_args(argv)

    colorama_init()
    config = ScanConfig.load(base_dir=args.base_dir)

    code, report = summarize(args.output, config)
    if code != EXIT_OK:
        print(_red(f"Scan failed (exit code {code})."))
        sys.exit(code)

    for line in format_summary(report):
        print(line)
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
