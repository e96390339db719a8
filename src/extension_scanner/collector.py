"""
Collector
Stages matched extensions with their settings and writes the result archive
"""

import os
import shutil
import tempfile
import zipfile
from pathlib import Path

from extension_scanner.utils import format_bytes, load_json, log_verbose, save_json


RESULT_FILE = 'scan_result.json'
SETTINGS_FILE = 'extension_settings.json'
SECURE_PREFERENCES_FILE = 'Secure Preferences'


class ArchiveError(Exception):
    """Raised when the result archive cannot be written."""


class Collector:
    """Copies matched extensions into a staging tree and zips it"""

    def __init__(self, staging_dir, verbose=False):
        """
        Args:
            staging_dir: Top-level directory of this run's staging tree. Its
                name becomes the single top-level folder inside the archive.
        """
        self.staging_dir = Path(staging_dir)
        self.verbose = verbose

    def collect(self, entry):
        """
        Copy one extension's code, data and settings into the staging tree

        Individual copy failures are logged and skipped.

        Returns:
            Path: Destination directory for the extension
        """
        dest = self.staging_dir / entry.user / entry.browser / entry.profile / entry.extension_id
        dest.mkdir(parents=True, exist_ok=True)

        self._copy_tree(entry.code_path, dest / 'extension_code')
        if entry.data_path is not None:
            self._copy_tree(entry.data_path, dest / 'extension_data')

        settings = extract_extension_settings(entry.preferences_path, entry.extension_id)
        save_json(settings, dest / SETTINGS_FILE)

        log_verbose(self.verbose, f"Collected {entry.extension_id} into {dest}")
        return dest

    def write_report(self, report):
        """Write scan_result.json at the root of the staging tree"""
        report_path = self.staging_dir / RESULT_FILE
        save_json(report.to_dict(), report_path)
        print(f"[+] Wrote JSON summary to: {report_path}")
        return report_path

    def archive(self, output_path):
        """
        Zip the staging tree to output_path

        The archive is built next to the destination and moved into place, so
        an existing file is replaced only by a complete archive.

        Raises:
            ArchiveError: If the destination cannot be created or written
        """
        output_path = Path(output_path)
        print(f"[+] Creating zip at: {output_path}")

        tmp_name = None
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{output_path.name}.", suffix='.tmp', dir=output_path.parent
            )
            os.close(fd)

            base = self.staging_dir.parent
            with zipfile.ZipFile(tmp_name, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
                zf.write(self.staging_dir, self.staging_dir.relative_to(base).as_posix())
                for root, dirs, files in os.walk(self.staging_dir):
                    dirs.sort()
                    for name in dirs + sorted(files):
                        path = Path(root) / name
                        arcname = path.relative_to(base).as_posix()
                        try:
                            zf.write(path, arcname)
                        except OSError as e:
                            log_verbose(self.verbose, f"Skipping {path} in archive: {e}")

            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, output_path)
            tmp_name = None
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"could not write {output_path}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        print(f"[✓] Successfully created zip: {output_path} ({format_bytes(output_path.stat().st_size)})")
        return output_path

    def _copy_tree(self, source, dest):
        try:
            shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)
        except shutil.Error as e:
            for failure in e.args[0]:
                log_verbose(self.verbose, f"Copy failed: {failure}")
        except OSError as e:
            log_verbose(self.verbose, f"Copy failed for {source}: {e}")


def extract_extension_settings(preferences_path, extension_id):
    """
    Settings object for one extension from a profile's preferences

    Looks under extensions.settings.<id> in Preferences and then in the
    sibling Secure Preferences file. Anything missing or unparseable yields {}.
    """
    if preferences_path is None:
        return {}

    preferences_path = Path(preferences_path)
    for candidate in (preferences_path, preferences_path.with_name(SECURE_PREFERENCES_FILE)):
        settings = _settings_from_file(candidate, extension_id)
        if settings is not None:
            return settings
    return {}


def _settings_from_file(path, extension_id):
    try:
        prefs = load_json(path)
    except (OSError, ValueError):
        return None

    try:
        settings = prefs['extensions']['settings'][extension_id]
    except (KeyError, TypeError):
        return None

    return settings if isinstance(settings, dict) else None
