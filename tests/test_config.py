import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import json
from pathlib import Path

from extension_scanner.config import (
    LINUX_BROWSERS, MACOS_BROWSERS, WINDOWS_BROWSERS, ScanConfig, browser_table, default_base_dir,
)
from extension_scanner.patterns import SEARCH_STRINGS


def _clear_env(monkeypatch):
    for name in ('USER_BASE_DIR', 'SCAN_WORKERS', 'SCAN_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)


def test_browser_tables_per_platform():
    assert list(browser_table('darwin')) == ['Chrome', 'Brave', 'Edge', 'Chromium']
    assert browser_table('darwin') == MACOS_BROWSERS
    assert browser_table('win32') == WINDOWS_BROWSERS == {'Chrome': 'AppData/Local/Google/Chrome/User Data'}
    assert browser_table('linux') == LINUX_BROWSERS


def test_default_base_dirs():
    assert default_base_dir('darwin') == Path('/Users')
    assert default_base_dir('linux') == Path('/home')


def test_defaults(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)

    config = ScanConfig.load()

    assert config.patterns == SEARCH_STRINGS
    assert 1 <= config.workers <= len(SEARCH_STRINGS)
    assert config.timeout is None
    assert config.verbose is False


def test_env_overrides_config_file(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'config.json').write_text(json.dumps(
        {'scanner': {'user_base_dir': '/from/file', 'workers': 2, 'timeout': 30}}
    ))

    config = ScanConfig.load()
    assert config.base_dir == Path('/from/file')
    assert config.workers == 2
    assert config.timeout == 30.0

    monkeypatch.setenv('USER_BASE_DIR', '/from/env')
    monkeypatch.setenv('SCAN_WORKERS', '4')
    config = ScanConfig.load()
    assert config.base_dir == Path('/from/env')
    assert config.workers == 4

    config = ScanConfig.load(base_dir='/from/cli', workers=None, verbose=True)
    assert config.base_dir == Path('/from/cli')
    assert config.workers == 4
    assert config.verbose is True


def test_dotenv_file_is_read(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    (tmp_path / '.env').write_text('USER_BASE_DIR=/from/dotenv\n')

    try:
        config = ScanConfig.load()
    finally:
        os.environ.pop("USER_BASE_DIR", None)

    assert config.base_dir == Path("/from/dotenv")


def test_invalid_values_are_ignored(monkeypatch, tmp_path, capsys):
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('SCAN_TIMEOUT', 'soon')
    (tmp_path / 'config.json').write_text('{broken')

    config = ScanConfig.load()

    assert config.timeout is None
    out = capsys.readouterr().out
    assert "Error loading config" in out
    assert "ignoring invalid SCAN_TIMEOUT" in out
