import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from extension_scanner.locator import ExtensionLocator, scan_roots

from chrome_tree import BRAVE_MAC, TEST_BROWSERS, make_extension, profile_dir


def _locate(base):
    return ExtensionLocator(base, TEST_BROWSERS).locate()


def test_empty_base_dir_yields_no_entries(tmp_path):
    assert _locate(tmp_path) == []


def test_missing_base_dir_yields_no_entries(tmp_path):
    assert _locate(tmp_path / 'nope') == []


def test_enumerates_users_browsers_and_profiles(tmp_path):
    make_extension(tmp_path, 'aaaa', user='alice')
    make_extension(tmp_path, 'bbbb', user='alice', profile='Profile 1', data_files={'000003.log': 'x'})
    make_extension(tmp_path, 'cccc', user='bob', browser_root=BRAVE_MAC)

    entries = _locate(tmp_path)
    keys = [e.key for e in entries]

    assert keys == [
        ('alice', 'Chrome', 'Default', 'aaaa'),
        ('alice', 'Chrome', 'Profile 1', 'bbbb'),
        ('bob', 'Brave', 'Default', 'cccc'),
    ]
    assert all(e.matches == {} for e in entries)


def test_entry_paths(tmp_path):
    code_dir, data_dir = make_extension(tmp_path, 'aaaa', data_files={'000003.log': 'x'})
    make_extension(tmp_path, 'bbbb')

    by_id = {e.extension_id: e for e in _locate(tmp_path)}
    prof = profile_dir(tmp_path)

    assert by_id['aaaa'].code_path == code_dir
    assert by_id['aaaa'].data_path == data_dir
    assert by_id['aaaa'].preferences_path == prof / 'Preferences'
    assert by_id['bbbb'].data_path is None


def test_ignores_non_profile_directories(tmp_path):
    make_extension(tmp_path, 'aaaa', profile='System Profile')
    make_extension(tmp_path, 'bbbb', profile='Guest Profile')
    make_extension(tmp_path, 'cccc', profile='Profile1')
    make_extension(tmp_path, 'dddd', profile='Profile 12')

    assert [e.extension_id for e in _locate(tmp_path)] == ['dddd']


def test_profile_without_extensions_dir_is_skipped(tmp_path):
    prof = profile_dir(tmp_path)
    (prof / 'Local Extension Settings' / 'aaaa').mkdir(parents=True)

    assert _locate(tmp_path) == []


def test_files_in_extensions_dir_are_not_entries(tmp_path):
    make_extension(tmp_path, 'aaaa')
    (profile_dir(tmp_path) / 'Extensions' / 'Temp.txt').write_text('x')

    assert [e.extension_id for e in _locate(tmp_path)] == ['aaaa']


def test_unreadable_profile_is_skipped(tmp_path):
    make_extension(tmp_path, 'aaaa', profile='Default')
    make_extension(tmp_path, 'bbbb', profile='Profile 1')
    locked = profile_dir(tmp_path, profile='Profile 1') / 'Extensions'
    locked.chmod(0)
    try:
        ids = [e.extension_id for e in _locate(tmp_path)]
    finally:
        locked.chmod(0o755)

    assert 'aaaa' in ids
    if os.geteuid() != 0:
        assert 'bbbb' not in ids


def test_scan_roots_deduplicates(tmp_path):
    make_extension(tmp_path, 'aaaa', data_files={'a.log': 'x'})
    make_extension(tmp_path, 'bbbb')
    entries = _locate(tmp_path)

    roots = scan_roots(entries + entries)

    assert len(roots) == 3
    assert roots[0] == entries[0].code_path
    assert roots[1] == entries[0].data_path


def test_symlinked_user_and_extension_dirs_are_followed(tmp_path):
    real = tmp_path / 'real'
    make_extension(real, 'aaaa', user='alice')
    make_extension(real, 'bbbb', user='carol')
    base = tmp_path / 'Users'
    base.mkdir()
    (base / 'alice').symlink_to(real / 'alice', target_is_directory=True)
    ext_dir = profile_dir(base, user='bob') / 'Extensions'
    ext_dir.mkdir(parents=True)
    (ext_dir / 'bbbb').symlink_to(profile_dir(real, user='carol') / 'Extensions' / 'bbbb',
                                  target_is_directory=True)

    keys = [e.key for e in _locate(base)]

    assert keys == [
        ('alice', 'Chrome', 'Default', 'aaaa'),
        ('bob', 'Chrome', 'Default', 'bbbb'),
    ]


def test_relative_base_dir_gives_absolute_paths(tmp_path, monkeypatch):
    make_extension(tmp_path / 'Users', 'aaaa')
    monkeypatch.chdir(tmp_path)

    entries = _locate('Users')

    assert len(entries) == 1
    assert entries[0].code_path.is_absolute()
    assert entries[0].code_path == profile_dir(os.path.join(os.getcwd(), 'Users')) / 'Extensions' / 'aaaa'
