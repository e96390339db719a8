import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from pathlib import Path

from extension_scanner.attributor import MatchAttributor
from extension_scanner.models import ExtensionEntry, MatchRecord


def _entry(ext_id, code, data=None, profile='Default'):
    return ExtensionEntry(
        user='alice', browser='Chrome', profile=profile, extension_id=ext_id,
        code_path=Path(code), data_path=Path(data) if data else None,
    )


def test_records_join_code_and_data_paths():
    a = _entry('aaaa', '/p/Extensions/aaaa', '/p/Local Extension Settings/aaaa')
    b = _entry('bbbb', '/p/Extensions/bbbb')

    matched = MatchAttributor([a, b]).attribute([
        MatchRecord('/p/Extensions/aaaa/1.0/bg.js', '_ext_log'),
        MatchRecord('/p/Local Extension Settings/aaaa/000003.log', 'api/saveQR'),
    ])

    assert matched == [a]
    assert a.matches == {
        '/p/Extensions/aaaa/1.0/bg.js': {'_ext_log'},
        '/p/Local Extension Settings/aaaa/000003.log': {'api/saveQR'},
    }
    assert b.matches == {}


def test_duplicate_records_collapse():
    a = _entry('aaaa', '/p/Extensions/aaaa')
    record = MatchRecord('/p/Extensions/aaaa/x.js', '_ext_log')

    MatchAttributor([a]).attribute([record, record, MatchRecord('/p/Extensions/aaaa/x.js', '_ext_manage')])

    assert a.matches == {'/p/Extensions/aaaa/x.js': {'_ext_log', '_ext_manage'}}


def test_prefix_requires_path_component_boundary():
    a = _entry('aaaa', '/p/Extensions/aaaa')
    ab = _entry('aaaab', '/p/Extensions/aaaab')

    MatchAttributor([a, ab]).attribute([MatchRecord('/p/Extensions/aaaab/x.js', '_ext_log')])

    assert a.matches == {}
    assert list(ab.matches) == ['/p/Extensions/aaaab/x.js']


def test_nested_roots_prefer_longest():
    outer = _entry('outer', '/p/Extensions/outer')
    inner = _entry('inner', '/p/Extensions/outer/nested')

    MatchAttributor([outer, inner]).attribute([
        MatchRecord('/p/Extensions/outer/nested/x.js', '_ext_log'),
        MatchRecord('/p/Extensions/outer/y.js', '_ext_log'),
    ])

    assert list(inner.matches) == ['/p/Extensions/outer/nested/x.js']
    assert list(outer.matches) == ['/p/Extensions/outer/y.js']


def test_equal_roots_go_to_first_entry():
    first = _entry('same', '/p/Extensions/same', profile='Default')
    second = _entry('same', '/p/Extensions/same', profile='Profile 1')

    MatchAttributor([first, second]).attribute([MatchRecord('/p/Extensions/same/x.js', '_ext_log')])

    assert first.matches and not second.matches


def test_records_outside_known_roots_are_discarded():
    a = _entry('aaaa', '/p/Extensions/aaaa')

    matched = MatchAttributor([a]).attribute([MatchRecord('/elsewhere/x.js', '_ext_log')])

    assert matched == []
    assert a.matches == {}
