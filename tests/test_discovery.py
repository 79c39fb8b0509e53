import os

import pytest

from nodelistdb.discovery import (
    ConflictKey,
    find_nodelist_files,
    is_nodelist_file,
    parse_conflict_key,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("NODELIST.123", True),
        ("nodelist", True),
        ("Nodelist_1995_002", True),
        ("z2-123.95", False),
        ("readme.txt", False),
        (os.path.join("nodelist", "other.txt"), False),
    ],
)
def test_is_nodelist_file(name, expected):
    assert is_nodelist_file(name) is expected


def test_parse_conflict_key_source_example():
    message = 'PRIMARY KEY or UNIQUE constraint violated: duplicate key "2, 28, 2, 1988-09-09, 0"'
    assert parse_conflict_key(message) == ConflictKey(zone=2, net=28, node=2, date="1988-09-09")


def test_parse_conflict_key_address():
    key = parse_conflict_key('duplicate key "2, 28, 2, 1988-09-09, 0"')
    assert key is not None
    assert key.address == "2:28/2"


@pytest.mark.parametrize(
    "message",
    [
        "some other failure",
        'duplicate key "2, 28, 2"',
        'duplicate key "x, 28, 2, 1988-09-09, 0"',
        'duplicate key "2,28,2,1988-09-09,0"',
    ],
)
def test_parse_conflict_key_rejects(message):
    assert parse_conflict_key(message) is None


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(";A test\n")
    return str(path)


def test_find_in_directory_non_recursive(tmp_path):
    second = _touch(tmp_path / "nodelist.200")
    first = _touch(tmp_path / "NODELIST.100")
    _touch(tmp_path / "readme.txt")
    _touch(tmp_path / "sub" / "nodelist.300")
    assert find_nodelist_files(tmp_path) == [first, second]


def test_find_in_directory_recursive(tmp_path):
    top = _touch(tmp_path / "nodelist.100")
    nested = _touch(tmp_path / "sub" / "nodelist.300")
    deeper = _touch(tmp_path / "sub" / "deep" / "nodelist.400")
    result = find_nodelist_files(tmp_path, recursive=True)
    assert sorted(result) == sorted([top, nested, deeper])
    assert len(result) == 3


def test_find_single_file(tmp_path):
    single = _touch(tmp_path / "nodelist.050")
    assert find_nodelist_files(single) == [single]


def test_find_single_non_nodelist_file(tmp_path):
    other = _touch(tmp_path / "notes.txt")
    assert find_nodelist_files(other) == []


def test_find_empty_directory(tmp_path):
    assert find_nodelist_files(tmp_path, recursive=True) == []


def test_find_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="path not found"):
        find_nodelist_files(tmp_path / "missing")