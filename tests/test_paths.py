import os

import pytest

from vtpack.errors import StringOffsetOutOfBounds, UnterminatedString
from vtpack.layout import RawEntry, StringPool
from vtpack.paths import normalize_path, read_pool_string, resolve_entry


def _raw(name_offset, dir_offset, size=0, data_offset=0):
    return RawEntry(
        name_offset=name_offset,
        dir_offset=dir_offset,
        unk1=0,
        file_size=size,
        unk2=0,
        data_offset=data_offset,
        unk3=0,
        unk4=0,
    )


POOL = StringPool(b"\\data\\maps\x00level1.map\x00\x00")


def test_read_pool_string():
    assert read_pool_string(POOL, 0) == "\\data\\maps"
    assert read_pool_string(POOL, 11) == "level1.map"
    assert read_pool_string(POOL, 22) == ""


def test_sentinel_reads_as_empty():
    assert read_pool_string(POOL, None) == ""


def test_offset_past_pool_end():
    with pytest.raises(StringOffsetOutOfBounds):
        read_pool_string(POOL, len(POOL) + 1)


def test_missing_terminator():
    with pytest.raises(UnterminatedString):
        read_pool_string(StringPool(b"abc"), 1)


def test_invalid_utf8_is_replaced():
    assert read_pool_string(StringPool(b"caf\xe9\x00"), 0) == "caf\ufffd"


@pytest.mark.parametrize(
    "directory, name, expected",
    [
        ("\\data\\maps", "level1.map", ["data", "maps", "level1.map"]),
        ("\\data\\maps\\", "level1.map", ["data", "maps", "level1.map"]),
        ("\\\\data", "\\x.txt", ["data", "x.txt"]),
        ("", "readme.txt", ["readme.txt"]),
        ("\\data", "", ["data"]),
        ("/data/sub", "x", ["data", "sub", "x"]),
        ("\\..\\..\\etc", "passwd", ["etc", "passwd"]),
        ("data\\.\\sub", "..", ["data", "sub"]),
        ("C:\\Windows", "win.ini", ["Windows", "win.ini"]),
        ("", "", []),
    ],
)
def test_normalize_path(directory, name, expected):
    assert normalize_path(directory, name) == os.sep.join(expected)


@pytest.mark.parametrize("directory", ["", "\\", "\\\\", "/", "\\/\\", "C:", "\\C:\\"])
@pytest.mark.parametrize("name", ["", "\\", "f", "\\f", "//f"])
def test_normalized_paths_are_relative(directory, name):
    path = normalize_path(directory, name)
    assert not path.startswith(("/", "\\"))
    assert not os.path.isabs(path)
    assert not os.path.splitdrive(path)[0]
    assert ".." not in path.split(os.sep)


def test_resolve_file_entry():
    entry = resolve_entry(POOL, _raw(11, 0, size=42, data_offset=0x1000))
    assert entry.is_file and not entry.is_dir
    assert entry.path == os.path.join("data", "maps", "level1.map")
    assert entry.archive_path == "data/maps/level1.map"
    assert entry.size == 42
    assert entry.offset == 0x1000


def test_resolve_directory_entry_has_no_size():
    entry = resolve_entry(POOL, _raw(None, 0, size=999, data_offset=0))
    assert entry.is_dir and not entry.is_file
    assert entry.size == 0
    assert entry.path == os.path.join("data", "maps")


def test_sentinel_directory_omits_segment():
    entry = resolve_entry(POOL, _raw(11, None, size=1, data_offset=8))
    assert entry.path == "level1.map"


def test_resolved_entry_is_immutable():
    entry = resolve_entry(POOL, _raw(11, 0, size=1, data_offset=8))
    with pytest.raises(AttributeError):
        entry.path = "elsewhere"
