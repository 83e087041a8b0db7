import struct

import pytest

NO_STRING = 0xFFFFFFFF


def build_pack(entries, version=1, unk=(0x11, 0x22, 0x33, 0x44)):
    """Assemble a vtPack archive in memory.

    entries is a list of (directory, name, data) tuples. directory or name may
    be None for the "no string" sentinel; data is None for directories.
    Layout: header, entry table, string pool, then file payloads.
    """
    wide = "<I" if version == 1 else "<Q"
    header_size = 6 + 4 + 8 + 2 * struct.calcsize(wide) + 4 + struct.calcsize(wide)
    pool_offset = header_size + 44 * len(entries)

    pool = bytearray()
    string_offsets = {}

    def intern(value):
        if value is None:
            return NO_STRING
        if value not in string_offsets:
            string_offsets[value] = len(pool)
            pool.extend(value.encode("utf-8") + b"\x00")
        return string_offsets[value]

    refs = [(intern(d), intern(n)) for d, n, _ in entries]

    payload = bytearray()
    payload_start = pool_offset + 4 + len(pool)
    table = bytearray()
    for (dir_off, name_off), (_, _, data) in zip(refs, entries):
        if data is None:
            size, data_offset = 0, 0
        else:
            size, data_offset = len(data), payload_start + len(payload)
            payload.extend(data)
        table += struct.pack("<IIIQQQII", name_off, dir_off, 0, size, 0, data_offset, 0, 0)

    header = b"vtPack" + struct.pack("<III", version, unk[0], unk[1])
    header += struct.pack(wide, unk[2]) + struct.pack(wide, unk[3])
    header += struct.pack("<I", len(entries)) + struct.pack(wide, pool_offset)
    assert len(header) == header_size

    return bytes(header + table + struct.pack("<I", len(pool)) + pool + payload)


@pytest.fixture
def make_pack():
    return build_pack


@pytest.fixture
def sample_entries():
    return [
        ("\\a", None, None),
        ("\\a\\", "b.txt", b"abc"),
        ("\\a\\c", "d.bin", b"\x00\x01\x02\x03\x04"),
        (None, "top.txt", b"top level"),
    ]
