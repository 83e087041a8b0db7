"""
vtPack file layout (all integers little-endian):

magic               6 bytes     "vtPack" (not null-terminated)
version             uint32      1 or 2
unk1, unk2          uint32 x2
unk3, unk4          uint32 x2 (v1) / uint64 x2 (v2)
entry_count         uint32
string_pool_offset  uint32 (v1) / uint64 (v2), absolute

The entry table starts right after the header. The string pool lives at
string_pool_offset: a uint32 length followed by that many bytes of packed
NUL-terminated strings. Each entry is 44 bytes, see ENTRY_FORMAT.
"""
import enum
import io
import struct
from dataclasses import dataclass
from typing import BinaryIO, List, NamedTuple, Optional

from .errors import (
    MalformedHeader,
    TruncatedEntryTable,
    TruncatedPool,
    UnsupportedVersion,
)
from .logging_utils import get_logger

logger = get_logger(__name__)

MAGIC = b"vtPack"
NO_STRING = 0xFFFFFFFF

ENTRY_FORMAT = "<IIIQQQII"
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)


class FormatVersion(enum.IntEnum):
    V1 = 1
    V2 = 2

    @property
    def wide_format(self) -> str:
        """struct code for the fields whose width depends on the version."""
        return "<I" if self is FormatVersion.V1 else "<Q"


@dataclass(frozen=True)
class Header:
    version: FormatVersion
    unk1: int
    unk2: int
    unk3: int
    unk4: int
    entry_count: int
    string_pool_offset: int
    # Where the entry table begins, i.e. where the header ended.
    entries_offset: int


@dataclass(frozen=True)
class StringPool:
    data: bytes

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class RawEntry:
    name_offset: Optional[int]
    dir_offset: Optional[int]
    unk1: int
    file_size: int
    unk2: int
    data_offset: int
    unk3: int
    unk4: int

    @classmethod
    def unpack(cls, buf: bytes) -> "RawEntry":
        name_off, dir_off, unk1, size, unk2, data_off, unk3, unk4 = struct.unpack(ENTRY_FORMAT, buf)
        return cls(
            name_offset=None if name_off == NO_STRING else name_off,
            dir_offset=None if dir_off == NO_STRING else dir_off,
            unk1=unk1,
            file_size=size,
            unk2=unk2,
            data_offset=data_off,
            unk3=unk3,
            unk4=unk4,
        )


class Layout(NamedTuple):
    header: Header
    pool: StringPool
    entries: List[RawEntry]


def _read_field(source: BinaryIO, fmt: str) -> int:
    size = struct.calcsize(fmt)
    buf = source.read(size)
    if len(buf) != size:
        raise MalformedHeader("truncated header")
    return struct.unpack(fmt, buf)[0]


def read_header(source: BinaryIO) -> Header:
    magic = source.read(len(MAGIC))
    if magic != MAGIC:
        raise MalformedHeader(f"bad magic {magic!r}, expected {MAGIC!r}")

    raw_version = _read_field(source, "<I")
    try:
        version = FormatVersion(raw_version)
    except ValueError:
        raise UnsupportedVersion(raw_version) from None

    unk1 = _read_field(source, "<I")
    unk2 = _read_field(source, "<I")
    unk3 = _read_field(source, version.wide_format)
    unk4 = _read_field(source, version.wide_format)
    entry_count = _read_field(source, "<I")
    pool_offset = _read_field(source, version.wide_format)

    return Header(
        version=version,
        unk1=unk1,
        unk2=unk2,
        unk3=unk3,
        unk4=unk4,
        entry_count=entry_count,
        string_pool_offset=pool_offset,
        entries_offset=source.tell(),
    )


def stream_size(source: BinaryIO) -> int:
    """Total length of a seekable stream; the current position is kept."""
    position = source.tell()
    end = source.seek(0, io.SEEK_END)
    source.seek(position)
    return end


def read_string_pool(source: BinaryIO, offset: int) -> StringPool:
    end = stream_size(source)
    # Offsets come straight from the file and may not even fit a seek.
    if offset + 4 > end:
        raise TruncatedPool(f"string pool offset {offset:#x} is past the end of a {end} byte source")
    source.seek(offset)
    size_buf = source.read(4)
    if len(size_buf) != 4:
        raise TruncatedPool(f"no string pool length at offset {offset}")
    (size,) = struct.unpack("<I", size_buf)
    if size > end - offset - 4:
        raise TruncatedPool(f"string pool declares {size} bytes, only {end - offset - 4} available")
    data = source.read(size)
    if len(data) != size:
        raise TruncatedPool(f"string pool declares {size} bytes, only {len(data)} available")
    return StringPool(data)


def read_entries(source: BinaryIO, offset: int, count: int) -> List[RawEntry]:
    source.seek(offset)
    entries: List[RawEntry] = []
    for index in range(count):
        buf = source.read(ENTRY_SIZE)
        if len(buf) != ENTRY_SIZE:
            raise TruncatedEntryTable(f"entry table ends at entry {index} of {count}")
        entries.append(RawEntry.unpack(buf))
    return entries


def read_layout(source: BinaryIO) -> Layout:
    """Decode header, string pool and entry table from a seekable binary stream.

    The header is read from the stream's current position; the string pool is
    located by its absolute offset and the entry table by the end of the header.
    """
    header = read_header(source)
    logger.debug(
        "vtPack v%d header: %d entries, string pool at %#x",
        header.version,
        header.entry_count,
        header.string_pool_offset,
    )
    pool = read_string_pool(source, header.string_pool_offset)
    entries = read_entries(source, header.entries_offset, header.entry_count)
    return Layout(header, pool, entries)
