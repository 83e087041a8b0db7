import os
import re
from dataclasses import dataclass
from typing import Optional

from .errors import StringOffsetOutOfBounds, UnterminatedString
from .layout import RawEntry, StringPool

_SEPARATORS = re.compile(r"[\\/]+")
_DRIVE = re.compile(r"^[A-Za-z]:$")


@dataclass(frozen=True)
class ResolvedEntry:
    path: str
    is_file: bool
    size: int
    offset: int

    @property
    def is_dir(self) -> bool:
        return not self.is_file

    @property
    def archive_path(self) -> str:
        """Path with forward slashes, for matching and display."""
        return self.path.replace(os.sep, "/")


def read_pool_string(pool: StringPool, offset: Optional[int]) -> str:
    if offset is None:
        return ""
    if offset > len(pool.data):
        raise StringOffsetOutOfBounds(offset, len(pool.data))
    end = pool.data.find(b"\x00", offset)
    if end < 0:
        raise UnterminatedString(offset)
    # Names are not guaranteed to be valid UTF-8
    return pool.data[offset:end].decode("utf-8", errors="replace")


def normalize_path(directory: str, name: str) -> str:
    """Join a directory and a name into a relative, platform-native path.

    Both slash styles count as separators. Empty, "." and ".." segments are
    dropped, as is a leading drive marker like "C:", so the result can never be
    absolute or point above the directory it is extracted into.
    """
    segments = [s for s in _SEPARATORS.split(f"{directory}\\{name}") if s and s not in (".", "..")]
    if segments and _DRIVE.match(segments[0]):
        segments = segments[1:]
    return os.sep.join(segments)


def resolve_entry(pool: StringPool, raw: RawEntry) -> ResolvedEntry:
    directory = read_pool_string(pool, raw.dir_offset)
    name = read_pool_string(pool, raw.name_offset)
    is_file = raw.data_offset != 0
    return ResolvedEntry(
        path=normalize_path(directory, name),
        is_file=is_file,
        size=raw.file_size if is_file else 0,
        offset=raw.data_offset,
    )
