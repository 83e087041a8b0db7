from __future__ import annotations

import fnmatch
import os
from typing import BinaryIO, List, Optional

from .extractor import ExtractReport, export_entries, read_payload
from .layout import Header, RawEntry, StringPool, read_layout
from .logging_utils import get_logger
from .paths import ResolvedEntry, resolve_entry

logger = get_logger(__name__)


class Archive:
    """A decoded vtPack archive.

    Keeps the raw header, string pool and entry records next to the resolved
    entries. Payloads are not loaded; every read goes back to the byte source
    the archive was decoded from.
    """

    def __init__(self, header: Header, pool: StringPool, raw_entries: List[RawEntry]) -> None:
        self.header = header
        self.pool = pool
        self.raw_entries = raw_entries
        self._entries: List[ResolvedEntry] = []
        self._resolve_entries()

    def _resolve_entries(self) -> None:
        self._entries = [resolve_entry(self.pool, raw) for raw in self.raw_entries]

    @classmethod
    def decode(cls, source: BinaryIO) -> "Archive":
        header, pool, raw_entries = read_layout(source)
        archive = cls(header, pool, raw_entries)
        logger.debug("Decoded %d entries", len(archive._entries))
        return archive

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "Archive":
        with open(path, "rb") as fh:
            return cls.decode(fh)

    @property
    def version(self) -> int:
        return int(self.header.version)

    def list_entries(self) -> List[ResolvedEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def find(self, pattern: str) -> Optional[ResolvedEntry]:
        """Return the first file entry whose path matches a glob, ignoring case."""
        pattern = pattern.replace("\\", "/").lower()
        for entry in self._entries:
            if entry.is_file and fnmatch.fnmatch(entry.archive_path.lower(), pattern):
                return entry
        return None

    def read_entry(self, source: BinaryIO, entry: ResolvedEntry) -> bytes:
        return read_payload(source, entry)

    def export_all(self, source: BinaryIO, output_root: str | os.PathLike) -> ExtractReport:
        return export_entries(source, self._entries, output_root)


def decode(source: BinaryIO) -> Archive:
    return Archive.decode(source)
