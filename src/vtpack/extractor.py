import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterable, List, Tuple

from .errors import ExtractionFailed, TruncatedPayload, UnsafePath
from .layout import stream_size
from .logging_utils import get_logger
from .paths import ResolvedEntry

logger = get_logger(__name__)


@dataclass
class ExtractReport:
    """Outcome of one extraction pass.

    Extraction is best-effort: a failing entry is logged and recorded here and
    the remaining entries are still written.
    """

    output_root: Path
    extracted: int = 0
    setup_errors: List[OSError] = field(default_factory=list)
    failures: List[Tuple[ResolvedEntry, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.setup_errors and not self.failures

    def raise_for_failures(self) -> None:
        if not self.ok:
            raise ExtractionFailed(self.failures, self.setup_errors)


def read_payload(source: BinaryIO, entry: ResolvedEntry) -> bytes:
    if not entry.is_file:
        raise ValueError(f"{entry.path!r} is a directory")
    end = stream_size(source)
    # Size and offset are unchecked u64 values from the entry table.
    available = max(0, end - entry.offset)
    if entry.offset > end or entry.size > available:
        raise TruncatedPayload(entry.path, entry.size, available)
    source.seek(entry.offset)
    data = source.read(entry.size)
    if len(data) != entry.size:
        raise TruncatedPayload(entry.path, entry.size, len(data))
    return data


def _destination(output_root: Path, entry: ResolvedEntry) -> Path:
    root = output_root.resolve()
    full_path = (root / entry.path).resolve()
    if full_path != root and root not in full_path.parents:
        raise UnsafePath(f"{entry.path!r} resolves outside {root}")
    return full_path


def save_entry(source: BinaryIO, entry: ResolvedEntry, output_root) -> Path:
    """Write a single entry below output_root and return where it went."""
    full_path = _destination(Path(output_root), entry)
    if entry.is_dir:
        full_path.mkdir(parents=True, exist_ok=True)
        return full_path

    data = read_payload(source, entry)
    full_path.parent.mkdir(parents=True, exist_ok=True)
    with open(full_path, "wb") as out:
        out.write(data)
    return full_path


def _reset_output_root(output_root: Path, report: ExtractReport) -> None:
    if output_root.exists():
        try:
            if output_root.is_dir() and not output_root.is_symlink():
                shutil.rmtree(output_root)
            else:
                output_root.unlink()
        except OSError as exc:
            logger.error("Could not clear output directory %s: %s", output_root, exc)
            report.setup_errors.append(exc)
    try:
        output_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Could not create output directory %s: %s", output_root, exc)
        report.setup_errors.append(exc)


def export_entries(source: BinaryIO, entries: Iterable[ResolvedEntry], output_root) -> ExtractReport:
    output_root = Path(output_root)
    report = ExtractReport(output_root=output_root)
    _reset_output_root(output_root, report)

    for entry in entries:
        try:
            save_entry(source, entry, output_root)
        except (TruncatedPayload, UnsafePath, OSError) as exc:
            logger.error("Error extracting %s: %s", entry.path, exc)
            report.failures.append((entry, exc))
            continue
        report.extracted += 1
        logger.debug("Extracted %s", entry.path)

    logger.info(
        "Extracted %d entries to %s (%d failed)",
        report.extracted,
        output_root,
        len(report.failures),
    )
    return report


def export_all(source: BinaryIO, archive, output_root) -> ExtractReport:
    """Recreate the whole archive tree under output_root.

    output_root is deleted first, so anything already there is lost.
    """
    return export_entries(source, archive.list_entries(), output_root)
