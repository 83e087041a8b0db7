import os
import time
from typing import Optional

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .archive import Archive
from .errors import DecodeError
from .logging_utils import get_logger

logger = get_logger(__name__)

PACK_SUFFIX = ".vpk"


class PackDropHandler(FileSystemEventHandler):
    """Extracts every pack file that shows up in a watched directory."""

    def __init__(
        self,
        output_dir: str,
        cooldown: int = 10,
        settle: float = 1.0,
        watch_dir: Optional[str] = None,
    ) -> None:
        self.output_dir = output_dir
        # Packs below watch_dir keep their subfolder under output_dir.
        self.watch_dir = watch_dir
        self.cooldown = cooldown
        # Seconds to wait for the writer to finish before reading.
        self.settle = settle
        self.last_triggered_time: dict[str, float] = {}

    def on_created(self, event) -> None:
        self._handle(event)

    def on_modified(self, event) -> None:
        self._handle(event)

    def _handle(self, event) -> None:
        if event.is_directory:
            return
        src_path = os.fsdecode(event.src_path)
        if not src_path.lower().endswith(PACK_SUFFIX):
            return
        current_time = time.time()
        last_time = self.last_triggered_time.get(src_path, 0)
        if current_time - last_time < self.cooldown:
            return
        self.last_triggered_time[src_path] = current_time
        logger.info("Detected pack file: %s", src_path)
        time.sleep(self.settle)
        self.extract(src_path)

    def output_path(self, src_path: str) -> str:
        folder, filename = os.path.split(os.path.abspath(src_path))
        stem = os.path.splitext(filename)[0]
        if self.watch_dir:
            relative = os.path.relpath(folder, os.path.abspath(self.watch_dir))
            if relative != os.curdir and not relative.startswith(os.pardir):
                return os.path.join(self.output_dir, relative, stem)
        return os.path.join(self.output_dir, stem)

    def extract(self, src_path: str):
        out_path = self.output_path(src_path)
        try:
            with open(src_path, "rb") as source:
                archive = Archive.decode(source)
                report = archive.export_all(source, out_path)
        except DecodeError as exc:
            logger.error("Skipping %s: %s", src_path, exc)
            return None
        except OSError as exc:
            logger.error("Could not read %s: %s", src_path, exc)
            return None
        if not report.ok:
            logger.warning("%s extracted with %d failures", src_path, len(report.failures))
        return report


def run_watcher(watch_dir: str, output_dir: str, cooldown: int = 10) -> None:
    logger.info("Starting pack monitor on: %s", watch_dir)
    event_handler = PackDropHandler(output_dir, cooldown=cooldown, watch_dir=watch_dir)
    observer = Observer()
    observer.schedule(event_handler, watch_dir, recursive=True)
    observer.start()
    logger.info("Monitor started. Waiting for '%s' files...", PACK_SUFFIX)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Monitor stopped by user.")
        observer.stop()
    observer.join()
