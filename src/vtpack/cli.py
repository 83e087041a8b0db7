import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from .archive import Archive
from .config import load_settings
from .errors import DecodeError, TruncatedPayload
from .logging_utils import get_logger
from .watcher import run_watcher

logger = get_logger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vtpack",
        description="List and extract the contents of vtPack (.vpk) archives.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="print every entry in an archive")
    p_list.add_argument("archive")

    p_extract = sub.add_parser("extract", help="extract the whole tree")
    p_extract.add_argument("archive")
    p_extract.add_argument("-o", "--output", help="output directory (deleted and recreated)")

    p_show = sub.add_parser("show", help="write one file's contents to stdout")
    p_show.add_argument("archive")
    p_show.add_argument("pattern", help="glob matched against entry paths, e.g. '*/readme.txt'")

    p_watch = sub.add_parser("watch", help="extract pack files as they appear in a directory")
    p_watch.add_argument("directory")
    p_watch.add_argument("-o", "--output", help="directory that receives one folder per pack")
    p_watch.add_argument("--cooldown", type=int, help="seconds to ignore repeat events for a file")
    return parser


def cmd_list(args) -> int:
    archive = Archive.from_path(args.archive)
    for entry in archive.list_entries():
        print(f"> {entry.path} (file: {entry.is_file})")
    return 0


def cmd_extract(args, settings) -> int:
    output = args.output or os.path.join(settings.output_dir, f"{Path(args.archive).stem}_out")
    with open(args.archive, "rb") as source:
        archive = Archive.decode(source)
        print(f"extracting {len(archive)} entries to {output}/")
        report = archive.export_all(source, output)
    if not report.ok:
        print(
            f"extraction completed with {len(report.failures)} failures",
            file=sys.stderr,
        )
        return 1
    print("extraction completed successfully")
    return 0


def cmd_show(args) -> int:
    with open(args.archive, "rb") as source:
        archive = Archive.decode(source)
        entry = archive.find(args.pattern)
        if entry is None:
            print(f"error: file matching '{args.pattern}' not found in archive", file=sys.stderr)
            return 1
        print(f"Found file in archive: {entry.archive_path}", file=sys.stderr)
        data = archive.read_entry(source, entry)
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    settings = load_settings()
    try:
        if args.command == "list":
            return cmd_list(args)
        if args.command == "extract":
            return cmd_extract(args, settings)
        if args.command == "show":
            return cmd_show(args)
        run_watcher(
            args.directory,
            args.output or settings.output_dir,
            cooldown=args.cooldown if args.cooldown is not None else settings.watch_cooldown,
        )
        return 0
    except (DecodeError, TruncatedPayload) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
