#!/usr/bin/env python3
"""
archive_tool.py - Main entry point for the bookmark archiver.

Checks bookmark markdown files for dead links and replaces them with archived
versions from the Wayback Machine.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import ledger as ledger_store
from bookmarks import BookmarkUpdateError, find_markdown_files, parse_bookmark_file, update_bookmark_file
from config import Config, get_config
from http_client import create_session
from link_archiver import ArchiveLookupError, find_archived_version
from link_health import LinkCheckError, check_url

logger = logging.getLogger(__name__)

USAGE_EXAMPLES = """\
Examples:
  archive-tool                    # Use default ~/pinboard-bookmarks
  archive-tool ./my-bookmarks     # Use custom directory
  archive-tool --dry-run          # Report dead links without touching files
"""


@dataclass
class RunSummary:
    total: int = 0
    skipped: int = 0
    checked: int = 0
    dead: int = 0
    replaced: int = 0
    errors: int = 0


def _int_at_least(minimum: int):
    def parse(value: str) -> int:
        try:
            number = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
        if number < minimum:
            raise argparse.ArgumentTypeError(f"must be >= {minimum}, got {number}")
        return number

    return parse


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archive-tool",
        description=(
            "A tool to check bookmark files for dead links and replace them "
            "with archived versions."
        ),
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=config.BOOKMARKS_DIR,
        help=f"Path to directory containing bookmark markdown files (default: {config.BOOKMARKS_DIR})",
    )
    parser.add_argument("--ledger", default=config.LEDGER_PATH, help="Where processed-file hashes are kept")
    parser.add_argument(
        "--timeout",
        type=_int_at_least(1),
        default=config.REQUEST_TIMEOUT,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--max-redirects",
        type=_int_at_least(0),
        default=config.MAX_REDIRECTS,
        help="Give up on a link after this many redirects",
    )
    parser.add_argument("--dry-run", action="store_true", help="Report replacements without rewriting files")
    parser.add_argument("--reset-ledger", action="store_true", help="Forget previously processed files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _progress(index: int, total: int, summary: RunSummary) -> None:
    print(
        f"\rProcessing [{index}/{total}] - Checked: {summary.checked}, "
        f"Dead: {summary.dead}, Replaced: {summary.replaced}, Errors: {summary.errors}",
        end="",
        flush=True,
    )


def process_files(
    files: List[Path],
    ledger: ledger_store.Ledger,
    session,
    summary: RunSummary,
    *,
    timeout: Optional[int] = None,
    dry_run: bool = False,
) -> RunSummary:
    """Runs the check → lookup → rewrite pipeline over ``files`` one at a time."""
    mark = (lambda path: None) if dry_run else (lambda path: ledger_store.mark_file_processed(ledger, path))

    for index, path in enumerate(files, start=1):
        _progress(index, len(files), summary)

        try:
            bookmark = parse_bookmark_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error parsing %s: %s", path, exc)
            summary.errors += 1
            continue

        if not bookmark.link:
            mark(path)
            continue

        summary.checked += 1

        try:
            is_dead = check_url(session, bookmark.link, timeout=timeout)
        except LinkCheckError as exc:
            logger.error("Error checking %s: %s", bookmark.link, exc)
            summary.errors += 1
            continue

        if not is_dead:
            mark(path)
            continue

        summary.dead += 1

        try:
            archived_url = find_archived_version(session, bookmark.link, bookmark.date, timeout=timeout)
        except ArchiveLookupError as exc:
            logger.error("Error finding archive for %s: %s", bookmark.link, exc)
            summary.errors += 1
            continue

        if not archived_url:
            print(f"\nNo archive found for: {bookmark.link}")
            mark(path)
            continue

        if dry_run:
            print(f"\nWould replace: {bookmark.link}\n  -> {archived_url}")
            continue

        try:
            update_bookmark_file(bookmark, archived_url)
            mark(path)
        except (BookmarkUpdateError, OSError, UnicodeDecodeError) as exc:
            logger.error("Error updating %s: %s", path, exc)
            summary.errors += 1
            continue

        summary.replaced += 1
        print(f"\n✓ Replaced: {bookmark.link}\n  -> {archived_url}")

    return summary


def run(
    directory,
    *,
    ledger_path,
    timeout: Optional[int] = None,
    max_redirects: Optional[int] = None,
    dry_run: bool = False,
    reset: bool = False,
    session=None,
) -> Optional[RunSummary]:
    """
    Processes every new or changed bookmark under ``directory``.

    Returns the run summary, or None when the directory or ledger cannot be read.
    """
    print(f"Scanning directory: {directory}")

    try:
        files = find_markdown_files(directory)
    except OSError as exc:
        logger.error("Error reading directory: %s", exc)
        return None

    try:
        if reset and dry_run:
            ledger = ledger_store.Ledger()
        else:
            if reset:
                ledger_store.reset_ledger(ledger_path)
            ledger = ledger_store.load_ledger(ledger_path)
    except OSError as exc:
        logger.error("Error loading ledger file: %s", exc)
        return None

    pending = [path for path in files if not ledger_store.is_file_processed(ledger, path)]
    summary = RunSummary(total=len(files), skipped=len(files) - len(pending))
    print(f"Found {summary.total} markdown files ({summary.skipped} already processed, {len(pending)} new)")

    if not pending:
        print("All files have been processed. Nothing to do.")
        return summary

    if session is None:
        session = create_session(max_redirects=max_redirects)

    try:
        process_files(pending, ledger, session, summary, timeout=timeout, dry_run=dry_run)
    finally:
        if not dry_run:
            try:
                ledger_store.save_ledger(ledger, ledger_path)
            except OSError as exc:
                logger.error("Error saving ledger file: %s", exc)

    print(
        f"\n\nDone! Checked: {summary.checked}, Dead: {summary.dead}, Replaced: {summary.replaced}, "
        f"Errors: {summary.errors}, Skipped: {summary.skipped}"
    )
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """Run the archiver from the command line."""
    try:
        config = get_config()
    except ValueError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2

    args = build_parser(config).parse_args(argv)

    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL, logging.INFO),
    )
    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    try:
        summary = run(
            args.directory,
            ledger_path=args.ledger,
            timeout=args.timeout,
            max_redirects=args.max_redirects,
            dry_run=args.dry_run,
            reset=args.reset_ledger,
        )
    except KeyboardInterrupt:
        print("\n👋 Stopped by user")
        return 130

    return 0 if summary is not None else 1


if __name__ == "__main__":
    sys.exit(main())
