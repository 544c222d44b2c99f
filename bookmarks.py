"""
bookmarks.py - Reading and rewriting bookmark markdown files.

A bookmark is a markdown file whose frontmatter carries at least a ``link:`` field
and usually a ``date:`` field:

    ---
    title: Some article
    link: "https://example.com/article"
    date: 2021-03-04
    ---
    Notes about the article.

The frontmatter is parsed with plain string matching rather than a YAML parser, so
files that are not strictly valid YAML still work.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Union

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
PathLike = Union[str, Path]


class BookmarkUpdateError(Exception):
    """Raised when the old link can no longer be found in the bookmark file."""


@dataclass
class BookmarkFile:
    path: Path
    link: str = ""
    date: str = ""
    content: str = ""
    headers: Dict[str, str] = field(default_factory=dict)


def _read_text(path: PathLike) -> str:
    # newline="" keeps CRLF files byte-identical when they are written back.
    with open(path, "r", encoding="utf-8", newline="") as fh:
        return fh.read()


def _write_text(path: PathLike, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(text)


def _walk(directory: Path) -> Iterator[Path]:
    # Entries are visited in name order, so files and subdirectories interleave.
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir() and not entry.is_symlink():
            yield from _walk(entry)
        elif entry.name.lower().endswith(".md"):
            yield entry


def find_markdown_files(directory: PathLike) -> List[Path]:
    """
    Recursively collects every ``*.md`` file (case-insensitive) below ``directory``,
    in lexical order of their paths.

    Raises OSError when the directory is missing, is not a directory, or contains
    a subdirectory that cannot be listed.
    """
    root = Path(directory)
    if not root.exists():
        raise FileNotFoundError(f"No such directory: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    return list(_walk(root))


def extract_yaml_value(line: str) -> str:
    """Returns the value after the first colon, trimmed and stripped of quotes."""
    idx = line.find(":")
    if idx == -1:
        return ""
    return line[idx + 1:].strip().strip("\"'")


def parse_bookmark_file(path: PathLike) -> BookmarkFile:
    """
    Reads a bookmark file and pulls the ``link`` and ``date`` values out of its
    frontmatter. Read and decode errors propagate to the caller.
    """
    text = _read_text(path)
    bookmark = BookmarkFile(path=Path(path))

    lines = text.split("\n")
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        bookmark.content = text
        return bookmark

    body_start = len(lines)
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONTMATTER_DELIMITER:
            body_start = i + 1
            break

        if line.startswith("link:"):
            bookmark.link = extract_yaml_value(line)
        elif line.startswith("date:"):
            bookmark.date = extract_yaml_value(line)

        idx = line.find(":")
        if idx > 0:
            bookmark.headers[line[:idx].strip()] = line

    bookmark.content = "\n".join(lines[body_start:])
    return bookmark


def extract_main_content(path: PathLike) -> str:
    """
    Returns the markdown body below the frontmatter, or the whole text when the
    file has none. Empty when the frontmatter never closes.
    """
    lines = [line.rstrip("\r") for line in _read_text(path).split("\n")]
    if lines[-1] == "":
        lines.pop()

    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return "\n".join(lines)

    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONTMATTER_DELIMITER:
            return "\n".join(lines[i + 1:])
    return ""


def update_bookmark_file(bookmark: BookmarkFile, new_url: str) -> None:
    """
    Replaces the bookmark's link with ``new_url`` on disk.

    Every ``link:`` field holding the old link is rewritten, keeping its quoting.
    When no such field matches, the first literal occurrence of the old link is
    replaced instead.
    """
    if not bookmark.link:
        raise BookmarkUpdateError(f"{bookmark.path} has no link to replace")

    text = _read_text(bookmark.path)

    pattern = re.compile(
        r"(link:\s*[\"']?)" + re.escape(bookmark.link) + r"([\"']?\s*)"
    )
    updated = pattern.sub(lambda m: m.group(1) + new_url + m.group(2), text)

    if updated == text:
        logger.debug("No link field matched in %s; falling back to plain replace", bookmark.path)
        updated = text.replace(bookmark.link, new_url, 1)

    if updated == text:
        raise BookmarkUpdateError(f"link {bookmark.link!r} not found in {bookmark.path}")

    _write_text(bookmark.path, updated)
