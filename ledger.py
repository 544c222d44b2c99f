"""
ledger.py - Remembers which bookmark files have already been checked.

The ledger maps each file's absolute path to the sha256 of its contents at the time
it was processed. A file is skipped on later runs until its contents change.
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class Ledger:
    processed_files: Dict[str, str] = field(default_factory=dict)
    last_run: Optional[datetime] = None


def _parse_timestamp(value) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unreadable last_run value %r", value)
        return None


def load_ledger(path: PathLike) -> Ledger:
    """
    Loads the ledger from ``path``. A missing or corrupt ledger yields an empty one;
    other read errors propagate.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return Ledger()

    try:
        data = json.loads(raw.decode("utf-8"))
    except ValueError as exc:  # includes UnicodeDecodeError
        logger.warning("Ledger %s is corrupt (%s); starting fresh", path, exc)
        return Ledger()
    if not isinstance(data, dict):
        logger.warning("Ledger %s has an unexpected layout; starting fresh", path)
        return Ledger()

    processed = data.get("processed_files") or {}
    if not isinstance(processed, dict):
        logger.warning("Ledger %s has no usable processed_files map; starting fresh", path)
        processed = {}

    return Ledger(
        processed_files={str(k): str(v) for k, v in processed.items()},
        last_run=_parse_timestamp(data.get("last_run")),
    )


def save_ledger(ledger: Ledger, path: PathLike) -> None:
    path = Path(path)
    ledger.last_run = datetime.now(timezone.utc)
    payload = {
        "processed_files": ledger.processed_files,
        "last_run": ledger.last_run.isoformat(),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    logger.debug("Saved ledger with %d entries to %s", len(ledger.processed_files), path)


def reset_ledger(path: PathLike) -> bool:
    """Deletes the ledger file. Returns True if there was one."""
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    logger.info("Removed ledger %s", path)
    return True


def compute_file_hash(path: PathLike) -> str:
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def ledger_key(path: PathLike) -> str:
    return str(Path(path).resolve())


def is_file_processed(ledger: Ledger, path: PathLike) -> bool:
    try:
        current = compute_file_hash(path)
    except OSError:
        return False
    return ledger.processed_files.get(ledger_key(path)) == current


def mark_file_processed(ledger: Ledger, path: PathLike) -> None:
    ledger.processed_files[ledger_key(path)] = compute_file_hash(path)
