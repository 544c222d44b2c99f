"""
link_archiver.py - Finds Wayback Machine captures for dead links.

The lookup first asks for the capture closest to the date the link was bookmarked,
then falls back to any capture at all. The Wayback Machine answers both with a
redirect to the chosen snapshot, so the final URL after redirects is the archive
link that ends up in the bookmark file.
"""

import calendar
import logging
from datetime import datetime
from typing import Optional

import requests

from config import get_config
from http_client import head

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d"
DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
)


class ArchiveLookupError(Exception):
    """Raised when the Wayback Machine could not be queried."""


def _months_before(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_date_to_timestamp(date_str: str, now: Optional[datetime] = None) -> str:
    """
    Converts a bookmark date into a Wayback ``YYYYMMDD`` timestamp.

    Dates that are empty or in an unknown format fall back to a few months
    before ``now`` (``ARCHIVE_FALLBACK_MONTHS``).
    """
    if date_str:
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(date_str, fmt).strftime(TIMESTAMP_FORMAT)
            except ValueError:
                continue
        logger.debug("Unrecognised bookmark date %r; using fallback timestamp", date_str)

    now = now or datetime.now()
    return _months_before(now, get_config().FALLBACK_SNAPSHOT_MONTHS).strftime(TIMESTAMP_FORMAT)


def _lookup(session, snapshot_url: str, timeout: Optional[int]) -> Optional[str]:
    try:
        response = head(session, snapshot_url, timeout=timeout)
    except requests.RequestException as exc:
        raise ArchiveLookupError(f"Wayback request failed for {snapshot_url}: {exc}") from exc

    if response.status_code == 200:
        return response.url
    logger.debug("Wayback returned %s for %s", response.status_code, snapshot_url)
    return None


def find_archived_version(
    session,
    original_url: str,
    bookmark_date: str,
    *,
    timeout: Optional[int] = None,
    base_url: Optional[str] = None,
) -> Optional[str]:
    """
    Returns the URL of a Wayback capture of ``original_url``, preferring the one
    nearest ``bookmark_date``, or None when nothing has been archived.
    """
    base_url = (base_url or get_config().WAYBACK_BASE_URL).rstrip("/")
    timestamp = parse_date_to_timestamp(bookmark_date)

    archived = _lookup(session, f"{base_url}/{timestamp}/{original_url}", timeout)
    if archived:
        return archived

    return _lookup(session, f"{base_url}/*/{original_url}", timeout)
