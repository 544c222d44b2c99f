"""
link_health.py - Checks whether a saved link is still reachable.

A link counts as dead when the server answers 404 or 410, or when it cannot be
reached at all, which includes links with a missing or unsupported scheme.
Everything else (including 403 and 5xx) is treated as alive.
"""

import logging
from typing import Optional

import requests

from http_client import head, is_malformed_url_error

logger = logging.getLogger(__name__)

DEAD_STATUS_CODES = {404, 410}


class LinkCheckError(Exception):
    """Raised when a link cannot be parsed as a URL."""


def check_url(session, url: str, *, timeout: Optional[int] = None) -> bool:
    """
    Returns True when ``url`` is dead.
    """
    try:
        response = head(session, url, timeout=timeout)
    except requests.RequestException as exc:
        if is_malformed_url_error(exc):
            raise LinkCheckError(f"invalid URL {url!r}: {exc}") from exc
        logger.debug("Treating unreachable link as dead: %s (%s)", url, exc)
        return True

    logger.debug("HEAD %s -> %s", url, response.status_code)
    return response.status_code in DEAD_STATUS_CODES
