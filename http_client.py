"""
http_client.py - Shared HTTP plumbing for link checks and archive lookups.
"""

import logging
from typing import Optional

import requests

from config import get_config

logger = logging.getLogger(__name__)

# Raised while parsing the URL, before anything touches the network. A missing or
# unsupported scheme is not in this list: such links are treated as unreachable.
MALFORMED_URL_ERRORS = (
    requests.exceptions.InvalidURL,
)


def create_session(
    user_agent: Optional[str] = None,
    max_redirects: Optional[int] = None,
) -> requests.Session:
    """
    Builds a session that identifies itself with the configured user agent.

    The session follows at most ``max_redirects`` redirects; one more raises
    ``requests.TooManyRedirects``.
    """
    config = get_config()
    session = requests.Session()
    session.headers["User-Agent"] = user_agent or config.USER_AGENT
    session.max_redirects = config.MAX_REDIRECTS if max_redirects is None else max_redirects
    return session


def head(session, url: str, *, timeout: Optional[int] = None) -> requests.Response:
    """Issues a HEAD request that follows redirects. Errors propagate to the caller."""
    response = session.head(
        url,
        timeout=timeout if timeout is not None else get_config().REQUEST_TIMEOUT,
        allow_redirects=True,
    )
    response.close()
    return response


def is_malformed_url_error(exc: BaseException) -> bool:
    return isinstance(exc, MALFORMED_URL_ERRORS)
