from datetime import datetime
from types import SimpleNamespace

import pytest
import requests

from config import get_config
from link_archiver import ArchiveLookupError, find_archived_version, parse_date_to_timestamp

WAYBACK = "https://web.archive.org/web"


class FakeWayback:
    """
    Maps requested URLs to (status, final_url) pairs, or to an exception.
    Unknown URLs answer 404.
    """

    def __init__(self, routes):
        self.routes = routes
        self.requested = []

    def head(self, url, timeout=None, allow_redirects=None):
        self.requested.append(url)
        outcome = self.routes.get(url, (404, url))
        if isinstance(outcome, Exception):
            raise outcome
        status, final_url = outcome
        return SimpleNamespace(status_code=status, url=final_url, close=lambda: None)


@pytest.mark.parametrize(
    "date_str, expected",
    [
        ("2021-03-04T10:15:00Z", "20210304"),
        ("2021-03-04T23:30:00-05:00", "20210304"),
        ("2021-03-04T10:15:00.123456+02:00", "20210304"),
        ("2021-03-04 10:15:00", "20210304"),
        ("2021-03-04", "20210304"),
        ("March 4, 2021", "20210304"),
        ("Mar 4, 2021", "20210304"),
    ],
)
def test_parse_date_to_timestamp_known_formats(date_str, expected):
    assert parse_date_to_timestamp(date_str) == expected


@pytest.mark.parametrize("date_str", ["", "sometime last spring", "04/03/2021"])
def test_parse_date_to_timestamp_falls_back_to_six_months_ago(monkeypatch, date_str):
    monkeypatch.setattr(get_config(), "FALLBACK_SNAPSHOT_MONTHS", 6)

    assert parse_date_to_timestamp(date_str, now=datetime(2024, 10, 19)) == "20240419"


def test_parse_date_fallback_clamps_to_end_of_month(monkeypatch):
    monkeypatch.setattr(get_config(), "FALLBACK_SNAPSHOT_MONTHS", 6)

    assert parse_date_to_timestamp("", now=datetime(2023, 8, 31)) == "20230228"
    assert parse_date_to_timestamp("", now=datetime(2024, 3, 15)) == "20230915"


def test_find_archived_version_prefers_capture_near_bookmark_date():
    original = "https://example.com/post"
    snapshot = f"{WAYBACK}/20190512083000/{original}"
    session = FakeWayback({f"{WAYBACK}/20190512/{original}": (200, snapshot)})

    result = find_archived_version(session, original, "2019-05-12", base_url=WAYBACK)

    assert result == snapshot
    assert session.requested == [f"{WAYBACK}/20190512/{original}"]


def test_find_archived_version_falls_back_to_any_capture():
    original = "https://example.com/post"
    any_capture = f"{WAYBACK}/20150101000000/{original}"
    session = FakeWayback(
        {
            f"{WAYBACK}/20190512/{original}": (404, f"{WAYBACK}/20190512/{original}"),
            f"{WAYBACK}/*/{original}": (200, any_capture),
        }
    )

    result = find_archived_version(session, original, "2019-05-12", base_url=WAYBACK)

    assert result == any_capture
    assert session.requested[-1] == f"{WAYBACK}/*/{original}"


def test_find_archived_version_returns_none_without_captures():
    session = FakeWayback({})

    assert find_archived_version(session, "https://example.com/never", "2019-05-12", base_url=WAYBACK) is None
    assert len(session.requested) == 2


def test_find_archived_version_raises_when_wayback_unreachable():
    original = "https://example.com/post"
    session = FakeWayback({f"{WAYBACK}/20190512/{original}": requests.ConnectionError("offline")})

    with pytest.raises(ArchiveLookupError):
        find_archived_version(session, original, "2019-05-12", base_url=WAYBACK)


def test_find_archived_version_uses_configured_endpoint(monkeypatch):
    monkeypatch.setattr(get_config(), "WAYBACK_BASE_URL", "https://mirror.example/web")
    session = FakeWayback({})

    find_archived_version(session, "https://example.com", "2020-01-01")

    assert session.requested[0] == "https://mirror.example/web/20200101/https://example.com"
