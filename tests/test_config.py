import pytest

from config import DEFAULT_USER_AGENT, Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "BOOKMARKS_DIR",
        "ARCHIVE_LEDGER_PATH",
        "ARCHIVE_USER_AGENT",
        "ARCHIVE_REQUEST_TIMEOUT",
        "ARCHIVE_MAX_REDIRECTS",
        "ARCHIVE_FALLBACK_MONTHS",
        "WAYBACK_BASE_URL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))

    config = Config()

    assert config.BOOKMARKS_DIR == str(tmp_path / "pinboard-bookmarks")
    assert config.LEDGER_PATH == str(tmp_path / ".archive_tool.lock")
    assert config.USER_AGENT == DEFAULT_USER_AGENT
    assert config.REQUEST_TIMEOUT == 30
    assert config.MAX_REDIRECTS == 5
    assert config.FALLBACK_SNAPSHOT_MONTHS == 6
    assert config.WAYBACK_BASE_URL == "https://web.archive.org/web"
    assert config.LOG_LEVEL == "INFO"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("BOOKMARKS_DIR", str(tmp_path / "marks"))
    monkeypatch.setenv("ARCHIVE_REQUEST_TIMEOUT", "10")
    monkeypatch.setenv("ARCHIVE_MAX_REDIRECTS", "0")
    monkeypatch.setenv("WAYBACK_BASE_URL", "https://mirror.example/web/")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Config()

    assert config.BOOKMARKS_DIR == str(tmp_path / "marks")
    assert config.REQUEST_TIMEOUT == 10
    assert config.MAX_REDIRECTS == 0
    assert config.WAYBACK_BASE_URL == "https://mirror.example/web"
    assert config.LOG_LEVEL == "DEBUG"
    assert "mirror.example" in str(config)


def test_invalid_values_are_all_reported(monkeypatch):
    monkeypatch.setenv("ARCHIVE_REQUEST_TIMEOUT", "soon")
    monkeypatch.setenv("ARCHIVE_MAX_REDIRECTS", "-1")
    monkeypatch.setenv("WAYBACK_BASE_URL", "ftp://archive.example")

    with pytest.raises(ValueError) as excinfo:
        Config()

    message = str(excinfo.value)
    assert "ARCHIVE_REQUEST_TIMEOUT" in message
    assert "ARCHIVE_MAX_REDIRECTS" in message
    assert "WAYBACK_BASE_URL" in message
