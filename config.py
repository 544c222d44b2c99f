# config.py - Configuration management

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; BookmarkArchiver/1.0)"


def _home_path(name: str) -> str:
    """Returns ``~/<name>``, or ``name`` relative to the cwd when there is no home."""
    try:
        return str(Path.home() / name)
    except RuntimeError:
        return name


class Config:
    """
    Configuration class to manage paths and HTTP settings
    """

    def __init__(self):
        # Paths
        self.BOOKMARKS_DIR = os.getenv("BOOKMARKS_DIR") or _home_path("pinboard-bookmarks")
        self.LEDGER_PATH = os.getenv("ARCHIVE_LEDGER_PATH") or _home_path(".archive_tool.lock")

        # HTTP Configuration
        self.USER_AGENT = os.getenv("ARCHIVE_USER_AGENT", DEFAULT_USER_AGENT)
        self.REQUEST_TIMEOUT = os.getenv("ARCHIVE_REQUEST_TIMEOUT", "30")
        self.MAX_REDIRECTS = os.getenv("ARCHIVE_MAX_REDIRECTS", "5")

        # Wayback Machine
        self.WAYBACK_BASE_URL = os.getenv("WAYBACK_BASE_URL", "https://web.archive.org/web").rstrip("/")
        self.FALLBACK_SNAPSHOT_MONTHS = os.getenv("ARCHIVE_FALLBACK_MONTHS", "6")

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Validate settings
        self._validate_config()

    def _validate_config(self):
        """Coerce numeric settings and check that every value is usable"""
        problems = []

        numeric_vars = {
            "ARCHIVE_REQUEST_TIMEOUT": ("REQUEST_TIMEOUT", 1),
            "ARCHIVE_MAX_REDIRECTS": ("MAX_REDIRECTS", 0),
            "ARCHIVE_FALLBACK_MONTHS": ("FALLBACK_SNAPSHOT_MONTHS", 0),
        }
        for env_name, (attr, minimum) in numeric_vars.items():
            raw = getattr(self, attr)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                problems.append(f"{env_name} must be an integer (got {raw!r})")
                continue
            if value < minimum:
                problems.append(f"{env_name} must be >= {minimum} (got {value})")
            setattr(self, attr, value)

        if not self.WAYBACK_BASE_URL.startswith(("http://", "https://")):
            problems.append(f"WAYBACK_BASE_URL must be an http(s) URL (got {self.WAYBACK_BASE_URL!r})")

        if problems:
            raise ValueError(
                "Invalid configuration:\n- " + "\n- ".join(problems) + "\n"
                "Please check your environment or .env file."
            )

    def __str__(self):
        """String representation for debugging"""
        return f"""
Config Status:
- Bookmarks directory: {self.BOOKMARKS_DIR}
- Ledger: {self.LEDGER_PATH}
- Wayback endpoint: {self.WAYBACK_BASE_URL}
- Timeout: {self.REQUEST_TIMEOUT}s, max redirects: {self.MAX_REDIRECTS}
- Log level: {self.LOG_LEVEL}
        """


_config = None


def get_config() -> Config:
    """Returns the shared Config, building it on first use."""
    global _config
    if _config is None:
        _config = Config()
    return _config
