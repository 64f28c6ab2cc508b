"""Logging setup for the application."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | int = "INFO") -> None:
    """Install a stream handler on the ``src`` logger tree once."""
    global _configured
    root = logging.getLogger("src")
    root.setLevel(level if isinstance(level, int) else level.upper())
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True


def redact_database_url(url: str) -> str:
    """Strip credentials from a database URL before it is logged."""
    if "@" not in url:
        return url[:30]
    scheme = url.split("://", 1)[0]
    return f"{scheme}://...@{url.rsplit('@', 1)[1]}"
