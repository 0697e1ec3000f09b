"""
Quiet the dev-server access log for live component traffic.

Live components call their endpoint on every interaction, which floods the
``runserver`` output. The filter is wired up in ``LOGGING``::

    "filters": {"live_requests": {"()": "live_component.log.LiveRequestFilter"}},
    "loggers": {"django.server": {"filters": ["live_requests"], ...}},

Access records for paths under the live component URL prefix are dropped
below ``LIVE_COMPONENT_QUIET_LEVEL`` (``WARNING`` by default), so 4xx and
5xx answers still show up.
"""

import logging

from django.conf import settings
from django.urls import NoReverseMatch, reverse

DEFAULT_QUIET_LEVEL = "WARNING"


def endpoint_prefix() -> str:
    """Path prefix of the live component endpoints, or ``""`` when not routed."""
    try:
        path = reverse("live_component:render", args=["-"])
    except NoReverseMatch:
        return ""
    return path[:-1]


def request_path(record: logging.LogRecord) -> str | None:
    """Path from the request line of a ``django.server`` access record."""
    # args are ("GET /path?query HTTP/1.1", status, size)
    if not isinstance(record.args, tuple) or not record.args:
        return None
    parts = str(record.args[0]).split()
    if len(parts) < 2:
        return None
    return parts[1].split("?", 1)[0]


def quiet_level() -> int:
    level = getattr(settings, "LIVE_COMPONENT_QUIET_LEVEL", DEFAULT_QUIET_LEVEL)
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


class LiveRequestFilter(logging.Filter):
    """Drop low-level access records of live component requests."""

    def __init__(self, name=""):
        super().__init__(name)
        self._prefix = None

    @property
    def prefix(self) -> str:
        # Resolved on first use; the URLconf is not loaded yet when LOGGING is.
        if self._prefix is None:
            self._prefix = endpoint_prefix()
        return self._prefix

    def filter(self, record: logging.LogRecord) -> bool:
        if not super().filter(record):
            return False
        path = request_path(record)
        if path and self.prefix and path.startswith(self.prefix):
            return record.levelno >= quiet_level()
        return True
