"""Shared utilities for hosting-tools."""

from __future__ import annotations

import re

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def strip_scheme(url: str) -> str:
    """Remove the scheme from a URL.

    Args:
        url: URL such as ``https://site--pr1-abc.web.app``

    Returns:
        The URL without its scheme

    Example:
        >>> strip_scheme("https://app--pr1.web.app")
        'app--pr1.web.app'
        >>> strip_scheme("localhost")
        'localhost'
    """
    return _SCHEME_RE.sub("", url, count=1)


def resource_id(name: str) -> str:
    """Return the last segment of a resource name.

    Example:
        >>> resource_id("sites/app/channels/live")
        'live'
    """
    return name.rsplit("/", 1)[-1]


def site_from_name(name: str) -> str:
    """Return the site ID of a site-scoped resource name.

    Both the short and the project-qualified forms are accepted.

    Example:
        >>> site_from_name("sites/app/versions/v1")
        'app'
        >>> site_from_name("projects/p/sites/app/channels/live")
        'app'
    """
    parts = name.split("/")
    try:
        return parts[parts.index("sites") + 1]
    except (ValueError, IndexError):
        return ""


def format_ttl(ttl_millis: int | float) -> str:
    """Convert a duration in milliseconds to a protobuf duration string.

    Example:
        >>> format_ttl(604800000)
        '604800s'
        >>> format_ttl(1500)
        '1.5s'
    """
    seconds = ttl_millis / 1000
    if float(seconds).is_integer():
        return f"{int(seconds)}s"
    return f"{seconds}s"


def format_size(size: int) -> str:
    """Format byte size as human-readable string.

    Example:
        >>> format_size(1536)
        '1.5 KB'
    """
    if size < 0:
        return "0 B"

    size_float = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_float < 1024.0:
            if unit == "B":
                return f"{int(size_float)} {unit}"
            return f"{size_float:.1f} {unit}"
        size_float /= 1024.0
    return f"{size_float:.1f} PB"
