"""
Scrape target normalization.

Turns the ``target`` query parameter into a well-formed device endpoint of
the form ``scheme://host[:port]``.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

from .exceptions import AddressError

# Default HTTP port used to communicate with Key Light devices.
KEYLIGHT_PORT = "9123"

ALLOWED_SCHEMES = ("http", "https")

# Host names, IPv4 addresses and unbracketed IPv6 literals.
_HOST_RE = re.compile(r"[A-Za-z0-9._~:-]+")


def normalize(raw: str) -> str:
    """Build a well-formed HTTP endpoint address from a scrape target."""
    # urlsplit silently strips some of these, so check before parsing.
    if any(c.isspace() or not c.isprintable() for c in raw):
        raise AddressError(f"invalid character in device address: {raw!r}")

    if "://" not in raw:
        # Assume that if no scheme is provided, this is host or host:port.
        return _normalize_host_port(raw)

    try:
        parts = urlsplit(raw)
        # Accessing the port validates it.
        parts.port
    except ValueError as exc:
        raise AddressError(f"invalid device URL {raw!r}: {exc}") from exc

    # Trim trailing slash for consistency.
    path = "" if parts.path == "/" else parts.path

    if (
        parts.scheme not in ALLOWED_SCHEMES
        or not parts.hostname
        or not _HOST_RE.fullmatch(parts.hostname)
        or path
        or parts.query
        or parts.fragment
    ):
        raise AddressError(f"invalid device URL: {raw!r}")

    return urlunsplit((parts.scheme, parts.netloc, "", "", ""))


def _normalize_host_port(s: str) -> str:
    try:
        host, port = _split_host_port(s)
    except AddressError:
        # Assume no port was provided and use the default.
        host, port = s, KEYLIGHT_PORT

    if not port:
        port = KEYLIGHT_PORT

    # Assume HTTP and verify the result by normalizing it again.
    return normalize(f"http://{_join_host_port(host, port)}")


def _split_host_port(s: str) -> tuple[str, str]:
    if s.startswith("["):
        end = s.find("]")
        if end < 0:
            raise AddressError(f"missing ']' in address {s!r}")
        rest = s[end + 1:]
        if not rest.startswith(":"):
            raise AddressError(f"missing port in address {s!r}")
        return s[1:end], rest[1:]

    host, sep, port = s.rpartition(":")
    if not sep:
        raise AddressError(f"missing port in address {s!r}")
    if ":" in host:
        raise AddressError(f"too many colons in address {s!r}")
    return host, port


def _join_host_port(host: str, port: str) -> str:
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
