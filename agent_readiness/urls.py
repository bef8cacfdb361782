from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

from .errors import InvalidUrl, NotAFullUrl

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*://")
DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class Target:
    """Canonical origin of a scoring run plus the bare host used for same-site checks."""

    origin: str
    base_domain: str


def strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def normalize_url(raw: str) -> Target:
    """Turn free-form input like ``www.Stripe.com/docs`` into ``https://stripe.com``.

    Raises InvalidUrl for input that can't be parsed as an http(s) URL and
    NotAFullUrl for a host without a TLD. Idempotent, and ``www.`` is ignored,
    so the origin is safe to use as a cache key.
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidUrl("Invalid URL. Try something like: stripe.com")

    if not _SCHEME_RE.match(value):
        value = "https://" + value

    try:
        parsed = urlparse(value)
        port = parsed.port
    except ValueError:
        raise InvalidUrl("Invalid URL. Try something like: stripe.com") from None

    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    if scheme not in DEFAULT_PORTS or not host or any(c.isspace() for c in host):
        raise InvalidUrl("Invalid URL. Try something like: stripe.com")

    host = strip_www(host)
    if "." not in host.strip("."):
        shown = raw.strip()
        raise NotAFullUrl(f'"{shown}" doesn\'t look like a full URL. Try: {shown}.com')

    netloc = host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"
    return Target(origin=f"{scheme}://{netloc}", base_domain=host)


def same_site(host: str, base_domain: str) -> bool:
    """True for the base domain itself or any of its subdomains."""
    host = strip_www(host.lower())
    return host == base_domain or host.endswith("." + base_domain)
