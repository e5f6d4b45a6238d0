"""
brandscore/utils/urls.py — canonical form for user-typed site addresses.
"""
from urllib.parse import urlparse

_SCHEMES = ("http://", "https://")


def normalize_url(raw: str) -> str:
    """
    Trim, force an explicit scheme (https:// by default) and drop trailing slashes.
    Never raises; garbage in produces a well-formed but unreachable URL.
    """
    url = (raw or "").strip()
    if not url.lower().startswith(_SCHEMES):
        url = f"https://{url}"
    scheme, _, rest = url.partition("://")
    return f"{scheme}://{rest.rstrip('/')}"


def extract_domain(url: str) -> str:
    """Hostname of the normalized URL, or the URL itself if nothing parses."""
    normalized = normalize_url(url)
    try:
        host = urlparse(normalized).hostname
    except ValueError:
        host = None
    return host or normalized
