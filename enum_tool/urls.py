"""
urls.py
-------

URL joining and anchor extraction used by both crawl modes.

Both helpers are deliberately string based.  ``resolve`` does not try to be
RFC 3986 compliant (``urllib.parse.urljoin`` would rewrite ``a/b`` + ``c``
into ``a/c``); it always treats the base as a directory.  ``extract_links``
only looks at double-quoted ``href`` attributes of anchor tags and returns
them verbatim.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple

_ORIGIN_RE = re.compile(r"^https?://[^/]+")
_HREF_RE = re.compile(r'<a\s+(?:[^>]*?\s+)?href="([^"]*)"', re.I)

# Links that never denote a child directory
SKIP_LINKS = ("", "./", "../")


def resolve(base: str, relative: str) -> str:
    """Join ``relative`` onto ``base`` and return an absolute URL."""
    if not relative:
        return base
    if relative.startswith(("http://", "https://")):
        return relative
    if base.endswith("/"):
        base = base[:-1]
    if relative.startswith("/"):
        m = _ORIGIN_RE.match(base)
        if m:
            return m.group(0) + relative
        # Malformed base: degrade to plain concatenation
        return base + relative
    return f"{base}/{relative}"


def extract_links(html: str) -> List[str]:
    """Return every anchor ``href`` value in document order."""
    if not isinstance(html, str) or not html:
        return []
    return [m.group(1) for m in _HREF_RE.finditer(html)]


def is_directory_link(link: str) -> bool:
    return link not in SKIP_LINKS and link.endswith("/")


def split_links(links: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Partition links into (directories, files), dropping self/parent links."""
    directories: List[str] = []
    files: List[str] = []
    for link in links:
        if link in SKIP_LINKS:
            continue
        if link.endswith("/"):
            directories.append(link)
        else:
            files.append(link)
    return directories, files
