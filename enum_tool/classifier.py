"""
classifier.py
-------------

Scores a guessed directory name against five independent signals.

A probe whose fetch yields no usable body is not classified at all: the
candidate is absent from the results rather than rejected.  Each satisfied
signal adds one point and a candidate is accepted at ``ACCEPT_THRESHOLD``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from bs4 import BeautifulSoup  # type: ignore

from enum_tool.state import signature_of
from enum_tool.urls import resolve

ACCEPT_THRESHOLD = 2

# Substrings of the status text that count as "exists".  Matched as
# substrings, not compared numerically.
OK_STATUS_MARKERS = ("200", "301", "302")

DIR_LISTING_PATTERNS = (
    "Index of",
    "Parent Directory",
    "<title>Index of",
    "Directory listing for",
    "To Parent Directory",
)

TITLE_RE = re.compile(r"<title>(.*?)</title>", re.I)


@dataclass(frozen=True)
class Signals:
    not404: bool = False
    status_ok: bool = False
    looks_like_dir: bool = False
    title_ok: bool = False
    not_redirect: bool = False

    @property
    def score(self) -> int:
        return sum(1 for v in asdict(self).values() if v)

    def tags(self) -> List[str]:
        labels = [
            (self.not404, "not404"),
            (self.status_ok, "statusOK"),
            (self.looks_like_dir, "dirPattern"),
            (self.title_ok, "titleOK"),
            (self.not_redirect, "notRedirect"),
        ]
        return [label for fired, label in labels if fired]

    def as_dict(self) -> Dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class Classification:
    name: str
    url: str
    signals: Signals

    @property
    def score(self) -> int:
        return self.signals.score

    @property
    def accepted(self) -> bool:
        return self.score >= ACCEPT_THRESHOLD


def status_is_ok(status_text: str) -> bool:
    return any(marker in status_text for marker in OK_STATUS_MARKERS)


def looks_like_listing(body: str) -> bool:
    return any(pat in body for pat in DIR_LISTING_PATTERNS)


def title_is_ok(body: str) -> bool:
    m = TITLE_RE.search(body)
    title = m.group(1) if m else ""
    return bool(title) and "404" not in title and "Not Found" not in title


def is_self_redirect(body: str, base_url: str) -> bool:
    """True when a meta refresh tag points back at ``base_url``."""
    if "refresh" not in body.lower():
        return False
    soup = BeautifulSoup(body, "html.parser")
    for meta in soup.find_all("meta"):
        equiv = (meta.get("http-equiv") or "").strip().lower()
        if equiv == "refresh" and base_url in (meta.get("content") or ""):
            return True
    return False


def score_probe(body: str, status_text: str, base_url: str, baseline: bytes) -> Signals:
    return Signals(
        not404=signature_of(body) != baseline,
        status_ok=status_is_ok(status_text),
        looks_like_dir=looks_like_listing(body),
        title_ok=title_is_ok(body),
        not_redirect=not is_self_redirect(body, base_url),
    )


async def classify(fetcher, base_url: str, candidate: str, baseline: bytes) -> Optional[Classification]:
    """Probe ``candidate`` under ``base_url``; None when unreachable."""
    url = resolve(base_url, candidate)
    probe = await fetcher.fetch(url)
    if not probe.usable:
        return None
    status = await fetcher.fetch_status(url)
    signals = score_probe(probe.body, status.status_text, base_url, baseline)
    return Classification(name=candidate, url=url, signals=signals)
