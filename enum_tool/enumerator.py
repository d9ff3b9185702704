"""
enumerator.py
-------------

Recursive directory enumeration.

For every base URL the enumerator collects the directories the page links to
and additionally probes a fixed dictionary of commonly hidden directory
names, scoring each probe with ``enum_tool.classifier``.  All probes of one
level finish before any recursion starts; recursion into every found
directory then runs concurrently and is joined before the call returns.

State shared by the whole tree (visited set, baseline cache) belongs to the
``EnumerationSession``, so two enumerations never see each other's state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from enum_tool.classifier import Classification, Signals, classify
from enum_tool.core import ScanContext
from enum_tool.fetcher import Fetcher
from enum_tool.report import Reporter
from enum_tool.state import BaselineCache, VisitedSet
from enum_tool.urls import extract_links, is_directory_link, resolve

COMMON_DIRECTORIES = (
    "admin/", "private/", "secret/", "hidden/", "config/", "backup/", "data/",
    "uploads/", "files/", "tmp/", "test/", "dev/", "logs/", "bin/", "cgi-bin/",
    ".git/", ".svn/", ".env/", ".htaccess", ".htpasswd", "db/", "db_backup/",
    "old/", "new/", "staging/", "beta/", "alpha/", "api/", "assets/", "images/",
    "css/", "js/",
)


@dataclass
class DirectoryHit:
    base_url: str
    name: str
    url: str
    depth: int
    source: str  # "link" or "probe"
    signals: Optional[Signals] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "name": self.name,
            "url": self.url,
            "depth": self.depth,
            "source": self.source,
            "score": self.signals.score if self.signals else None,
            "signals": self.signals.tags() if self.signals else [],
        }


@dataclass
class EnumerationSession:
    """Recursion parameters and shared state of one enumeration tree."""

    fetcher: Any
    reporter: Reporter
    max_depth: int = 3
    root_url: str = ""
    dictionary: Sequence[str] = COMMON_DIRECTORIES
    visited: VisitedSet = field(default_factory=VisitedSet)
    baselines: BaselineCache = field(init=False)
    results: List[DirectoryHit] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.baselines = BaselineCache(self.fetcher)

    async def run(self) -> "EnumerationSession":
        await self.enumerate(self.root_url, 0)
        return self

    async def enumerate(self, base_url: str, depth: int = 0) -> None:
        if depth > self.max_depth:
            return
        if not await self.visited.visit_and_check(base_url):
            return

        rep = self.reporter
        rep.line(depth, f"Enumerating: {base_url}", level="OK")
        page = await self.fetcher.fetch(base_url)
        if not page.usable:
            rep.line(depth, "(No response or empty)", level="WARN")
            self.failed.append(base_url)
            return

        baseline = await self.baselines.signature(base_url)

        known = {link for link in extract_links(page.body) if is_directory_link(link)}
        for name in sorted(known):
            self.results.append(DirectoryHit(base_url, name, resolve(base_url, name), depth, "link"))

        candidates = [name for name in self.dictionary if name not in known]
        outcomes = await asyncio.gather(
            *(classify(self.fetcher, base_url, name, baseline) for name in candidates),
            return_exceptions=True,
        )

        found = set(known)
        for name, outcome in zip(candidates, outcomes):
            if isinstance(outcome, BaseException):
                rep.line(depth, f"[ ERROR ] probe {name} failed: {outcome}", level="ERROR")
                continue
            if outcome is None or not outcome.accepted:
                continue
            found.add(name)
            self._record_probe(base_url, depth, outcome)

        branches = []
        for name in sorted(found):
            rep.line(depth, f"[{name}]", level="DIR")
            branches.append(self.enumerate(resolve(base_url, name), depth + 1))
        outcomes = await asyncio.gather(*branches, return_exceptions=True)
        for name, outcome in zip(sorted(found), outcomes):
            if isinstance(outcome, BaseException):
                rep.line(depth, f"[ ERROR ] branch {name} aborted: {outcome}", level="ERROR")

    def _record_probe(self, base_url: str, depth: int, result: Classification) -> None:
        self.results.append(
            DirectoryHit(base_url, result.name, result.url, depth, "probe", result.signals)
        )
        tags = " ".join(result.signals.tags())
        self.reporter.line(depth, f"[ OK ] {result.name}  ({tags})", level="OK")


async def run_enumeration(
    root_url: str,
    context: ScanContext,
    reporter: Optional[Reporter] = None,
    fetcher=None,
) -> EnumerationSession:
    """Enumerate ``root_url`` up to ``context.max_enum_depth`` levels deep.

    A fetcher is opened from the context unless one is supplied.  Returns
    the session once the whole recursive tree has completed.
    """
    reporter = reporter or Reporter(no_color=context.no_color, verbose=context.verbose)
    if fetcher is not None:
        session = EnumerationSession(fetcher, reporter, context.max_enum_depth, root_url)
        return await session.run()
    async with Fetcher(context, reporter) as owned:
        session = EnumerationSession(owned, reporter, context.max_enum_depth, root_url)
        return await session.run()
