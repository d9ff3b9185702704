"""
lister.py
---------

Flat recursive listing for servers with trustworthy directory indexes.

Unlike the enumerator this mode does no probing and keeps no visited set:
it trusts the links a page offers, prints files and directories, and
descends into every directory concurrently.  A link cycle is only stopped
by the depth bound.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from enum_tool.core import ScanContext
from enum_tool.fetcher import Fetcher
from enum_tool.report import Reporter
from enum_tool.urls import extract_links, resolve, split_links

# File extension -> report level, which selects the console colour
EXTENSION_LEVELS = {
    **dict.fromkeys(("c", "h", "cpp", "hpp"), "INFO"),
    **dict.fromkeys(("sh", "py", "pl", "rb"), "OK"),
    **dict.fromkeys(("txt", "md"), "WARN"),
    **dict.fromkeys(("zip", "tar", "gz", "rar"), "ERROR"),
    **dict.fromkeys(("json", "xml"), "DIR"),
    **dict.fromkeys(("jpg", "png", "gif"), "IMAGE"),
}


def file_level(name: str) -> str:
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return EXTENSION_LEVELS.get(ext, "FILE")


class FlatLister:
    def __init__(self, fetcher: Any, reporter: Reporter, max_depth: int = 5) -> None:
        self.fetcher = fetcher
        self.reporter = reporter
        self.max_depth = max_depth
        self.listing: Dict[str, Dict[str, List[str]]] = {}

    async def list(self, url: str, depth: int = 0) -> None:
        if depth > self.max_depth:
            return
        rep = self.reporter
        rep.line(depth, f"Listing: {url}", level="OK")
        page = await self.fetcher.fetch(url)
        if not page.usable:
            rep.line(depth, "(Failed to fetch or empty content)", level="WARN")
            return
        links = extract_links(page.body)
        if not links:
            rep.line(depth, "(No links found)", level="WARN")
            return
        directories, files = split_links(links)
        if not directories and not files:
            rep.line(depth, "(No files or directories found)", level="WARN")
            return

        self.listing[url] = {"directories": directories, "files": files}
        for name in files:
            rep.line(depth + 1, name, level=file_level(name))

        branches = []
        for name in directories:
            rep.line(depth, f"[{name}]", level="DIR")
            branches.append(self.list(resolve(url, name), depth + 1))
        outcomes = await asyncio.gather(*branches, return_exceptions=True)
        for name, outcome in zip(directories, outcomes):
            if isinstance(outcome, BaseException):
                rep.line(depth, f"[ ERROR ] branch {name} aborted: {outcome}", level="ERROR")


async def run_flat_list(
    root_url: str,
    context: ScanContext,
    reporter: Optional[Reporter] = None,
    fetcher=None,
) -> FlatLister:
    """List ``root_url`` recursively up to ``context.max_list_depth``."""
    reporter = reporter or Reporter(no_color=context.no_color, verbose=context.verbose)
    if fetcher is not None:
        lister = FlatLister(fetcher, reporter, context.max_list_depth)
        await lister.list(root_url)
        return lister
    async with Fetcher(context, reporter) as owned:
        lister = FlatLister(owned, reporter, context.max_list_depth)
        await lister.list(root_url)
        return lister
