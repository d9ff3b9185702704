import asyncio
from typing import Dict, List, Optional

import pytest

from enum_tool.core import ScanContext
from enum_tool.fetcher import FetchFailure, FetchResult
from enum_tool.report import Reporter

NOT_FOUND_PAGE = "<html><head><title>404 Not Found</title></head><body>Nothing here</body></html>"


class FakeFetcher:
    """In-memory stand-in for ``enum_tool.fetcher.Fetcher``.

    URLs present in ``pages`` answer 200 with their body; any other URL
    answers 404 with ``not_found`` (empty means the request fails).
    """

    def __init__(self, pages: Optional[Dict[str, str]] = None, statuses: Optional[Dict[str, int]] = None,
                 not_found: str = NOT_FOUND_PAGE) -> None:
        self.pages = dict(pages or {})
        self.statuses = dict(statuses or {})
        self.not_found = not_found
        self.calls: List[str] = []
        self.status_calls: List[str] = []

    def _status(self, url: str) -> int:
        return self.statuses.get(url, 200 if url in self.pages else 404)

    async def fetch(self, url, cookies=None, user_agent=None):
        self.calls.append(url)
        await asyncio.sleep(0)
        body = self.pages.get(url, self.not_found)
        if not body:
            return FetchResult.failed(url, FetchFailure.CONNECTION)
        return FetchResult(url=url, body=body, status=self._status(url))

    async def fetch_status(self, url):
        self.status_calls.append(url)
        await asyncio.sleep(0)
        if url not in self.pages and not self.not_found:
            return FetchResult.failed(url, FetchFailure.CONNECTION)
        return FetchResult(url=url, status=self._status(url))


@pytest.fixture
def reporter():
    return Reporter(no_color=True, quiet=True)


@pytest.fixture
def context(tmp_path):
    return ScanContext(results_dir=tmp_path / "results", no_color=True)
