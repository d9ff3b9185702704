"""
fetcher.py
----------

The fetcher boundary of the crawl engine.

``Fetcher`` wraps one ``aiohttp.ClientSession`` and turns every outcome into
a ``FetchResult``.  Failures are tagged with a reason, but the engine only
ever asks ``result.usable``: a timeout, a refused connection and an empty
body all mean "no usable signal".  All requests share one semaphore, which
bounds the number of in-flight requests for the whole crawl tree.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Dict, Optional

import aiohttp

from enum_tool.core import ScanContext
from enum_tool.report import Reporter


class FetchFailure(enum.Enum):
    NONE = "none"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_ERROR = "http-error"
    EMPTY = "empty"


@dataclass
class FetchResult:
    url: str
    body: str = ""
    status: Optional[int] = None
    reason: FetchFailure = FetchFailure.NONE

    @property
    def ok(self) -> bool:
        return self.reason is FetchFailure.NONE

    @property
    def usable(self) -> bool:
        return self.ok and bool(self.body)

    @property
    def status_text(self) -> str:
        return "" if self.status is None else str(self.status)

    @classmethod
    def failed(cls, url: str, reason: FetchFailure, status: Optional[int] = None) -> "FetchResult":
        return cls(url=url, status=status, reason=reason)


class Fetcher:
    """HTTP GET helper shared by every task of one crawl.

    Use as an async context manager::

        async with Fetcher(context) as fetcher:
            result = await fetcher.fetch("http://example.com/")
    """

    def __init__(self, context: ScanContext, reporter: Optional[Reporter] = None) -> None:
        self.context = context
        self.reporter = reporter
        self.sem = asyncio.Semaphore(max(1, int(context.max_concurrency)))
        self.timeout = aiohttp.ClientTimeout(total=context.fetch_timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "Fetcher":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def open(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.context.user_agent},
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def _headers(self, cookies: Optional[str], user_agent: Optional[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if user_agent:
            headers["User-Agent"] = user_agent
        cookies = cookies or self.context.cookies
        if cookies:
            headers["Cookie"] = cookies
        return headers

    def _debug(self, message: str) -> None:
        if self.reporter is not None:
            self.reporter.debug(message)

    async def fetch(
        self,
        url: str,
        cookies: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> FetchResult:
        """GET ``url`` and return its decoded body.

        Redirects are not followed: a 3xx answer is itself the result, so a
        redirect with an empty body is an unusable fetch.
        """
        return await self._get(url, cookies, user_agent, read_body=True)

    async def fetch_status(self, url: str) -> FetchResult:
        """GET ``url`` and only keep the status code."""
        return await self._get(url, None, None, read_body=False)

    async def _get(
        self,
        url: str,
        cookies: Optional[str],
        user_agent: Optional[str],
        read_body: bool,
    ) -> FetchResult:
        session = await self.open()
        headers = self._headers(cookies, user_agent)
        async with self.sem:
            try:
                async with session.get(url, allow_redirects=False, headers=headers) as resp:
                    if not read_body:
                        return FetchResult(url=url, status=resp.status)
                    text = await resp.text(errors="ignore")
            except asyncio.TimeoutError:
                self._debug(f"timeout: {url}")
                return FetchResult.failed(url, FetchFailure.TIMEOUT)
            except aiohttp.ClientResponseError as exc:
                self._debug(f"bad response from {url}: {exc}")
                return FetchResult.failed(url, FetchFailure.HTTP_ERROR, exc.status)
            except (aiohttp.ClientError, ValueError) as exc:
                # ValueError covers URLs aiohttp refuses to parse
                self._debug(f"fetch failed: {url} ({exc})")
                return FetchResult.failed(url, FetchFailure.CONNECTION)
        if not text:
            return FetchResult(url=url, status=resp.status, reason=FetchFailure.EMPTY)
        return FetchResult(url=url, body=text, status=resp.status)
