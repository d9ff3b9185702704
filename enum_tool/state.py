"""
state.py
--------

The two pieces of state shared by every task of one enumeration tree: the
visited-URL set and the per-base "not found" baseline cache.  Both are owned
by an ``EnumerationSession``; nothing here is process global.
"""

from __future__ import annotations

import asyncio
import random
from typing import Dict, Iterator, Set

from enum_tool.urls import resolve

SIGNATURE_BYTES = 512
NONCE_PREFIX = "__enum_nonce_"


def signature_of(body: str) -> bytes:
    """First ``SIGNATURE_BYTES`` bytes of the UTF-8 encoded body."""
    return body.encode("utf-8")[:SIGNATURE_BYTES]


class VisitedSet:
    """URLs already claimed by an enumerator call (exact string identity)."""

    def __init__(self) -> None:
        self._urls: Set[str] = set()
        self._lock = asyncio.Lock()

    async def visit_and_check(self, url: str) -> bool:
        """Mark ``url`` visited; True only for the call that inserted it."""
        async with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._urls))


class BaselineCache:
    """Memoised soft-404 signatures keyed by the exact base URL string.

    A hit is a plain dict read.  A miss takes the per-key lock and checks
    again, so concurrent first-time callers issue a single probe and all
    observe the same value.  Empty signatures (probe failed) are cached too.
    """

    def __init__(self, fetcher) -> None:
        self.fetcher = fetcher
        self._signatures: Dict[str, bytes] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self.probe_count = 0

    @staticmethod
    def nonce_path() -> str:
        return f"{NONCE_PREFIX}{random.randint(0, 2**31 - 1)}/"

    async def signature(self, base_url: str) -> bytes:
        cached = self._signatures.get(base_url)
        if cached is not None:
            return cached
        lock = self._locks.setdefault(base_url, asyncio.Lock())
        async with lock:
            cached = self._signatures.get(base_url)
            if cached is not None:
                return cached
            self.probe_count += 1
            result = await self.fetcher.fetch(resolve(base_url, self.nonce_path()))
            sig = signature_of(result.body) if result.usable else b""
            self._signatures[base_url] = sig
            return sig

    def __contains__(self, base_url: object) -> bool:
        return base_url in self._signatures

    def __len__(self) -> int:
        return len(self._signatures)
