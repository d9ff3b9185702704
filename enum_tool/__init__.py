"""
Enum Tool Package
=================

Recursive web-content discovery.  Given a root URL the engine crawls the
HTTP tree, follows links that point at directories, and infers directories
that are not linked by probing a fixed dictionary of common names and
scoring each probe against several heuristics.

The engine lives in ``urls``, ``fetcher``, ``state``, ``classifier``,
``enumerator`` and ``lister``; every command of the command-line tool is a
plugin in ``enum_tool.plugins``.  The main entry point is
``enum_tool.main.main``.
"""

__all__ = [
    "core",
    "urls",
    "fetcher",
    "state",
    "classifier",
    "enumerator",
    "lister",
    "report",
    "plugins",
    "main",
]
