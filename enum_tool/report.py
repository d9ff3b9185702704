"""
report.py
---------

Depth-indented report stream for the crawl engine.

Concurrent branches write to the same ``Reporter``; each call emits one
complete line so output from sibling branches interleaves by line, never
mid-line.  Every line is also kept in ``lines`` so callers (and tests) can
inspect what was reported without scraping stdout.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO
import sys

from enum_tool.core import colourise


@dataclass(frozen=True)
class ReportLine:
    depth: int
    level: str
    text: str

    def render(self) -> str:
        return "  " * self.depth + self.text


class Reporter:
    def __init__(
        self,
        no_color: bool = False,
        verbose: bool = False,
        log_file: Optional[Path] = None,
        stream: Optional[TextIO] = None,
        quiet: bool = False,
    ) -> None:
        self.no_color = no_color
        self.verbose = verbose
        self.log_file = log_file
        self.stream = stream
        self.quiet = quiet
        self.lines: List[ReportLine] = []

    def line(self, depth: int, text: str, level: str = "INFO") -> None:
        entry = ReportLine(depth, level.upper(), text)
        if entry.level == "DEBUG" and not self.verbose:
            return
        self.lines.append(entry)
        if not self.quiet:
            out = self.stream or sys.stdout
            out.write("  " * depth + colourise(text, entry.level, self.no_color) + "\n")
        if self.log_file is not None:
            try:
                with open(self.log_file, "a", encoding="utf-8") as fh:
                    fh.write(entry.render() + "\n")
            except OSError as exc:
                sys.stderr.write(f"[Reporter] could not write {self.log_file}: {exc}\n")

    def debug(self, text: str, depth: int = 0) -> None:
        self.line(depth, text, level="DEBUG")

    def texts(self, level: Optional[str] = None) -> List[str]:
        """Plain texts of recorded lines, optionally filtered by level."""
        return [l.text for l in self.lines if level is None or l.level == level.upper()]
