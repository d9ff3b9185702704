# enum_tool/plugins/dir_enumerator.py

"""
dir_enumerator.py
-----------------

The ``enum`` command: recursive directory discovery against the connected
URL (or the URL given as argument).

Directories come from two sources:

- links on each page that end in ``/`` (trusted, never probed);
- a fixed dictionary of commonly hidden names, each probed and scored
  against five heuristics (soft-404 baseline, status code, listing
  phrases, page title, self-redirect).

Outputs in the session directory:
- enum.json     (every directory found, with its source and signals)
- scanner.log   (the full indented report)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from enum_tool.core import BasePlugin
from enum_tool.enumerator import run_enumeration
from enum_tool.report import Reporter


class DirEnumeratorPlugin(BasePlugin):
    name = "DirEnumerator"
    command = "enum"
    usage = "enum [url]"
    description = "Enumerate directories on the global URL"
    priority = 10

    async def run(self, args: List[str], out_dir: Path) -> bool:
        url = self.context.require_target(args[0] if args else None)
        reporter = Reporter(
            no_color=self.context.no_color,
            verbose=self.context.verbose,
            log_file=out_dir / "scanner.log",
        )
        self.log(f"Enumerating {url} (max depth {self.context.max_enum_depth})", out_dir, level="DEBUG")
        session = await run_enumeration(url, self.context, reporter=reporter)

        with open(out_dir / "enum.json", "w", encoding="utf-8") as f:
            json.dump(
                {
                    "root": url,
                    "max_depth": session.max_depth,
                    "visited": list(session.visited),
                    "no_response": sorted(session.failed),
                    "directories": [hit.as_dict() for hit in session.results],
                },
                f,
                indent=2,
            )

        probed = sum(1 for hit in session.results if hit.source == "probe")
        self.log(
            f"Completed enumeration of {url}: {len(session.visited)} URLs visited, "
            f"{len(session.results)} directories ({probed} inferred by probing)",
            out_dir,
            level="OK",
        )
        return True
