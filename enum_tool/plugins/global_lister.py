"""
global_lister.py
----------------

The ``ld`` command: list the files and directories a server exposes through
its own index pages, recursively, without any probing.  The listing is
written to ``listing.json`` in the session directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from enum_tool.core import BasePlugin
from enum_tool.lister import run_flat_list
from enum_tool.report import Reporter


class GlobalListerPlugin(BasePlugin):
    name = "GlobalLister"
    command = "ld"
    usage = "ld [url]"
    description = "List global directories/files recursively"
    priority = 20

    async def run(self, args: List[str], out_dir: Path) -> bool:
        url = self.context.require_target(args[0] if args else None)
        reporter = Reporter(
            no_color=self.context.no_color,
            verbose=self.context.verbose,
            log_file=out_dir / "scanner.log",
        )
        lister = await run_flat_list(url, self.context, reporter=reporter)
        with open(out_dir / "listing.json", "w", encoding="utf-8") as f:
            json.dump({"root": url, "pages": lister.listing}, f, indent=2)
        self.log(f"Listed {len(lister.listing)} pages under {url}", out_dir, level="DEBUG")
        return True
