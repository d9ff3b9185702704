"""The ``config`` command: print the effective configuration."""

from __future__ import annotations

from pathlib import Path
from typing import List

from enum_tool.core import BasePlugin


class ConfigViewerPlugin(BasePlugin):
    name = "Config"
    command = "config"
    usage = "config show"
    description = "Display current configuration"
    priority = 90

    async def run(self, args: List[str], out_dir: Path) -> bool:
        if args[:1] != ["show"]:
            return self.fail(f"Usage: {self.usage}", out_dir)
        self.log("Current Configuration:", out_dir)
        for key, value in self.context.as_dict().items():
            shown = "n/a" if value is None else value
            self.log(f"  {key} = {shown}", out_dir)
        return True
