"""
core.py
-------

Core abstractions shared by the enumeration engine and the command plugins.

A ``ScanContext`` carries the effective configuration for one invocation of
the tool.  Every command (``enum``, ``ld``, ``scan`` ...) is implemented as a
subclass of ``BasePlugin`` living in ``enum_tool.plugins``; the
``PluginManager`` discovers those classes and maps command names onto
instances, and the ``CommandRunner`` creates a session directory and hands a
single command over to the matching plugin.
"""

from __future__ import annotations

import dataclasses
import importlib
import inspect
import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, Type

import toml


COLOUR_MAP = {
    "INFO": "\033[94m",  # blue
    "OK": "\033[92m",  # green
    "WARN": "\033[93m",  # yellow
    "ERROR": "\033[91m",  # red
    "DEBUG": "\033[90m",  # grey
    "DIR": "\033[95m",  # purple
    "FILE": "\033[90m",  # grey
    "IMAGE": "\033[38;5;213m",  # pink
}
RESET = "\033[0m"


class NotConnectedError(RuntimeError):
    """Raised when a command needs a target URL and none is configured."""


@dataclass
class ScanContext:
    """Holds configuration for a single invocation of the tool."""

    # The "global" URL the crawl commands operate on; None means not connected
    target_url: Optional[str] = None
    max_enum_depth: int = 3
    max_list_depth: int = 5
    fetch_timeout: float = 2.0  # seconds, per request
    user_agent: str = "Mozilla/5.0"
    cookies: Optional[str] = None
    scan_timeout: float = 1.0  # seconds, per port probe
    max_concurrency: int = 20  # in-flight HTTP requests
    results_dir: Path = field(default_factory=lambda: Path(os.getcwd()) / "results")
    no_color: bool = False
    verbose: bool = False
    plugins: List[str] = field(default_factory=list)
    additional_options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.results_dir = Path(self.results_dir)
        # Ensure the results directory exists
        self.results_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> "ScanContext":
        """Build a context from a TOML settings file.

        Keys may live at the top level or inside a ``[settings]`` table.
        Unknown keys are reported on stderr and skipped.  Keyword
        ``overrides`` that are not ``None`` take precedence over the file.
        """
        data = toml.load(str(path))
        settings = data.get("settings", data)
        known = {f.name: f for f in dataclasses.fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in settings.items():
            if key in ("plugins", "additional_options"):
                continue
            if key not in known:
                if not isinstance(raw, dict):
                    sys.stderr.write(f"[config] Ignoring unknown key: {key}\n")
                continue
            values[key] = _coerce(known[key], raw)
        if isinstance(settings.get("plugins"), list):
            values["plugins"] = [str(p) for p in settings["plugins"]]
        for key, value in overrides.items():
            if value is not None:
                values[key] = value
        return cls(**values)

    def as_dict(self) -> Dict[str, Any]:
        out = {}
        for f in dataclasses.fields(self):
            if f.name == "additional_options":
                continue
            value = getattr(self, f.name)
            out[f.name] = str(value) if isinstance(value, Path) else value
        return out

    def require_target(self, url: Optional[str] = None) -> str:
        """Return the URL to crawl or raise ``NotConnectedError``."""
        url = url or self.target_url
        if not url or url == "n/a":
            raise NotConnectedError(
                "No global URL connected. Use --url <url> or set target_url in the config file."
            )
        return url


def _coerce(f: dataclasses.Field, raw: Any) -> Any:
    # dataclass annotations are strings under ``from __future__ import annotations``
    kind = str(f.type)
    if kind == "int":
        return int(raw)
    if kind == "float":
        return float(raw)
    if kind == "bool":
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if kind == "Path":
        return Path(str(raw))
    return None if raw in ("", "n/a") and "Optional" in kind else str(raw)


def colourise(text: str, level: str, no_color: bool) -> str:
    if no_color:
        return text
    prefix = COLOUR_MAP.get(level.upper(), "")
    return f"{prefix}{text}{RESET}" if prefix else text


class BasePlugin:
    """Base class for all command plugins.

    Each plugin handles one command of the tool.  The framework calls
    ``setup`` once before the command runs, ``run`` with the raw command
    arguments, and ``teardown`` at the end.  ``run`` returns ``True`` when
    the command completed and ``False`` on a usage error.
    """

    name: str = "BasePlugin"
    command: str = ""
    usage: str = ""
    description: str = ""
    priority: int = 50  # plugins are listed in ascending order of priority

    def __init__(self, context: ScanContext) -> None:
        self.context = context

    # ------------------------------------------------------------------
    # Logging helper
    # Plugins should call this instead of using print() directly.  It
    # honours the colour setting and appends every message to the
    # scanner.log file in the session directory.
    def log(self, message: str, out_dir: Path, level: str = "INFO") -> None:
        """Log a message to both the console and a log file.

        :param message: The message to log.
        :param out_dir: The session directory where ``scanner.log`` lives.
        :param level: The severity level (INFO, OK, WARN, ERROR, DEBUG)
                      used only for colouring the console output.
        """
        if level.upper() == "DEBUG" and not self.context.verbose:
            return
        print(colourise(f"[{self.name}] {message}", level, self.context.no_color))
        try:
            with open(out_dir / "scanner.log", "a", encoding="utf-8") as fh:
                fh.write(f"[{self.name}] {level.upper()} {message}\n")
        except OSError as exc:
            sys.stderr.write(f"[{self.name}] could not write scanner.log: {exc}\n")

    def fail(self, message: str, out_dir: Path) -> bool:
        """Report a usage error and signal it to the caller."""
        self.log(f"[ FAIL ] {message}", out_dir, level="ERROR")
        return False

    async def setup(self) -> None:
        """Perform any one-time initialisation before ``run``."""
        return None

    async def run(self, args: List[str], out_dir: Path) -> bool:
        """Execute the command.

        :param args: The command arguments as split by the dispatcher.
        :param out_dir: Directory unique to this session where artifacts
                        and ``scanner.log`` are written.
        """
        raise NotImplementedError

    async def teardown(self) -> None:
        """Perform cleanup after ``run``."""
        return None


class PluginManager:
    """Loads command plugins and maps command names to instances.

    Built-in plugins live in ``enum_tool.plugins``.  Additional plugins can
    be supplied via the context's ``plugins`` list as dotted module paths.
    """

    def __init__(self, context: ScanContext) -> None:
        self.context = context
        self._registry: List[Type[BasePlugin]] = []
        self._instances: Dict[str, BasePlugin] = {}

    def discover_plugins(self) -> None:
        import enum_tool.plugins as pkg
        package_path = Path(pkg.__file__).parent
        for file in sorted(package_path.glob("*.py")):
            if file.name.startswith("_"):
                continue
            module = importlib.import_module(f"enum_tool.plugins.{file.stem}")
            self._register_from_module(module)

    def load_additional(self) -> None:
        for module_path in self.context.plugins:
            try:
                module = importlib.import_module(module_path)
            except ImportError as exc:
                print(f"[PluginManager] Failed to load plugin module {module_path}: {exc}")
                continue
            self._register_from_module(module)

    def _register_from_module(self, module: ModuleType) -> None:
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj is not BasePlugin and issubclass(obj, BasePlugin) and obj.command:
                if obj not in self._registry:
                    self._registry.append(obj)

    def instantiate_plugins(self) -> None:
        for cls in sorted(self._registry, key=lambda c: getattr(c, "priority", 50)):
            if cls.command in self._instances:
                print(f"[PluginManager] Duplicate command '{cls.command}' from {cls.__name__}; skipped")
                continue
            self._instances[cls.command] = cls(self.context)

    @property
    def commands(self) -> Dict[str, BasePlugin]:
        return dict(self._instances)

    def get(self, command: str) -> Optional[BasePlugin]:
        return self._instances.get(command)

    async def run_command(self, command: str, args: List[str], out_dir: Path) -> bool:
        """Run a single command.

        ``NotConnectedError`` propagates to the caller; any other exception
        raised by the plugin is printed and reported as a failed run.
        """
        plugin = self.get(command)
        if plugin is None:
            print(f"[PluginManager] Unknown command: {command}")
            return False
        await plugin.setup()
        try:
            return await plugin.run(args, out_dir)
        except NotConnectedError:
            raise
        except Exception as exc:
            print(f"[PluginManager] Error in {plugin.name} while running '{command}': {exc}")
            return False
        finally:
            await plugin.teardown()


class CommandRunner:
    """Creates the session directory and dispatches one command."""

    def __init__(self, context: ScanContext) -> None:
        self.context = context
        self.manager = PluginManager(context)
        self.manager.discover_plugins()
        self.manager.load_additional()
        self.manager.instantiate_plugins()

    def session_dir(self, command: str) -> Path:
        timestamp = int(time.time())
        path = self.context.results_dir / command / f"session_{timestamp}"
        path.mkdir(parents=True, exist_ok=True)
        return path

    async def run(self, command: str, args: List[str]) -> bool:
        out_dir = self.session_dir(command)
        return await self.manager.run_command(command, args, out_dir)
