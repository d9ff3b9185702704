"""
enum_tool.main
--------------

Entry point for the enumeration tool.

Features:
- Runs one command per invocation (enum, ld, scan, inject, auth_bypass,
  spoof, payload_gen, config).
- Reads settings from an optional TOML file; command-line flags win.
- The crawl commands need a target URL (--url or ``target_url`` in the
  config file, or the command's own argument).

Run examples:
    # Heuristic directory enumeration, two levels deep
    python3 -m enum_tool.main --url http://10.10.10.10/ --max-enum-depth 2 enum

    # Flat listing of a server with directory indexes
    python3 -m enum_tool.main ld http://10.10.10.10/files/

    # Settings from a file
    python3 -m enum_tool.main --config enum.toml config show
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import toml

from enum_tool.core import CommandRunner, NotConnectedError, ScanContext


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="enum-tool",
        description="Recursive web directory enumeration with heuristic probing.",
        allow_abbrev=False,
    )

    parser.add_argument("command", help="Command to run: enum, ld, scan, inject, auth_bypass, spoof, payload_gen, config.")
    parser.add_argument("args", nargs="*", help="Arguments for the command.")

    # Target / config
    parser.add_argument("--url", default=None, help="Global URL the crawl commands operate on.")
    parser.add_argument("--config", default=None, help="Path to a TOML settings file.")
    parser.add_argument("--results-dir", default=None, help="Directory for session output (default: ./results).")

    # Crawl behaviour
    parser.add_argument("--max-enum-depth", type=int, default=None, help="Recursion depth for 'enum' (default 3).")
    parser.add_argument("--max-list-depth", type=int, default=None, help="Recursion depth for 'ld' (default 5).")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request HTTP timeout in seconds (default 2).")
    parser.add_argument("--user-agent", default=None, help="User-Agent sent with every request.")
    parser.add_argument("--cookies", default=None, help="Cookie header sent with every request.")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum number of in-flight HTTP requests (default 20).",
    )
    parser.add_argument("--scan-timeout", type=float, default=None, help="Per-port timeout for 'scan' (default 1).")

    # UX
    parser.add_argument("--no-color", action="store_true", default=None, help="Disable colorized console output.")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Show debug output.")

    # Global options may follow the command; anything argparse does not
    # recognise (--sql, --randomize ...) belongs to the command itself.
    args, extra = parser.parse_known_args(argv)
    args.args = list(args.args) + extra
    return args


def build_context(args: argparse.Namespace) -> ScanContext:
    overrides = {
        "target_url": args.url,
        "results_dir": args.results_dir,
        "max_enum_depth": args.max_enum_depth,
        "max_list_depth": args.max_list_depth,
        "fetch_timeout": args.timeout,
        "user_agent": args.user_agent,
        "cookies": args.cookies,
        "max_concurrency": args.concurrency,
        "scan_timeout": args.scan_timeout,
        "no_color": args.no_color,
        "verbose": args.verbose,
    }
    if args.config:
        return ScanContext.from_file(args.config, **overrides)
    return ScanContext(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        ctx = build_context(args)
    except FileNotFoundError as exc:
        print(f"[!] Config file not found: {exc.filename}", file=sys.stderr)
        return 2
    except (toml.TomlDecodeError, ValueError) as exc:
        print(f"[!] Invalid config file {args.config}: {exc}", file=sys.stderr)
        return 2

    runner = CommandRunner(ctx)
    if runner.manager.get(args.command) is None:
        known = ", ".join(sorted(runner.manager.commands))
        print(f"[!] Unknown command '{args.command}'. Available: {known}", file=sys.stderr)
        return 2

    try:
        ok = asyncio.run(runner.run(args.command, args.args))
    except NotConnectedError as exc:
        print(f"[ FAIL ] {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user.", file=sys.stderr)
        return 130
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
