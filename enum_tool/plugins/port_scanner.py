"""
port_scanner.py
---------------

The ``scan`` command: a quick look at a fixed set of well-known TCP ports.

When the `python-nmap` bindings and the `nmap` binary are available the
ports are checked with a TCP connect scan run in a background thread;
otherwise every port is probed concurrently with a plain asyncio connect
bounded by ``scan_timeout``.  A local directory given as target only
produces the simulated service list.  Open ports are written to
``ports.json`` in the session directory.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List

try:
    import nmap  # type: ignore
except ImportError:
    nmap = None  # Will be checked during setup

from enum_tool.core import BasePlugin, ScanContext

COMMON_PORTS = {
    21: "FTP",
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    80: "HTTP",
    110: "POP3",
    143: "IMAP",
    443: "HTTPS",
    3306: "MySQL",
    8080: "HTTP-alt",
}

SIMULATED_SERVICES = ("ssh", "http", "ftp", "smb")


class PortScannerPlugin(BasePlugin):
    name = "PortScanner"
    command = "scan"
    usage = "scan [target]"
    description = "Scan a target for open ports/services"
    priority = 30

    def __init__(self, context: ScanContext) -> None:
        super().__init__(context)
        self._scanner: "nmap.PortScanner" | None = None

    async def setup(self) -> None:
        """Initialise the nmap scanner if available.

        If the `python-nmap` binding or the underlying `nmap` binary is not
        available, the plugin falls back to a basic TCP connect scan.
        """
        if nmap is not None:
            try:
                self._scanner = nmap.PortScanner()
            except nmap.PortScannerError:
                # nmap binary missing
                self._scanner = None
        else:
            self._scanner = None

    async def run(self, args: List[str], out_dir: Path) -> bool:
        if not args:
            return self.fail(f"Usage: {self.usage}", out_dir)
        target = args[0]
        self.log(f"Scanning {target} for open ports/services...", out_dir)

        if os.path.isdir(target):
            self.log("[ OK ] Local directory detected. Simulating service scan...", out_dir, level="OK")
            for svc in SIMULATED_SERVICES:
                self.log(f"  - {svc} : running", out_dir)
            return True

        if self._scanner is not None:
            try:
                open_ports = await asyncio.to_thread(self._run_scan_nmap, self._scanner, target)
            except nmap.PortScannerError as exc:
                self.log(f"nmap scan failed: {exc}. Falling back to basic scan.", out_dir, level="WARN")
                open_ports = await self._basic_tcp_scan(target)
        else:
            open_ports = await self._basic_tcp_scan(target)

        for port in open_ports:
            self.log(f"  - Port {port} ({COMMON_PORTS[port]}): open", out_dir, level="OK")
        with open(out_dir / "ports.json", "w", encoding="utf-8") as f:
            json.dump(self._as_report(target, open_ports), f, indent=2)
        self.log("Scan complete.", out_dir)
        return True

    @staticmethod
    def _as_report(target: str, open_ports: List[int]) -> Dict[str, Any]:
        return {
            "host": target,
            "ports": [
                {"protocol": "tcp", "port": p, "state": "open", "service": COMMON_PORTS[p].lower()}
                for p in open_ports
            ],
        }

    def _run_scan_nmap(self, nm: "nmap.PortScanner", target: str) -> List[int]:
        ports = ",".join(str(p) for p in COMMON_PORTS)
        timeout_ms = max(100, int(self.context.scan_timeout * 1000))
        nm.scan(target, arguments=f"-sT -Pn --open -p {ports} --max-rtt-timeout {timeout_ms}ms")
        found: List[int] = []
        for host in nm.all_hosts():
            for port, info in nm[host].get("tcp", {}).items():
                if info.get("state") == "open" and int(port) in COMMON_PORTS:
                    found.append(int(port))
        return sorted(set(found))

    async def _basic_tcp_scan(self, target: str) -> List[int]:
        results = await asyncio.gather(*(self._probe(target, port) for port in COMMON_PORTS))
        return [port for port, is_open in zip(COMMON_PORTS, results) if is_open]

    async def _probe(self, target: str, port: int) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(target, port), timeout=self.context.scan_timeout
            )
        except (OSError, asyncio.TimeoutError):
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True
