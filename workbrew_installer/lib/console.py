"""User-facing console output.

The log file gets the details; the terminal gets short, colored progress lines.
"""

from __future__ import annotations

import sys
from typing import TextIO


class Colors:
    BOLD = "\033[1m"
    RESET = "\033[0m"
    RED = "\033[1;31m"
    BLUE = "\033[1;34m"
    WHITE = "\033[1;39m"


def ohai(message: str, *, stream: TextIO | None = None) -> None:
    """Print a highlighted progress line."""
    out = stream or sys.stdout
    print(f"🍻 {Colors.BLUE}==>{Colors.WHITE} {message}{Colors.RESET}", file=out, flush=True)


def say(message: str, *, stream: TextIO | None = None) -> None:
    print(message, file=stream or sys.stdout, flush=True)


def warn(message: str, *, stream: TextIO | None = None) -> None:
    out = stream or sys.stderr
    print(f"⚠️ {Colors.RED}Warning:{Colors.RESET} {message}", file=out, flush=True)


def abort_message(message: str, *, stream: TextIO | None = None) -> None:
    print(f"🚨 {message}", file=stream or sys.stderr, flush=True)
