"""Preflight checks: argument validation and host OS verification."""

from __future__ import annotations

import argparse
import logging
import platform
import sys
from dataclasses import dataclass
from typing import NoReturn, Optional, Sequence

from .errors import UnsupportedOSError
from .lib.console import abort_message

logger = logging.getLogger(__name__)

SUPPORTED_SYSTEM = "Darwin"

USAGE = """\
💡 Workbrew Installer for macOS
Usage: workbrew-installer --api-key YOUR_API_KEY [options]
    --api-key YOUR_API_KEY       🔑 Provide your unique Workbrew API key.
    --config FILE                Read installer overrides from a YAML file.
    --log FILE                   Write the installer log to FILE.
    --dry-run                    Log commands without executing them.
    --no-monitor                 Do not watch the agent log after installing.
                                 By default a detached watcher keeps running.
    --monitor-timeout SECONDS    Watch the agent log in the foreground for SECONDS.
    -v, --verbose                Also print log records to the console.
    -h, --help                   🆘 Display this message.
"""


@dataclass(frozen=True)
class InvocationArgs:
    api_key: str
    config_path: Optional[str] = None
    log_path: Optional[str] = None
    dry_run: bool = False
    monitor: bool = True
    monitor_timeout: Optional[float] = None
    verbose: bool = False


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports errors with our usage text and exit 1."""

    def print_help(self, file=None) -> None:  # type: ignore[override]
        print(USAGE, end="", file=file or sys.stdout)

    def error(self, message: str) -> NoReturn:
        abort_message(f"{message[0].upper()}{message[1:]}.")
        print(USAGE, end="", file=sys.stderr)
        raise SystemExit(1)


def _positive_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if f <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return f


def _build_parser() -> _Parser:
    p = _Parser(prog="workbrew-installer", add_help=True, allow_abbrev=False)
    p.add_argument("--api-key", dest="api_key", default=None)
    p.add_argument("--config", dest="config_path", default=None)
    p.add_argument("--log", dest="log_path", default=None)
    p.add_argument("--dry-run", action="store_true")
    p.add_argument("--no-monitor", dest="monitor", action="store_false")
    p.add_argument("--monitor-timeout", type=_positive_float, default=None)
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def parse_invocation(argv: Optional[Sequence[str]] = None) -> InvocationArgs:
    """Parse CLI arguments into InvocationArgs.

    Exits 0 after printing usage for -h/--help. Exits 1 with usage for unknown
    options and for a missing or empty --api-key.
    """

    p = _build_parser()
    args = p.parse_args(list(argv) if argv is not None else None)

    # Whitespace-only keys are rejected; any other value is kept verbatim.
    api_key = args.api_key or ""
    if not api_key.strip():
        p.error("--api-key requires a value")

    return InvocationArgs(
        api_key=api_key,
        config_path=args.config_path,
        log_path=args.log_path,
        dry_run=bool(args.dry_run),
        monitor=bool(args.monitor),
        monitor_timeout=args.monitor_timeout,
        verbose=bool(args.verbose),
    )


def check_os(system: Optional[str] = None) -> str:
    """Raise UnsupportedOSError unless running on macOS. Returns the OS name."""

    name = system if system is not None else platform.system()
    logger.info("Host OS: %s", name)
    if name != SUPPORTED_SYSTEM:
        raise UnsupportedOSError(
            "Workbrew is only supported on macOS 🖥️. Please use a macOS device to run this installer."
        )
    return name
