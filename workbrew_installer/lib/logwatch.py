"""Follow the agent log and report error lines.

Behaves like `tail -F -n0`: waits for the file to appear, starts at its end,
and reopens it from the beginning if it is truncated or replaced.

Run as `python -m workbrew_installer.lib.logwatch PATH` it follows in the
foreground; the installer spawns it that way in a new session.
"""

from __future__ import annotations

import argparse
import enum
import logging
import os
import subprocess
import sys
import threading
from typing import BinaryIO, Callable, List, Optional, Sequence

from ..config import InstallerConfig
from .console import say, warn

logger = logging.getLogger(__name__)

LineMatcher = Callable[[str], bool]
ErrorHandler = Callable[[str], None]


class LineClass(str, enum.Enum):
    ERROR = "error"
    OK = "ok"


def marker_matcher(marker: str) -> LineMatcher:
    def _match(line: str) -> bool:
        return marker in line

    return _match


def classify_line(line: str, matcher: LineMatcher) -> LineClass:
    return LineClass.ERROR if matcher(line) else LineClass.OK


def default_notice(support_url: str) -> ErrorHandler:
    def _notice(line: str) -> None:
        say(f"⚠️  Uh-oh! Error detected in Workbrew logs: {line}")
        say(f"💡 Need help? Check out {support_url} for support.")

    return _notice


class LogWatcher:
    """Background follower for a single log file.

    start() returns immediately; stop() sets the cancellation token and the
    thread exits within one poll interval.
    """

    def __init__(
        self,
        path: str,
        *,
        matcher: LineMatcher,
        on_error: ErrorHandler,
        poll_interval: float = 1.0,
    ) -> None:
        self.path = path
        self.matcher = matcher
        self.on_error = on_error
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._ready = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "LogWatcher":
        if self._thread is not None:
            raise RuntimeError("LogWatcher already started")
        self._thread = threading.Thread(target=self._run, name="workbrew-logwatch", daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def wait_until_following(self, timeout: Optional[float] = None) -> bool:
        """Block until the file was found and is being followed."""
        return self._ready.wait(timeout)

    def _wait_for_file(self) -> bool:
        if os.path.isfile(self.path):
            return True
        logger.info("Waiting for %s to be created", self.path)
        warn(f"Log file {self.path} does not exist yet. Waiting for it to be created...")
        while not self._stop.wait(self.poll_interval):
            if os.path.isfile(self.path):
                return True
        return False

    def _handle(self, raw: bytes) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        if classify_line(line, self.matcher) is LineClass.ERROR:
            logger.info("Agent log error: %s", line)
            try:
                self.on_error(line)
            except Exception:
                logger.exception("Error notice handler failed")

    def _replaced(self, f: BinaryIO) -> bool:
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            return False
        fst = os.fstat(f.fileno())
        return (st.st_ino, st.st_dev) != (fst.st_ino, fst.st_dev) or st.st_size < f.tell()

    def _follow(self, f: BinaryIO) -> bool:
        """Read appended lines until stopped. Returns True if the file must be reopened."""
        pending = b""
        while not self._stop.is_set():
            chunk = f.readline()
            if chunk:
                pending += chunk
                if pending.endswith(b"\n"):
                    self._handle(pending)
                    pending = b""
                continue
            if self._replaced(f):
                if pending:
                    self._handle(pending)
                return True
            self._stop.wait(self.poll_interval)
        return False

    def _run(self) -> None:
        if not self._wait_for_file():
            return
        logger.info("Following %s", self.path)
        seek_end = True
        while not self._stop.is_set():
            try:
                f = open(self.path, "rb")
            except FileNotFoundError:
                # Rotated away; wait for it to come back.
                seek_end = False
                self._stop.wait(self.poll_interval)
                continue
            with f:
                if seek_end:
                    f.seek(0, os.SEEK_END)
                    seek_end = False
                self._ready.set()
                if not self._follow(f):
                    break


def run_foreground(watcher: LogWatcher, timeout: Optional[float] = None) -> None:
    """Follow until timeout (forever when None) or Ctrl-C, then stop cleanly."""

    watcher.start()
    try:
        watcher.join(timeout)
    except KeyboardInterrupt:
        logger.info("Log monitoring interrupted")
    finally:
        watcher.stop()
        watcher.join()


def watcher_command(cfg: InstallerConfig) -> List[str]:
    return [
        sys.executable,
        "-m",
        "workbrew_installer.lib.logwatch",
        cfg.agent_log_path,
        "--marker",
        cfg.error_marker,
        "--poll-interval",
        str(cfg.log_poll_interval),
        "--support-url",
        cfg.support_url,
    ]


def spawn_detached(cfg: InstallerConfig) -> Optional[subprocess.Popen]:
    """Start the watcher in its own session so it outlives the installer.

    The child inherits stdout/stderr, so notices keep reaching the terminal the
    installer ran in. Returns None if the child could not be started; the
    install itself has already succeeded at that point.
    """

    argv = watcher_command(cfg)
    logger.info("Spawning log watcher: %s", " ".join(argv))
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            close_fds=True,
            start_new_session=True,
        )
    except OSError as e:
        logger.warning("Could not start the log watcher: %s", e)
        warn(f"Could not start log monitoring ({e}). Check {cfg.agent_log_path} manually.")
        return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="workbrew-logwatch")
    p.add_argument("path", help="Log file to follow (may not exist yet)")
    p.add_argument("--marker", default="ERROR", help="Substring that marks an error line")
    p.add_argument("--poll-interval", type=float, default=1.0)
    p.add_argument("--support-url", default="https://workbrew.com")
    p.add_argument("--timeout", type=float, default=None, help="Stop after SECONDS")

    args = p.parse_args(list(argv) if argv is not None else None)

    watcher = LogWatcher(
        args.path,
        matcher=marker_matcher(args.marker),
        on_error=default_notice(args.support_url),
        poll_interval=args.poll_interval,
    )
    run_foreground(watcher, args.timeout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
