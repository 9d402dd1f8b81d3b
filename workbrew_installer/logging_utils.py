from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_LOG_PATH = "~/Library/Logs/Workbrew/workbrew-installer.log"
FALLBACK_LOG_NAME = "workbrew-installer.log"

_HANDLER_NAME = "workbrew-installer-file"


def _installed_file_handler(root: logging.Logger) -> logging.FileHandler | None:
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and h.get_name() == _HANDLER_NAME:
            return h
    return None


def _open_log_file(path: str) -> logging.FileHandler:
    """FileHandler at path, or in the working directory when path is not writable."""

    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path)
    except OSError:
        return logging.FileHandler(str(Path.cwd() / FALLBACK_LOG_NAME))


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = False,
) -> str:
    """Send installer log records to a file (and optionally stderr).

    Terminal progress goes through lib.console; the file keeps the commands
    and their output. Safe to call more than once: later calls only adjust
    the level. Returns the path actually written to.
    """

    root = logging.getLogger()
    root.setLevel(level)

    existing = _installed_file_handler(root)
    if existing is not None:
        return existing.baseFilename

    requested = os.path.expanduser(log_path)
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler = _open_log_file(requested)
    file_handler.set_name(_HANDLER_NAME)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        root.addHandler(console)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", requested, file_handler.baseFilename
    )
    return file_handler.baseFilename
