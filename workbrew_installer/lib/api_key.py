from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config import InstallerConfig
from ..errors import CommandError, SecretWriteError
from .command import run_cmd

logger = logging.getLogger(__name__)

DIR_MODE = 0o700
FILE_MODE = 0o600


def _write_direct(directory: Path, path: Path, contents: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    os.chmod(directory, DIR_MODE)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(contents)
    # O_CREAT's mode only applies to new files.
    os.chmod(path, FILE_MODE)


def _write_privileged(directory: Path, path: Path, contents: str) -> None:
    run_cmd(["mkdir", "-p", str(directory)], sudo=True)
    run_cmd(["chmod", f"{DIR_MODE:o}", str(directory)], sudo=True)
    run_cmd(["tee", str(path)], input_text=contents, sudo=True)
    run_cmd(["chmod", f"{FILE_MODE:o}", str(path)], sudo=True)


def write_api_key(cfg: InstallerConfig) -> Path:
    """Persist the API key where the agent expects it (owner-only)."""

    directory = cfg.support_dir
    path = cfg.api_key_path
    if cfg.dry_run:
        logger.info("Would write API key to %s", path)
        return path

    contents = cfg.api_key + "\n"
    try:
        if cfg.use_sudo and os.geteuid() != 0:
            _write_privileged(directory, path, contents)
        else:
            _write_direct(directory, path, contents)
    except (OSError, CommandError) as e:
        raise SecretWriteError(f"Failed to save the Workbrew API key to {path} 🚫.") from e

    logger.info("API key written to %s", path)
    return path
