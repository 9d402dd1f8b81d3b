from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..config import InstallerConfig
from ..errors import CommandError, ToolchainInstallError, ToolchainNotFoundError
from .command import run_cmd

logger = logging.getLogger(__name__)

CLT_NAME = "Command Line Tools"

_LABEL_PREFIX = re.compile(r"^\s*\*\s*(?:Label:\s*)?")
_VERSION_CHUNK = re.compile(r"(\d+)")


def clt_installed(*, dry_run: bool = False) -> bool:
    """Return True if xcode-select reports an active developer directory."""

    r = run_cmd(["xcode-select", "-p"], check=False, dry_run=dry_run)
    return r.returncode == 0


def parse_clt_labels(softwareupdate_output: str) -> List[str]:
    """Extract Command Line Tools labels from `softwareupdate -l` output.

    Newer macOS prints `* Label: Command Line Tools for Xcode-15.3`, older
    releases print `* Command Line Tools (macOS Mojave version 10.14) for Xcode-10.3`.
    Both forms are accepted; the title lines that follow are ignored.
    """

    labels: List[str] = []
    for line in softwareupdate_output.splitlines():
        if not line.lstrip().startswith("*"):
            continue
        if CLT_NAME not in line:
            continue
        label = _LABEL_PREFIX.sub("", line).strip()
        if label:
            labels.append(label)
    return labels


def _version_key(label: str) -> Tuple[Tuple[int, Union[int, str]], ...]:
    # Natural sort: digit runs compare numerically, everything else as text.
    parts = _VERSION_CHUNK.split(label)
    key: List[Tuple[int, Union[int, str]]] = []
    for i, part in enumerate(parts):
        if i % 2:
            key.append((0, int(part)))
        elif part:
            key.append((1, part))
    return tuple(key)


def select_clt_label(labels: Sequence[str]) -> Optional[str]:
    """Pick the newest label: last element after a stable version-aware sort."""

    if not labels:
        return None
    return sorted(labels, key=_version_key)[-1]


def _touch_marker(path: str) -> None:
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.touch(exist_ok=True)
    except OSError as e:
        raise ToolchainInstallError(f"Cannot create Command Line Tools marker {path} 🚫.") from e


def _remove_marker(path: str) -> None:
    # Runs in a finally block; must not replace the error already in flight.
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


def install_clt(cfg: InstallerConfig) -> str:
    """Install the newest available CLT package. Returns the installed label."""

    # softwareupdate only lists CLT while this marker exists.
    _touch_marker(cfg.clt_marker_path)
    try:
        listing = run_cmd(["softwareupdate", "-l"], check=False, dry_run=cfg.dry_run)
        label = select_clt_label(parse_clt_labels(listing.stdout + listing.stderr))
        if cfg.dry_run and label is None:
            logger.info("Would install the newest Command Line Tools package")
            return ""
        if label is None:
            raise ToolchainNotFoundError("No Command Line Tools package found for installation 🚫.")

        logger.info("Selected Command Line Tools package: %s", label)
        try:
            run_cmd(
                ["softwareupdate", "-i", label, "--verbose"],
                dry_run=cfg.dry_run,
                sudo=cfg.use_sudo,
            )
        except CommandError as e:
            raise ToolchainInstallError("Failed to install Xcode Command Line Tools 🚫.") from e
        return label
    finally:
        _remove_marker(cfg.clt_marker_path)


def ensure_clt(
    cfg: InstallerConfig,
    *,
    on_missing: Optional[Callable[[], None]] = None,
) -> Optional[str]:
    """Make sure Xcode Command Line Tools are installed.

    Returns the label that was installed, or None when nothing was needed.
    """

    if clt_installed(dry_run=cfg.dry_run):
        logger.info("Xcode Command Line Tools already installed")
        return None
    if on_missing is not None:
        on_missing()
    return install_clt(cfg)
