from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ..config import InstallerConfig
from ..errors import (
    ArtifactMissingError,
    CommandError,
    DownloadError,
    PackageInstallError,
    SignatureError,
)
from .command import run_cmd

logger = logging.getLogger(__name__)


def _first(paths) -> Path | None:
    found = sorted(paths)
    return found[0] if found else None


def resolve_package(cfg: InstallerConfig, dest_dir: Path) -> Path:
    """Find the downloaded package in dest_dir.

    The server names the file via Content-Disposition; when it does not match
    the expected pattern, any .pkg is renamed to the fallback name.
    """

    pkg = _first(dest_dir.glob(cfg.package_glob))
    if pkg is None:
        other = _first(dest_dir.glob("*.pkg"))
        if other is not None:
            try:
                pkg = other.rename(dest_dir / cfg.fallback_package_name)
            except OSError as e:
                raise ArtifactMissingError(f"Cannot rename downloaded package {other.name} ❌.") from e

    if pkg is None or not pkg.is_file():
        raise ArtifactMissingError("Downloaded Workbrew package not found ❌.")
    return pkg


def download_package(cfg: InstallerConfig, dest_dir: Path) -> Path:
    try:
        run_cmd(
            ["curl", "--fail", "--silent", "--show-error", "-L", "-O", "-J", cfg.package_url],
            cwd=str(dest_dir),
        )
    except CommandError as e:
        raise DownloadError("Failed to download Workbrew agent package ❌.") from e

    pkg = resolve_package(cfg, dest_dir)
    logger.info("Downloaded %s", pkg.name)
    return pkg


def check_signature(pkg: Path) -> None:
    r = run_cmd(["pkgutil", "--check-signature", str(pkg)], check=False)
    if r.returncode != 0:
        raise SignatureError("Downloaded package is invalid or corrupted ❌.")
    logger.info("Signature OK for %s", pkg.name)


def install_pkg(pkg: Path, *, target: str = "/", sudo: bool = True) -> None:
    try:
        run_cmd(["installer", "-pkg", str(pkg), "-target", target], sudo=sudo)
    except CommandError as e:
        raise PackageInstallError("Installation of Workbrew package failed 🚫.") from e


def install_agent(cfg: InstallerConfig) -> str:
    """Download, verify and install the agent package. Returns the package name.

    The download directory is removed on every exit path.
    """

    if cfg.dry_run:
        logger.info("Would download %s, verify and install it", cfg.package_url)
        return cfg.fallback_package_name

    try:
        if cfg.work_dir:
            Path(cfg.work_dir).mkdir(parents=True, exist_ok=True)
        workspace = tempfile.TemporaryDirectory(prefix="workbrew-", dir=cfg.work_dir)
    except OSError as e:
        raise DownloadError(f"Cannot create a download directory: {e} ❌.") from e

    with workspace as tmp:
        pkg = download_package(cfg, Path(tmp))
        check_signature(pkg)
        install_pkg(pkg, sudo=cfg.use_sudo)
        logger.info("Installed %s", pkg.name)
        return pkg.name
