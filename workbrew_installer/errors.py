"""Installer errors.

Every failure is terminal: ``main()`` reports the message and exits 1.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .lib.command import CmdResult


class InstallerError(RuntimeError):
    """Base exception for all installer aborts."""


class ConfigError(InstallerError):
    """Invalid installer config file."""


class UnsupportedOSError(InstallerError):
    pass


class CommandError(InstallerError):
    """An external command exited non-zero."""

    def __init__(self, message: str, result: Optional["CmdResult"] = None) -> None:
        super().__init__(message)
        self.result = result


class ToolchainNotFoundError(InstallerError):
    pass


class ToolchainInstallError(InstallerError):
    pass


class SecretWriteError(InstallerError):
    pass


class DownloadError(InstallerError):
    pass


class ArtifactMissingError(InstallerError):
    pass


class SignatureError(InstallerError):
    pass


class PackageInstallError(InstallerError):
    pass
