from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError

DEFAULT_PACKAGE_URL = "https://console.workbrew.com/downloads/macos"
DEFAULT_AGENT_HOME = "/opt/workbrew/home"
DEFAULT_AGENT_LOG_PATH = "/opt/workbrew/var/log/workbrew-agent.log"
DEFAULT_CLT_MARKER = "/tmp/.com.apple.dt.CommandLineTools.installondemand.in-progress"
AGENT_BUNDLE_ID = "com.workbrew.workbrew-agent"

# Keys a config file may set. The API key is deliberately absent: it only
# comes from the command line.
FILE_KEYS = frozenset(
    {
        "package_url",
        "agent_home",
        "agent_log_path",
        "error_marker",
        "clt_marker_path",
        "package_glob",
        "fallback_package_name",
        "support_url",
        "log_poll_interval",
        "work_dir",
        "use_sudo",
    }
)


@dataclass(frozen=True)
class InstallerConfig:
    api_key: str
    package_url: str = DEFAULT_PACKAGE_URL
    agent_home: str = DEFAULT_AGENT_HOME
    agent_log_path: str = DEFAULT_AGENT_LOG_PATH
    error_marker: str = "ERROR"
    clt_marker_path: str = DEFAULT_CLT_MARKER
    package_glob: str = "Workbrew-*.pkg"
    fallback_package_name: str = "Workbrew.pkg"
    support_url: str = "https://workbrew.com"
    log_poll_interval: float = 1.0
    work_dir: Optional[str] = None
    use_sudo: bool = True
    dry_run: bool = False

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("API key must not be empty")
        if self.log_poll_interval <= 0:
            raise ConfigError("log_poll_interval must be positive")

    @property
    def support_dir(self) -> Path:
        return Path(self.agent_home) / "Library" / "Application Support" / AGENT_BUNDLE_ID

    @property
    def api_key_path(self) -> Path:
        return self.support_dir / "api_key"

    def with_overrides(self, **overrides: Any) -> "InstallerConfig":
        return dataclasses.replace(self, **overrides)


def load_config_file(path: str) -> Dict[str, Any]:
    """Read installer overrides from a YAML file."""

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("installer config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the installer config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    unknown = sorted(set(raw) - FILE_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config key(s) in {path}: {', '.join(unknown)}")

    if "log_poll_interval" in raw:
        try:
            raw["log_poll_interval"] = float(raw["log_poll_interval"])
        except (TypeError, ValueError) as e:
            raise ConfigError("log_poll_interval must be a number") from e
    if "use_sudo" in raw:
        raw["use_sudo"] = bool(raw["use_sudo"])

    return raw


def build_config(
    *,
    api_key: str,
    config_path: Optional[str] = None,
    dry_run: bool = False,
) -> InstallerConfig:
    overrides: Dict[str, Any] = load_config_file(config_path) if config_path else {}
    return InstallerConfig(api_key=api_key, dry_run=dry_run, **overrides)
