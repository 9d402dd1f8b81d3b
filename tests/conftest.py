"""
Pytest configuration and fixtures for installer tests.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from workbrew_installer.config import InstallerConfig
from workbrew_installer.errors import CommandError
from workbrew_installer.lib.command import CmdResult


class FakeRunner:
    """Stand-in for run_cmd that records argv and answers from a rule table.

    Rules are keyed by the command name (argv[0] after an optional sudo) and
    return either a CmdResult-ish tuple (returncode, stdout) or run a side
    effect callable that receives the argv and kwargs.
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.rules: Dict[str, Callable[..., tuple]] = {}

    def on(self, name: str, returncode: int = 0, stdout: str = "", effect: Optional[Callable] = None) -> None:
        def _rule(argv, **kwargs):
            if effect is not None:
                effect(argv, **kwargs)
            return returncode, stdout

        self.rules[name] = _rule

    def names(self) -> List[str]:
        return [_name(a) for a in self.calls]

    def __call__(self, argv, *, check=True, sudo=False, dry_run=False, **kwargs) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        rule = self.rules.get(_name(argv))
        returncode, stdout = rule(argv, **kwargs) if rule else (0, "")
        if dry_run:
            returncode, stdout = 0, ""
        result = CmdResult(argv=argv, returncode=returncode, stdout=stdout, stderr="")
        if check and returncode != 0:
            raise CommandError(f"Command failed ({returncode}): {' '.join(argv)}", result)
        return result


def _name(argv: List[str]) -> str:
    return argv[1] if argv and argv[0] == "sudo" else argv[0]


@pytest.fixture
def fake_runner(monkeypatch):
    """Patch run_cmd everywhere it is imported."""
    runner = FakeRunner()
    for mod in (
        "workbrew_installer.lib.xcode",
        "workbrew_installer.lib.package",
        "workbrew_installer.lib.api_key",
    ):
        monkeypatch.setattr(f"{mod}.run_cmd", runner)
    return runner


@pytest.fixture
def cfg(tmp_path: Path) -> InstallerConfig:
    """Config with every filesystem location under tmp_path."""
    return InstallerConfig(
        api_key="ABC123",
        agent_home=str(tmp_path / "home"),
        agent_log_path=str(tmp_path / "var" / "log" / "workbrew-agent.log"),
        clt_marker_path=str(tmp_path / "clt.in-progress"),
        work_dir=str(tmp_path / "work"),
        log_poll_interval=0.05,
        use_sudo=False,
    )
