"""Tests for the step pipeline and command runner."""

import pytest

from workbrew_installer.config import InstallerConfig
from workbrew_installer.errors import CommandError, UnsupportedOSError
from workbrew_installer.lib import command
from workbrew_installer.main import build_steps
from workbrew_installer.pipeline import run_pipeline


class _Step:
    def __init__(self, step_id, fail=False):
        self.step_id = step_id
        self.fail = fail
        self.ran = False

    def run(self, cfg):
        self.ran = True
        if self.fail:
            raise UnsupportedOSError("nope")
        return {"id": self.step_id}


def test_runs_in_order_and_collects_facts():
    steps = [_Step("a"), _Step("b")]
    result = run_pipeline(cfg=InstallerConfig(api_key="k"), steps=steps)
    assert result.ran_steps == ["a", "b"]
    assert result.facts["b"] == {"id": "b"}


def test_failure_stops_later_steps():
    steps = [_Step("a"), _Step("b", fail=True), _Step("c")]
    with pytest.raises(UnsupportedOSError):
        run_pipeline(cfg=InstallerConfig(api_key="k"), steps=steps)
    assert [s.ran for s in steps] == [True, True, False]


def test_step_order():
    assert [s.step_id for s in build_steps()] == [
        "10_check_os",
        "20_xcode_clt",
        "30_write_api_key",
        "40_install_agent",
    ]


def test_run_cmd_captures_and_checks():
    r = command.run_cmd(["sh", "-c", "echo hi"])
    assert r.ok
    assert r.stdout.strip() == "hi"

    with pytest.raises(CommandError) as exc:
        command.run_cmd(["sh", "-c", "exit 3"])
    assert exc.value.result.returncode == 3

    assert command.run_cmd(["sh", "-c", "exit 3"], check=False).returncode == 3


def test_run_cmd_missing_binary():
    with pytest.raises(CommandError, match="not found"):
        command.run_cmd(["definitely-not-a-real-binary-xyz"])


def test_dry_run_and_sudo_prefix(monkeypatch):
    monkeypatch.setattr(command.os, "geteuid", lambda: 501)
    r = command.run_cmd(["installer", "-pkg", "x.pkg"], dry_run=True, sudo=True)
    assert r.argv == ["sudo", "installer", "-pkg", "x.pkg"]
    assert r.returncode == 0

    monkeypatch.setattr(command.os, "geteuid", lambda: 0)
    assert command.privileged(["installer"]) == ["installer"]
