from __future__ import annotations

import logging
from typing import Optional, Sequence

from .config import InstallerConfig, build_config
from .errors import InstallerError
from .lib.console import abort_message, ohai, say
from .lib.logwatch import LogWatcher, default_notice, marker_matcher, run_foreground, spawn_detached
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, Step, run_pipeline
from .preflight import InvocationArgs, parse_invocation
from .steps import CheckOSStep, InstallAgentStep, WriteAPIKeyStep, XcodeCLTStep

logger = logging.getLogger(__name__)


def build_steps(*, system: Optional[str] = None) -> list[Step]:
    return [
        CheckOSStep(system),
        XcodeCLTStep(),
        WriteAPIKeyStep(),
        InstallAgentStep(),
    ]


def run(cfg: InstallerConfig, *, system: Optional[str] = None) -> PipelineResult:
    """Run the installer steps with an explicit configuration."""

    ohai("Welcome to Workbrew! 🍻 Setting up your device for optimal performance.")
    return run_pipeline(cfg=cfg, steps=build_steps(system=system))


def make_log_watcher(cfg: InstallerConfig) -> LogWatcher:
    """In-process watcher for hosts that embed the installer and own its lifetime."""

    return LogWatcher(
        cfg.agent_log_path,
        matcher=marker_matcher(cfg.error_marker),
        on_error=default_notice(cfg.support_url),
        poll_interval=cfg.log_poll_interval,
    )


def main(argv: Optional[Sequence[str]] = None, *, system: Optional[str] = None) -> int:
    args: InvocationArgs = parse_invocation(argv)

    actual_log = configure_logging(
        log_path=args.log_path or DEFAULT_LOG_PATH,
        level=logging.DEBUG if args.verbose else logging.INFO,
        also_console=args.verbose,
    )
    logger.info("Installer log: %s", actual_log)

    try:
        cfg = build_config(api_key=args.api_key, config_path=args.config_path, dry_run=args.dry_run)
        result = run(cfg, system=system)
    except InstallerError as e:
        logger.exception("Installer failed")
        abort_message(str(e))
        return 1

    logger.info("Completed steps: %s", ", ".join(result.ran_steps))

    monitoring = False
    foreground = None
    if args.monitor and not cfg.dry_run:
        say("👀 Monitoring Workbrew logs for any issues...")
        if args.monitor_timeout is not None:
            foreground = make_log_watcher(cfg)
            monitoring = True
        else:
            monitoring = spawn_detached(cfg) is not None

    ohai("🎉 Workbrew setup is complete on macOS!" + (" Log monitoring is active." if monitoring else ""))
    say(f"For more information, visit: {cfg.support_url} 🍻")

    if foreground is not None:
        say("Press Ctrl-C to stop watching the agent log.")
        run_foreground(foreground, args.monitor_timeout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
