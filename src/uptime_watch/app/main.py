"""Command-line entry point.

Run from cron, e.g. every minute for checks and daily for the summary::

    * * * * *  uptime-watch
    0 8 * * *  uptime-watch --summary
"""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from ..data.lock import ExecutionLock, FileLockMarker, LockHeld
from ..data.persistence import FileStatusStore
from ..engine.transitions import TransitionEngine
from ..log import Logger, make_logger
from ..notifications.mailers import create_mailer
from ..notifications.notifier import Notifier
from ..notifications.summary import SummaryReporter
from ..probes.http import HttpProber
from .config import Config, ConfigError
from .runner import CheckRunner

TERMINATION_SIGNALS = ("SIGTERM", "SIGINT", "SIGHUP")


class UsageParser(argparse.ArgumentParser):
    """Argument parser that prints usage and exits 1 on bad arguments."""

    def error(self, message: str):
        sys.stderr.write(f"{message}\n")
        self.print_usage(sys.stderr)
        sys.exit(1)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = UsageParser(
        prog="uptime-watch",
        description="Check website availability and email on status changes.",
        allow_abbrev=False,
    )
    parser.add_argument("--summary", action="store_true", help="Run the script in summary mode")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--config", type=str, help="Path to config YAML file")
    return parser.parse_args(argv)


def _exit_on_signal(signum, frame) -> None:
    # SystemExit unwinds through the lock's context manager, which releases it
    raise SystemExit(128 + signum)


def install_signal_handlers() -> None:
    """Turn termination signals into SystemExit so cleanup code runs."""
    for name in TERMINATION_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _exit_on_signal)


def build_notifier(config: Config, log: Logger) -> Notifier:
    return Notifier(
        create_mailer(config.mail),
        config.alerts.recipients,
        timezone=config.timezone,
        log=log,
    )


def run_check(config: Config, log: Logger) -> int:
    """Regular run. Returns the process exit code."""
    install_signal_handlers()

    prober = HttpProber(config.probe, log=log)
    runner = CheckRunner(
        config.targets,
        prober=prober,
        store=FileStatusStore(Path(config.paths.status_file), log=log),
        lock=ExecutionLock(FileLockMarker(Path(config.paths.lock_file)), log=log),
        engine=TransitionEngine(config.alerts.grace_period, log=log),
        notifier=build_notifier(config, log),
        log=log,
    )
    try:
        runner.run()
    except (LockHeld, OSError) as exc:
        # OSError: lock marker or status file could not be written
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    finally:
        prober.close()
    return 0


def run_summary(config: Config, log: Logger) -> int:
    """Summary run: read the status file and report, without probing."""
    reporter = SummaryReporter(
        FileStatusStore(Path(config.paths.status_file), log=log),
        build_notifier(config, log),
        config.alerts.grace_period,
        timezone=config.timezone,
        log=log,
    )
    reporter.run()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the uptime-watch command."""
    args = parse_args(argv)
    log = make_logger(args.debug)

    try:
        config = Config.load(args.config)
    except (ConfigError, yaml.YAMLError) as exc:
        sys.stderr.write(f"Error: invalid configuration: {exc}\n")
        return 1
    log(f"[config] Loaded: {len(config.targets)} targets, grace_period={config.alerts.grace_period}")

    if args.summary:
        return run_summary(config, log)
    return run_check(config, log)


if __name__ == "__main__":
    sys.exit(main())
