"""Configuration management for the uptime monitor.

Supports YAML-based configuration. The loaded configuration is immutable and
is handed to each component at construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

DEFAULT_STATUS_FILE = "/tmp/websites_status.txt"
DEFAULT_LOCK_FILE = "/tmp/websites_status.lock"


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""


def _string_list(value: Any, key: str) -> Tuple[str, ...]:
    """Read a list of strings; a single string is a one-item list."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings, got {value!r}")
    return tuple(value)


def _flag(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class ProbeSettings:
    """HTTP probe tuning."""

    max_retries: int = 3
    retry_delay: float = 5  # seconds
    connect_timeout: float = 10  # seconds
    max_timeout: float = 30  # seconds
    method: str = "HEAD"
    user_agent: str = "uptime-watch/1.0"


@dataclass(frozen=True)
class AlertSettings:
    """Alerting policy and recipients."""

    grace_period: int = 3  # consecutive failures before alerting
    recipients: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MailSettings:
    """Mail transport configuration."""

    transport: str = "mailx"  # 'mailx' or 'smtp'
    command: str = "mailx"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    sender: str = "uptime-watch@localhost"
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = False
    timeout: float = 15


@dataclass(frozen=True)
class PathSettings:
    """Locations of the status file and lock marker."""

    status_file: str = DEFAULT_STATUS_FILE
    lock_file: str = DEFAULT_LOCK_FILE


@dataclass(frozen=True)
class Config:
    """Main configuration container."""

    targets: Tuple[str, ...] = ()
    timezone: str = "UTC"

    probe: ProbeSettings = field(default_factory=ProbeSettings)
    alerts: AlertSettings = field(default_factory=AlertSettings)
    mail: MailSettings = field(default_factory=MailSettings)
    paths: PathSettings = field(default_factory=PathSettings)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check value ranges, raising ConfigError on the first problem."""
        if self.alerts.grace_period < 1:
            raise ConfigError("alerts.grace_period must be at least 1")
        if self.probe.max_retries < 1:
            raise ConfigError("probe.max_retries must be at least 1")
        if self.probe.retry_delay < 0:
            raise ConfigError("probe.retry_delay must not be negative")
        if self.probe.connect_timeout <= 0 or self.probe.max_timeout <= 0:
            raise ConfigError("probe timeouts must be positive")
        if self.probe.method.upper() not in ("HEAD", "GET"):
            raise ConfigError(f"probe.method must be HEAD or GET, got {self.probe.method!r}")
        if self.mail.transport not in ("mailx", "smtp"):
            raise ConfigError(f"mail.transport must be 'mailx' or 'smtp', got {self.mail.transport!r}")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown timezone: {self.timezone!r}") from exc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        try:
            probe_data = data.get("probe") or {}
            probe = ProbeSettings(
                max_retries=int(probe_data.get("max_retries", 3)),
                retry_delay=float(probe_data.get("retry_delay", 5)),
                connect_timeout=float(probe_data.get("connect_timeout", 10)),
                max_timeout=float(probe_data.get("max_timeout", 30)),
                method=str(probe_data.get("method", "HEAD")).upper(),
                user_agent=str(probe_data.get("user_agent", "uptime-watch/1.0")),
            )

            alerts_data = data.get("alerts") or {}
            alerts = AlertSettings(
                grace_period=int(alerts_data.get("grace_period", 3)),
                recipients=_string_list(alerts_data.get("recipients"), "alerts.recipients"),
            )

            mail_data = data.get("mail") or {}
            mail = MailSettings(
                transport=mail_data.get("transport", "mailx"),
                command=mail_data.get("command", "mailx"),
                smtp_host=mail_data.get("smtp_host", "localhost"),
                smtp_port=int(mail_data.get("smtp_port", 25)),
                sender=mail_data.get("sender", "uptime-watch@localhost"),
                username=mail_data.get("username"),
                password=mail_data.get("password"),
                use_tls=_flag(mail_data.get("use_tls", False), "mail.use_tls"),
                timeout=float(mail_data.get("timeout", 15)),
            )

            paths_data = data.get("paths") or {}
            paths = PathSettings(
                status_file=str(paths_data.get("status_file", DEFAULT_STATUS_FILE)),
                lock_file=str(paths_data.get("lock_file", DEFAULT_LOCK_FILE)),
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid configuration value: {exc}") from exc

        return cls(
            targets=_string_list(data.get("targets"), "targets"),
            timezone=data.get("timezone", "UTC"),
            probe=probe,
            alerts=alerts,
            mail=mail,
            paths=paths,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load config from path or defaults.

        Checks in order:
        1. Provided path
        2. UPTIME_WATCH_CONFIG env var
        3. ./configs/config.yaml
        4. ./config.yaml
        5. ~/.uptime_watch/config.yaml
        6. Default config
        """
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigError(f"Config file not found: {config_path}")
            return cls.from_yaml(path)

        paths_to_try = []

        if env_path := os.environ.get("UPTIME_WATCH_CONFIG"):
            paths_to_try.append(Path(env_path))

        paths_to_try.extend([
            Path("./configs/config.yaml"),
            Path("./config.yaml"),
            Path.home() / ".uptime_watch" / "config.yaml",
        ])

        for path in paths_to_try:
            if path.exists():
                return cls.from_yaml(path)

        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (password omitted)."""
        return {
            "targets": list(self.targets),
            "timezone": self.timezone,
            "probe": {
                "max_retries": self.probe.max_retries,
                "retry_delay": self.probe.retry_delay,
                "connect_timeout": self.probe.connect_timeout,
                "max_timeout": self.probe.max_timeout,
                "method": self.probe.method,
                "user_agent": self.probe.user_agent,
            },
            "alerts": {
                "grace_period": self.alerts.grace_period,
                "recipients": list(self.alerts.recipients),
            },
            "mail": {
                "transport": self.mail.transport,
                "command": self.mail.command,
                "smtp_host": self.mail.smtp_host,
                "smtp_port": self.mail.smtp_port,
                "sender": self.mail.sender,
                "username": self.mail.username,
                "use_tls": self.mail.use_tls,
                "timeout": self.mail.timeout,
            },
            "paths": {
                "status_file": self.paths.status_file,
                "lock_file": self.paths.lock_file,
            },
        }
