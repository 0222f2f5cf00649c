"""Provider configuration."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIGS_FILE = r"%ProgramFiles(x86)%\SiteExtensions\kudu\ScmHostingConfigurations.txt"
DEFAULT_ENV_PREFIX = "SCM_"
DEFAULT_TTL_SECONDS = 600
SITE_NAME_ENV = "WEBSITE_SITE_NAME"

_WINDOWS_VAR = re.compile(r"%([^%]+)%")


def expand_path(path: str) -> str:
    """Expand %VAR%, $VAR and ~ in path.

    Unknown %VAR% references are left untouched, as on Windows.
    """
    expanded = _WINDOWS_VAR.sub(
        lambda m: os.environ.get(m.group(1), m.group(0)), path
    )
    return os.path.expanduser(os.path.expandvars(expanded))


def default_site_name() -> str:
    """Runtime site name used to tag emitted events."""
    return os.environ.get(SITE_NAME_ENV) or "unknown"


@dataclass
class ServerConfig:
    """HTTP diagnostics server configuration."""
    host: str = "127.0.0.1"
    port: int = 18791


@dataclass
class ProviderConfig:
    """Configuration of the hosting settings provider itself.

    Attributes:
        configs_file: Path of the key=value file as written; the provider
            expands environment references when it is built.
        env_prefix: Prefix of per-setting environment overrides.
        ttl_seconds: How long a parsed snapshot stays fresh.
        site_name: Site name attached to events. Resolved from
            WEBSITE_SITE_NAME when not set.
        queue_events: Dispatch events on a background thread.
        event_queue_size: Bound of the event queue when queue_events is set.
        server: HTTP diagnostics settings.
    """
    configs_file: str = DEFAULT_CONFIGS_FILE
    env_prefix: str = DEFAULT_ENV_PREFIX
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    site_name: Optional[str] = None
    queue_events: bool = True
    event_queue_size: int = 1000
    server: ServerConfig = field(default_factory=ServerConfig)

    def __post_init__(self):
        if self.site_name is None:
            self.site_name = default_site_name()

    @classmethod
    def from_file(cls, path: str | Path) -> "ProviderConfig":
        """Load configuration from YAML file."""
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "ProviderConfig":
        """Create configuration from dictionary."""
        server_data = data.get("server", {})
        return cls(
            configs_file=data.get("configs_file", DEFAULT_CONFIGS_FILE),
            env_prefix=data.get("env_prefix", DEFAULT_ENV_PREFIX),
            ttl_seconds=data.get("ttl_seconds", DEFAULT_TTL_SECONDS),
            site_name=data.get("site_name"),
            queue_events=data.get("queue_events", True),
            event_queue_size=data.get("event_queue_size", 1000),
            server=ServerConfig(**server_data) if server_data else ServerConfig(),
        )

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Create configuration from environment variables.

        SCM_SETTINGS_CONFIG points at an optional YAML file;
        SCM_HOSTING_CONFIG_FILE overrides the configs file path.
        """
        config_path = os.environ.get("SCM_SETTINGS_CONFIG")
        config = cls.from_file(config_path) if config_path else cls()

        configs_file = os.environ.get("SCM_HOSTING_CONFIG_FILE")
        if configs_file:
            config.configs_file = configs_file
        return config

    @classmethod
    def for_testing(cls, configs_file: str = "ScmHostingConfigurations.txt") -> "ProviderConfig":
        """Create a configuration suitable for testing.

        Events are delivered synchronously so tests can assert on them.
        """
        return cls(
            configs_file=configs_file,
            site_name="test-site",
            queue_events=False,
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if not self.configs_file:
            errors.append("configs_file is required")
        if not self.env_prefix:
            errors.append("env_prefix cannot be empty")
        if self.ttl_seconds <= 0:
            errors.append(f"ttl_seconds must be positive, got {self.ttl_seconds}")
        if self.queue_events and self.event_queue_size <= 0:
            errors.append(
                f"event_queue_size must be positive, got {self.event_queue_size}"
            )
        if not (0 < self.server.port < 65536):
            errors.append(f"server.port must be between 1 and 65535, got {self.server.port}")

        return errors
