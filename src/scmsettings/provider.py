"""Hosting configurations provider.

Resolves operational settings with a fixed precedence:

1. ``SCM_<key>`` environment variable, when set and non-empty
2. The hosting configurations file, parsed and cached for ten minutes
3. The caller's default

Reads never fail because of the file. A missing file is an empty
configuration; a failing read is reported as an exception event and the
previous snapshot (or the default) is used instead.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional

from .config import (
    DEFAULT_CONFIGS_FILE,
    DEFAULT_ENV_PREFIX,
    DEFAULT_TTL_SECONDS,
    ProviderConfig,
    default_site_name,
    expand_path,
)
from .interfaces import IEventSink, IFileSystem, Resolution, SettingSource
from .parsing import Snapshot, parse
from .services import LocalFileSystem, LoggingEventSink, QueuedEventSink
from .settings import (
    ARM_RETRY_AFTER_SECONDS,
    DEPLOYMENT_STATUS_COMPLETE_FILE_ENABLED,
    GET_LATEST_DEPLOYMENT_OPTIMIZED,
    KNOWN_SETTINGS,
    TELEMETRY_INTERVAL_MINUTES,
    Setting,
)

NEVER = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheState:
    """Cached snapshot and its expiry.

    The two attributes are replaced independently and without a lock. A reader
    may pair a snapshot with the expiry of a different refresh, which at worst
    costs one redundant refresh.
    """
    snapshot: Optional[Snapshot] = None
    expires_at: datetime = NEVER

    @property
    def is_warm(self) -> bool:
        return self.snapshot is not None

    def is_stale(self, now: datetime) -> bool:
        return self.snapshot is None or now > self.expires_at


class HostingConfigurations:
    """Three-tier settings lookup with a lazily refreshed file cache.

    Args:
        configs_file: Path of the key=value file; environment references
            are expanded.
        file_system: File access. Defaults to the local disk.
        events: Event sink. Defaults to a LoggingEventSink.
        site_name: Callable returning the site name attached to events.
        env_prefix: Prefix of environment overrides.
        ttl: Freshness window of a parsed snapshot.
        clock: Callable returning the current aware UTC time.
        environ: Environment mapping. Defaults to os.environ.
        state: Cache state to use, for sharing or inspection.
    """

    def __init__(
        self,
        configs_file: str = DEFAULT_CONFIGS_FILE,
        file_system: Optional[IFileSystem] = None,
        events: Optional[IEventSink] = None,
        site_name: Callable[[], str] = default_site_name,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        ttl: timedelta = timedelta(seconds=DEFAULT_TTL_SECONDS),
        clock: Callable[[], datetime] = utc_now,
        environ: Optional[Mapping[str, str]] = None,
        state: Optional[CacheState] = None,
    ):
        self.configs_file = expand_path(configs_file)
        self.file_system = file_system or LocalFileSystem()
        self.events = events or LoggingEventSink()
        self.site_name = site_name
        self.env_prefix = env_prefix
        self.ttl = ttl
        self.clock = clock
        self.environ = os.environ if environ is None else environ
        self.state = state or CacheState()

    @classmethod
    def from_config(
        cls,
        config: ProviderConfig,
        file_system: Optional[IFileSystem] = None,
        events: Optional[IEventSink] = None,
        **kwargs,
    ) -> "HostingConfigurations":
        """Build a provider from a ProviderConfig.

        When queue_events is set and no sink is given, events are logged
        through a QueuedEventSink.
        """
        if events is None:
            events = LoggingEventSink()
            if config.queue_events:
                events = QueuedEventSink(events, maxsize=config.event_queue_size)
        site_name = config.site_name
        return cls(
            configs_file=config.configs_file,
            file_system=file_system,
            events=events,
            site_name=lambda: site_name,
            env_prefix=config.env_prefix,
            ttl=timedelta(seconds=config.ttl_seconds),
            **kwargs,
        )

    # Injection

    @property
    def config(self) -> Optional[Snapshot]:
        """The cached snapshot, or None while cold."""
        return self.state.snapshot

    @config.setter
    def config(self, value: Optional[Mapping[str, str]]) -> None:
        """Inject a snapshot, bypassing the file.

        A snapshot stays fresh for one TTL; None forces the next lookup to
        load the file.
        """
        snapshot = None
        if value is not None:
            snapshot = value if isinstance(value, Snapshot) else Snapshot(value)
        self.state.snapshot = snapshot
        self.state.expires_at = self.clock() + self.ttl if snapshot is not None else NEVER

    def invalidate(self) -> None:
        """Make the next lookup refresh from the file, keeping the snapshot."""
        self.state.expires_at = NEVER

    # Lookup

    def env_var_name(self, key: str) -> str:
        return f"{self.env_prefix}{key}"

    def env_value(self, key: str) -> Optional[str]:
        """Non-empty environment override for key, matched case-insensitively."""
        name = self.env_var_name(key)
        value = self.environ.get(name)
        if value:
            return value
        folded = name.casefold()
        for candidate, value in list(self.environ.items()):
            if value and candidate.casefold() == folded:
                return value
        return None

    def get_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the effective raw value of key, or default."""
        return self.resolve(key, default).value

    def resolve(self, key: str, default: Optional[str] = None) -> Resolution:
        """Resolve key and report which tier supplied the value."""
        if not key:
            raise ValueError("key is required")

        env = self.env_value(key)
        if env:
            return Resolution(key, env, SettingSource.ENVIRONMENT)

        snapshot = self.state.snapshot
        if snapshot is None or self.clock() > self.state.expires_at:
            snapshot = self._refresh(key, snapshot)

        if snapshot is not None and key in snapshot:
            return Resolution(key, snapshot[key], SettingSource.FILE)
        return Resolution(key, default, SettingSource.DEFAULT)

    def refresh(self) -> Optional[Snapshot]:
        """Reload the file now regardless of freshness.

        Returns the snapshot in effect afterwards; on failure that is the
        previous one.
        """
        return self._refresh(None, self.state.snapshot)

    def _refresh(self, key: Optional[str], previous: Optional[Snapshot]) -> Optional[Snapshot]:
        # Renew the expiry before reading so a slow or failing read is not
        # retried by every concurrent caller.
        self.state.expires_at = self.clock() + self.ttl

        try:
            text = (
                self.file_system.read_all_text(self.configs_file)
                if self.file_system.exists(self.configs_file)
                else None
            )

            self.events.generic_event(
                self.site_name(),
                f"Hosting configurations: update value '{text or ''}'",
                configs_file=self.configs_file,
            )

            snapshot = parse(text)
            self.state.snapshot = snapshot
            return snapshot
        except Exception as e:
            if key is None:
                method = "HostingConfigurations.refresh"
                message = "Hosting configurations: failed to refresh"
            else:
                method = "HostingConfigurations.get_value"
                message = f"Hosting configurations: failed to get value '{key}'"
            self.events.exception_event(
                self.site_name(),
                method,
                message,
                e,
                key=key,
                configs_file=self.configs_file,
            )
            return previous

    # Typed accessors

    def get(self, setting: Setting):
        """Evaluate a typed setting against this provider."""
        return setting.evaluate(self.get_value)

    @property
    def arm_retry_after_seconds(self) -> int:
        return self.get(ARM_RETRY_AFTER_SECONDS)

    @property
    def get_latest_deployment_optimized(self) -> bool:
        return self.get(GET_LATEST_DEPLOYMENT_OPTIMIZED)

    @property
    def deployment_status_complete_file_enabled(self) -> bool:
        return self.get(DEPLOYMENT_STATUS_COMPLETE_FILE_ENABLED)

    @property
    def telemetry_interval_minutes(self) -> int:
        return self.get(TELEMETRY_INTERVAL_MINUTES)

    def effective_settings(self) -> list[Resolution]:
        """Resolve every known setting with its built-in default."""
        return [self.resolve(setting.key, str(setting.default)) for setting in KNOWN_SETTINGS]
