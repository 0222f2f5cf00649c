"""Core interfaces for SCM hosting settings.

These interfaces define the collaborators the configuration provider depends on
and the small value types it hands back to callers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SettingSource(Enum):
    """Where an effective setting value came from."""
    ENVIRONMENT = "environment"  # SCM_<key> environment variable
    FILE = "file"                # Cached hosting configurations file
    DEFAULT = "default"          # Built-in default


@dataclass(frozen=True)
class Resolution:
    """Effective value of a key together with its source.

    Attributes:
        key: The setting key that was looked up.
        value: The resolved raw value, or the default (which may be None).
        source: Which tier supplied the value.
    """
    key: str
    value: Optional[str]
    source: SettingSource

    def __repr__(self) -> str:
        return f"Resolution(key={self.key}, value={self.value!r}, source={self.source.value})"


class IFileSystem(ABC):
    """Interface for the file reads the provider performs."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if a file exists at path."""
        pass

    @abstractmethod
    def read_all_text(self, path: str) -> str:
        """Read the full text of the file at path."""
        pass


class IEventSink(ABC):
    """Interface for observability events.

    Sinks are fire-and-forget: callers never handle their failures.
    """

    @abstractmethod
    def generic_event(self, site_name: str, message: str, **fields: Any) -> None:
        """Record an informational event."""
        pass

    @abstractmethod
    def exception_event(
        self,
        site_name: str,
        method: str,
        message: str,
        error: BaseException,
        **fields: Any,
    ) -> None:
        """Record an exception event."""
        pass
