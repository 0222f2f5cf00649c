"""Typed setting definitions.

Each setting is a pure function over a raw string lookup: given whatever the
lookup returns, it produces a typed value and never raises.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

# Signature of the generic string lookup the settings are evaluated over
Lookup = Callable[[str, Optional[str]], Optional[str]]

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")


def try_parse_int(raw: Optional[str]) -> Optional[int]:
    """Parse a 32-bit decimal integer, returning None on failure.

    Accepts surrounding whitespace and a leading sign. Values outside the
    signed 32-bit range fail rather than wrap.
    """
    if raw is None or not _INTEGER.fullmatch(raw):
        return None
    value = int(raw)
    if value < INT32_MIN or value > INT32_MAX:
        return None
    return value


@dataclass(frozen=True)
class IntSetting:
    """Integer setting with a fixed default and an optional floor."""
    key: str
    default: int
    floor: Optional[int] = None

    def __post_init__(self):
        if self.floor is not None and self.default < self.floor:
            raise ValueError(
                f"{self.key}: default {self.default} is below floor {self.floor}"
            )

    def convert(self, raw: Optional[str]) -> int:
        value = try_parse_int(raw)
        if value is None:
            return self.default
        if self.floor is not None:
            return max(self.floor, value)
        return value

    def evaluate(self, lookup: Lookup) -> int:
        return self.convert(lookup(self.key, None))


@dataclass(frozen=True)
class FlagSetting:
    """Boolean setting: the literal "0" is off, anything else is on."""
    key: str
    default: str = "1"

    def convert(self, raw: Optional[str]) -> bool:
        return raw != "0"

    def evaluate(self, lookup: Lookup) -> bool:
        return self.convert(lookup(self.key, self.default))


Setting = Union[IntSetting, FlagSetting]


ARM_RETRY_AFTER_SECONDS = IntSetting("ArmRetryAfterSeconds", default=30, floor=10)
GET_LATEST_DEPLOYMENT_OPTIMIZED = FlagSetting("GetLatestDeploymentOptimized")
DEPLOYMENT_STATUS_COMPLETE_FILE_ENABLED = FlagSetting("DeploymentStatusCompleteFileEnabled")
TELEMETRY_INTERVAL_MINUTES = IntSetting("TelemetryIntervalMinutes", default=30)

KNOWN_SETTINGS: tuple[Setting, ...] = (
    ARM_RETRY_AFTER_SECONDS,
    GET_LATEST_DEPLOYMENT_OPTIMIZED,
    DEPLOYMENT_STATUS_COMPLETE_FILE_ENABLED,
    TELEMETRY_INTERVAL_MINUTES,
)


def find_setting(key: str) -> Optional[Setting]:
    """Look up a known setting by key, case-insensitively."""
    folded = key.casefold()
    for setting in KNOWN_SETTINGS:
        if setting.key.casefold() == folded:
            return setting
    return None
