"""SCM hosting settings: tunable operational parameters for a hosting process.

Settings resolve from SCM_<key> environment variables, then a periodically
re-read key=value file, then built-in defaults.
"""

from .config import ProviderConfig
from .interfaces import IEventSink, IFileSystem, Resolution, SettingSource
from .parsing import Snapshot, parse
from .provider import CacheState, HostingConfigurations
from .settings import FlagSetting, IntSetting, KNOWN_SETTINGS

__version__ = "0.1.0"

__all__ = [
    "CacheState",
    "FlagSetting",
    "HostingConfigurations",
    "IEventSink",
    "IFileSystem",
    "IntSetting",
    "KNOWN_SETTINGS",
    "ProviderConfig",
    "Resolution",
    "SettingSource",
    "Snapshot",
    "parse",
]
