"""Pydantic models for HTTP API responses."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

from .. import __version__


class SourceType(str, Enum):
    """Tier that supplied a value."""
    ENVIRONMENT = "environment"
    FILE = "file"
    DEFAULT = "default"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    site_name: str
    cache_warm: bool
    cache_fresh: bool
    version: str = __version__


class SettingResponse(BaseModel):
    """Effective raw value of a single key."""
    key: str
    value: Optional[str] = None
    source: SourceType


class EffectiveSettingResponse(BaseModel):
    """Effective value of a known, typed setting."""
    key: str
    raw_value: Optional[str] = Field(
        default=None,
        description="Raw string before typed conversion"
    )
    value: Union[bool, int] = Field(..., description="Typed value as the host sees it")
    source: SourceType


class SettingsResponse(BaseModel):
    """All known settings."""
    settings: list[EffectiveSettingResponse]


class SnapshotResponse(BaseModel):
    """Currently cached file snapshot."""
    warm: bool
    configs_file: str
    expires_at: Optional[datetime] = None
    values: dict[str, str] = Field(default_factory=dict)
