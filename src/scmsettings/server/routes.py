"""API route handlers."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..interfaces import Resolution
from ..parsing import Snapshot
from ..provider import NEVER, HostingConfigurations
from ..settings import KNOWN_SETTINGS, find_setting
from .models import (
    EffectiveSettingResponse,
    HealthResponse,
    SettingResponse,
    SettingsResponse,
    SnapshotResponse,
    SourceType,
)

router = APIRouter(prefix="/v1", tags=["settings"])


def get_provider() -> HostingConfigurations:
    """Dependency injection for the settings provider.

    This is set by the app during startup.
    """
    from .app import _provider
    if _provider is None:
        raise HTTPException(status_code=503, detail="Provider not initialized")
    return _provider


def _to_setting_response(resolution: Resolution) -> SettingResponse:
    return SettingResponse(
        key=resolution.key,
        value=resolution.value,
        source=SourceType(resolution.source.value),
    )


def _to_snapshot_response(
    provider: HostingConfigurations, snapshot: Optional[Snapshot]
) -> SnapshotResponse:
    expires_at = provider.state.expires_at
    return SnapshotResponse(
        warm=snapshot is not None,
        configs_file=provider.configs_file,
        expires_at=None if expires_at == NEVER else expires_at,
        values=dict(snapshot.items()) if snapshot is not None else {},
    )


@router.get("/health", response_model=HealthResponse)
async def health(
    provider: HostingConfigurations = Depends(get_provider),
) -> HealthResponse:
    """Health check endpoint."""
    state = provider.state
    return HealthResponse(
        site_name=provider.site_name(),
        cache_warm=state.is_warm,
        cache_fresh=not state.is_stale(provider.clock()),
    )


@router.get("/settings", response_model=SettingsResponse)
def list_settings(
    provider: HostingConfigurations = Depends(get_provider),
) -> SettingsResponse:
    """Effective value and source of every known setting."""
    settings = []
    for setting, resolution in zip(KNOWN_SETTINGS, provider.effective_settings()):
        settings.append(EffectiveSettingResponse(
            key=setting.key,
            raw_value=resolution.value,
            value=setting.convert(resolution.value),
            source=SourceType(resolution.source.value),
        ))
    return SettingsResponse(settings=settings)


@router.get("/settings/{key}", response_model=SettingResponse)
def get_setting(
    key: str,
    provider: HostingConfigurations = Depends(get_provider),
) -> SettingResponse:
    """Effective raw value of any key.

    Known settings fall back to their built-in default; other keys 404 when
    neither the environment nor the file supplies them.
    """
    setting = find_setting(key)
    default = str(setting.default) if setting is not None else None
    resolution = provider.resolve(key, default)
    if resolution.value is None:
        raise HTTPException(status_code=404, detail=f"Setting {key} not found")
    return _to_setting_response(resolution)


@router.get("/snapshot", response_model=SnapshotResponse)
def snapshot(
    provider: HostingConfigurations = Depends(get_provider),
) -> SnapshotResponse:
    """Currently cached file snapshot, without triggering a refresh."""
    return _to_snapshot_response(provider, provider.config)


@router.post("/refresh", response_model=SnapshotResponse)
def refresh(
    provider: HostingConfigurations = Depends(get_provider),
) -> SnapshotResponse:
    """Reload the hosting configurations file now."""
    return _to_snapshot_response(provider, provider.refresh())
