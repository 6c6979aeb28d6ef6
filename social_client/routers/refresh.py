"""Auto-refresh settings, environment signal and view status routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..refresh import EnvironmentMonitor, RefreshStatus
from ..schemas import (
    EnvironmentResponse,
    EnvironmentUpdate,
    RefreshSettings,
    RefreshSettingsUpdate,
    RefreshStatusListResponse,
    RefreshStatusResponse,
)
from ..services import RefreshSettingsStore, SettingsPersistenceError
from ..views import RefreshingView, ViewRegistry

router = APIRouter(prefix="/refresh", tags=["refresh"])


def get_settings_store(request: Request) -> RefreshSettingsStore:
    return request.app.state.refresh_settings_store


def get_environment_monitor(request: Request) -> EnvironmentMonitor:
    return request.app.state.environment_monitor


def get_view_registry(request: Request) -> ViewRegistry:
    return request.app.state.view_registry


def _get_view(registry: ViewRegistry, view_key: str) -> RefreshingView:
    view = registry.get(view_key)
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="View not found")
    return view


def _to_status_response(view_key: str, snapshot: RefreshStatus) -> RefreshStatusResponse:
    return RefreshStatusResponse(
        view=view_key,
        state=snapshot.state.value,
        is_refreshing=snapshot.is_refreshing,
        last_refresh=snapshot.last_refresh,
        error=snapshot.error,
        retry_count=snapshot.retry_count,
        is_enabled=snapshot.is_enabled,
        is_visible=snapshot.is_visible,
        is_online=snapshot.is_online,
        interval_ms=snapshot.interval_ms,
        max_retries=snapshot.max_retries,
    )


@router.get("/settings", response_model=RefreshSettings)
async def read_refresh_settings(store: RefreshSettingsStore = Depends(get_settings_store)) -> RefreshSettings:
    return store.snapshot()


@router.patch("/settings", response_model=RefreshSettings)
async def update_refresh_settings(
    payload: RefreshSettingsUpdate,
    store: RefreshSettingsStore = Depends(get_settings_store),
) -> RefreshSettings:
    try:
        return store.update(**payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SettingsPersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.post("/settings/reset", response_model=RefreshSettings)
async def reset_refresh_settings(store: RefreshSettingsStore = Depends(get_settings_store)) -> RefreshSettings:
    try:
        return store.reset()
    except SettingsPersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


@router.get("/environment", response_model=EnvironmentResponse)
async def read_environment(monitor: EnvironmentMonitor = Depends(get_environment_monitor)) -> EnvironmentResponse:
    return EnvironmentResponse(visible=monitor.visible, online=monitor.online)


@router.post("/environment", response_model=EnvironmentResponse)
async def report_environment(
    payload: EnvironmentUpdate,
    monitor: EnvironmentMonitor = Depends(get_environment_monitor),
) -> EnvironmentResponse:
    if payload.visible is not None:
        monitor.set_visible(payload.visible)
    if payload.online is not None:
        monitor.set_online(payload.online)
    return EnvironmentResponse(visible=monitor.visible, online=monitor.online)


@router.get("/views", response_model=RefreshStatusListResponse)
async def list_view_statuses(registry: ViewRegistry = Depends(get_view_registry)) -> RefreshStatusListResponse:
    return RefreshStatusListResponse(items=[_to_status_response(key, snap) for key, snap in registry.statuses()])


@router.get("/views/{view_key}", response_model=RefreshStatusResponse)
async def read_view_status(view_key: str, registry: ViewRegistry = Depends(get_view_registry)) -> RefreshStatusResponse:
    view = _get_view(registry, view_key)
    return _to_status_response(view_key, view.status())


@router.post("/views/{view_key}/refresh", response_model=RefreshStatusResponse)
async def trigger_view_refresh(
    view_key: str,
    registry: ViewRegistry = Depends(get_view_registry),
) -> RefreshStatusResponse:
    view = _get_view(registry, view_key)
    if not view.mounted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="View is not mounted")
    await view.manual_refresh()
    return _to_status_response(view_key, view.status())
