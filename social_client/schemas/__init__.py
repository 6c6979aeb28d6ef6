"""Pydantic schemas shared by services and routers."""
from .refresh import (
    EnvironmentResponse,
    EnvironmentUpdate,
    RefreshSettings,
    RefreshSettingsUpdate,
    RefreshStatusListResponse,
    RefreshStatusResponse,
)

__all__ = [
    "EnvironmentResponse",
    "EnvironmentUpdate",
    "RefreshSettings",
    "RefreshSettingsUpdate",
    "RefreshStatusListResponse",
    "RefreshStatusResponse",
]
