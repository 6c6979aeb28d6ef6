"""Application entry point for the client's local control API."""
from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI

from .clients import BackendClient
from .config import get_settings
from .database import init_db
from .refresh import environment_monitor
from .routers import refresh_router
from .services import refresh_settings_store
from .views import ViewRegistry, build_default_views

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title=APP_NAME, version=API_VERSION)
app.include_router(refresh_router)

app.state.refresh_settings_store = refresh_settings_store
app.state.environment_monitor = environment_monitor
app.state.view_registry = ViewRegistry()

_backend_client: BackendClient | None = None
_initial_refresh_task: asyncio.Task[None] | None = None


@app.on_event("startup")
async def _startup() -> None:
    """Load persisted settings and mount the refreshing views."""

    try:
        init_db()
    except Exception:
        logger.exception("Database initialisation failed")
        raise

    loaded = refresh_settings_store.load()
    logger.info(
        "Auto-refresh %s (interval=%dms, max_retries=%d)",
        "enabled" if loaded.enabled else "disabled",
        loaded.interval,
        loaded.max_retries,
    )

    if not settings.mount_views_on_startup:
        logger.info("View mounting disabled; waiting for views to be registered")
        return

    global _backend_client, _initial_refresh_task
    _backend_client = BackendClient()
    registry = build_default_views(
        _backend_client,
        settings=settings,
        store=app.state.refresh_settings_store,
        monitor=app.state.environment_monitor,
    )
    app.state.view_registry = registry
    await registry.mount_all(initial_refresh=False)
    # Initial loads run in the background so a slow backend does not block startup.
    _initial_refresh_task = asyncio.create_task(registry.refresh_all())


@app.on_event("shutdown")
async def _shutdown() -> None:
    """Tear down every view so no timer or late completion outlives the app."""

    app.state.view_registry.unmount_all()

    global _backend_client, _initial_refresh_task
    if _initial_refresh_task is not None and not _initial_refresh_task.done():
        _initial_refresh_task.cancel()
        try:
            await _initial_refresh_task
        except asyncio.CancelledError:
            pass
    _initial_refresh_task = None

    if _backend_client is not None:
        await _backend_client.aclose()
        _backend_client = None


@app.get("/api", tags=["system"])
async def api_root() -> dict[str, str]:
    return {"app": APP_NAME, "version": API_VERSION}
