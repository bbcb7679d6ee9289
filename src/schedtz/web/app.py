"""FastAPI service that augments schedule pages and manages timezone settings.

Routes:
    POST /api/render            augment an HTML document, return the result
    GET  /api/settings          current timezone + panel visibility
    PUT  /api/settings/timezone change the timezone (400 on an unknown zone)
    PUT  /api/settings/panel    show/hide the injected panel

Usage:
    python -m schedtz.web.app
    # => Uvicorn running on http://127.0.0.1:8000
"""

import logging

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from schedtz.cli import augment_html
from schedtz.config import HOST, PORT, SETTINGS_FILE
from schedtz.settings import JsonSettingsStore, MemorySettingsStore, SettingsStore
from schedtz.tables.schema import InvalidTimezoneError, resolve_timezone

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Request / response bodies
# ---------------------------------------------------------------------------


class RenderRequest(BaseModel):
    """An HTML document plus an optional one-off timezone."""

    html: str
    timezone: str | None = None
    panel: bool = False


class RenderResponse(BaseModel):
    html: str
    tables: int


class TimezoneUpdate(BaseModel):
    timezone: str


class PanelUpdate(BaseModel):
    visible: bool


class SettingsResponse(BaseModel):
    timezone: str
    panel_visible: bool


# ---------------------------------------------------------------------------
# Settings store dependency (overridden in tests)
# ---------------------------------------------------------------------------

_STORE: SettingsStore | None = None


def get_store() -> SettingsStore:
    """Return the process-wide JSON settings store, created on first use."""
    global _STORE  # pylint: disable=global-statement
    if _STORE is None:
        _STORE = JsonSettingsStore(SETTINGS_FILE)
        logger.info("Using settings file %s", SETTINGS_FILE)
    return _STORE


async def _settings_response(store: SettingsStore) -> SettingsResponse:
    settings = await store.get_settings()
    return SettingsResponse(timezone=settings.timezone, panel_visible=settings.panel_visible)


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="schedtz")


@app.post("/api/render", response_model=RenderResponse)
async def render(body: RenderRequest, store: SettingsStore = Depends(get_store)):
    """Augment the posted HTML in the requested (or stored) timezone."""
    if body.timezone is not None:
        try:
            resolve_timezone(body.timezone)
        except InvalidTimezoneError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        store = MemorySettingsStore({"timezone": body.timezone}, default_timezone=store.default_timezone)

    html, tables = await augment_html(body.html, store, with_panel=body.panel)
    logger.info("Rendered document (%d chars, %d tables augmented)", len(body.html), tables)
    return RenderResponse(html=html, tables=tables)


@app.get("/api/settings", response_model=SettingsResponse)
async def read_settings(store: SettingsStore = Depends(get_store)):
    """Return the stored settings with defaults filled in."""
    return await _settings_response(store)


@app.put("/api/settings/timezone", response_model=SettingsResponse)
async def update_timezone(body: TimezoneUpdate, store: SettingsStore = Depends(get_store)):
    """Persist a new timezone; an unknown zone is rejected and the old one kept."""
    try:
        await store.set_timezone(body.timezone)
    except InvalidTimezoneError as exc:
        logger.warning("Rejected timezone update: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return await _settings_response(store)


@app.put("/api/settings/panel", response_model=SettingsResponse)
async def update_panel(body: PanelUpdate, store: SettingsStore = Depends(get_store)):
    """Persist the panel-visibility flag."""
    await store.set_panel_visible(body.visible)
    return await _settings_response(store)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main():
    """Start the web server via uvicorn."""
    import uvicorn  # pylint: disable=import-outside-toplevel

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
