"""Map router: the viewer page's UI surface.

Checkbox changes, search submissions, map clicks and container resizes
arrive here; every response carries the state the page should render.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from pydantic import BaseModel

from mapengine.layers.catalog import WORLD_LAYER_ID
from mapengine.state import AppState

router = APIRouter(prefix="/api/map", tags=["map"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ToggleRequest(BaseModel):
    """Checkbox state for one layer."""
    visible: bool


class QueryRequest(BaseModel):
    """Search box submission."""
    text: str


class ClickRequest(BaseModel):
    """A click on the map."""
    lat: float
    lng: float


class ViewportRequest(BaseModel):
    """Container size and, after a user pan/zoom, the new view."""
    width: int
    height: int
    lat: Optional[float] = None
    lng: Optional[float] = None
    zoom: Optional[float] = None


class WorldModeRequest(BaseModel):
    enabled: bool


def get_state(request: Request) -> AppState:
    state = getattr(request.app.state, "viewer", None)
    if state is None:
        raise HTTPException(status_code=503, detail="Viewer not initialized")
    return state


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@router.get("/state")
async def get_map_state(state: AppState = Depends(get_state)):
    """Full render state: view, layers, mask, panel, search box."""
    return state.snapshot()


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------

@router.get("/layers")
async def list_layers(state: AppState = Depends(get_state)):
    """Catalog layers with checkbox state and active filter."""
    return state.registry.to_dict()


@router.get("/layers/{layer_id}/wms")
async def get_wms_params(layer_id: str, state: AppState = Depends(get_state)):
    """WMS tile parameters (including CQL_FILTER) for a data layer."""
    try:
        params = state.registry.wms_params(layer_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": state.client.wms_url, "params": params}


@router.post("/layers/{layer_id}/toggle")
async def toggle_layer(layer_id: str, body: ToggleRequest, state: AppState = Depends(get_state)):
    """Show or hide a layer (sidebar checkbox)."""
    try:
        state.registry.toggle(layer_id, body.visible)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    logger.debug(f"Layer '{layer_id}' visible={body.visible}")
    return state.snapshot()


@router.post("/world-mode")
async def set_world_mode(body: WorldModeRequest, state: AppState = Depends(get_state)):
    """Enter or leave world mode (mask off, panning unlocked)."""
    state.registry.toggle(WORLD_LAYER_ID, body.enabled)
    return state.snapshot()


# ---------------------------------------------------------------------------
# Search / identify
# ---------------------------------------------------------------------------

@router.post("/query")
async def run_query(body: QueryRequest, state: AppState = Depends(get_state)):
    """Interpret search text: filter its layer, zoom to a matching feature."""
    outcome = await state.interpreter.execute(body.text)
    return {"outcome": outcome.to_dict(), "state": state.snapshot()}


@router.post("/click")
async def click_map(body: ClickRequest, state: AppState = Depends(get_state)):
    """Identify the feature under a clicked point."""
    popup = await state.identify.on_map_click(body.lat, body.lng)
    return {"popup": popup.to_dict() if popup else None}


@router.post("/popup/close")
async def close_popup(state: AppState = Depends(get_state)):
    state.map.close_popup()
    return {"popup": None}


@router.post("/panel/close")
async def close_panel(state: AppState = Depends(get_state)):
    """Hide the detail panel."""
    state.panel.close()
    return state.panel.to_dict()


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------

@router.post("/viewport")
async def update_viewport(body: ViewportRequest, state: AppState = Depends(get_state)):
    """Report the container size and, optionally, the user's pan/zoom.

    A pending fit-to-boundary runs right away once the real size is known.
    """
    if body.width <= 0 or body.height <= 0:
        raise HTTPException(status_code=400, detail="Container size must be positive")

    state.map.resize(body.width, body.height)
    if state.viewport.fit_pending:
        state.viewport.fit_now()
    else:
        state.map.invalidate_size()

    if body.lat is not None and body.lng is not None:
        state.map.set_view((body.lat, body.lng), body.zoom)
    elif body.zoom is not None:
        state.map.set_view(state.map.center, body.zoom)
    return state.map.to_dict()
