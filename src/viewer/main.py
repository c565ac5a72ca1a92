"""GramaGIS Viewer - boundary-masked thematic map viewer.

Main FastAPI application.
"""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from loguru import logger

from mapengine.state import AppState
from viewer.config import settings
from viewer.routers.map import router as map_router


def _configure_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.debug else settings.log_level.upper())


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    _configure_logging()
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v0.1.0 - INITIALIZING")
    logger.info("=" * 60)
    logger.info(f"GeoServer: {settings.geoserver_url} (workspace '{settings.workspace}')")
    logger.info(f"Viewport mode: {settings.viewport_mode}")

    state = AppState.from_settings(settings)
    app.state.viewer = state

    # A missing boundary is not fatal: the map just stays unmasked.
    if await state.start():
        logger.info(f"Boundary '{settings.boundary_layer}' masked")
    else:
        logger.warning("Running without boundary mask")

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} ONLINE")
    logger.info("=" * 60)

    yield

    state.close()
    app.state.viewer = None
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title="GramaGIS Viewer",
    description="Boundary-masked thematic map viewer",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(map_router)


@app.get("/", response_class=HTMLResponse)
async def root():
    """Landing page pointing at the map state API."""
    return HTMLResponse(
        content="""
        <html>
            <head><title>GramaGIS Viewer</title></head>
            <body style="background: #e3eaef; font-family: sans-serif;">
                <h1>GramaGIS Viewer v0.1.0</h1>
                <p>Map state is served at /api/map/state.</p>
            </body>
        </html>
        """
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": "0.1.0",
        "system": "GramaGIS Viewer",
    }


@app.get("/api/status")
async def status(request: Request):
    """System status endpoint."""
    state = getattr(request.app.state, "viewer", None)
    return {
        "name": settings.app_name,
        "version": "0.1.0",
        "geoserver_url": settings.geoserver_url,
        "workspace": settings.workspace,
        "initialized": state is not None,
        "masked": bool(state and state.viewport.to_dict()["masked"]),
    }
