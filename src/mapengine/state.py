"""AppState: the one shared map/registry/viewport instance.

Constructed once at startup, handed to every component and to the HTTP
routers, closed on shutdown. Nothing in the engine reaches for a global.
"""

from __future__ import annotations

import httpx
from loguru import logger

from mapengine.geoserver import GeoServerClient
from mapengine.identify import FeatureIdentify
from mapengine.layers.catalog import BASEMAP_LAYER_ID, build_catalog
from mapengine.layers.registry import LayerRegistry
from mapengine.map.view import MapView
from mapengine.query.interpreter import QueryInterpreter
from mapengine.scheduler import Scheduler
from mapengine.ui import DetailPanel, Highlighter, SearchBox
from mapengine.viewport import ViewportController, ViewportPolicy


class AppState:
    """Wires the viewer's components around a single MapView."""

    def __init__(
        self,
        client: GeoServerClient,
        policy: ViewportPolicy,
        osm_tile_url: str,
        boundary_layer: str = "Ward Boundary",
        container_size: tuple[int, int] = (1280, 800),
        fit_delay: float = 0.5,
        fit_padding_top_left: tuple[int, int] = (0, 0),
        fit_padding_bottom_right: tuple[int, int] = (0, 0),
        background_color: str = "#e3eaef",
        highlight_duration: float = 3.0,
        feedback_duration: float = 3.0,
        point_zoom: int = 17,
    ) -> None:
        self.client = client
        self.boundary_layer = boundary_layer
        self.scheduler = Scheduler()

        self.map = MapView(
            center=policy.initial_center,
            zoom=policy.initial_zoom,
            size=container_size,
            min_zoom=policy.min_zoom,
            max_zoom=policy.max_zoom,
        )

        self.registry = LayerRegistry(self.map, client.wms_url)
        for descriptor in build_catalog(client.workspace, osm_tile_url):
            self.registry.register(descriptor)

        self.viewport = ViewportController(
            self.map,
            self.registry,
            self.scheduler,
            policy,
            basemap=self.registry.get(BASEMAP_LAYER_ID).handle,
            fit_delay=fit_delay,
            padding_top_left=fit_padding_top_left,
            padding_bottom_right=fit_padding_bottom_right,
            background_color=background_color,
        )
        self.registry.world_mode_handler = self.viewport.on_world_mode_toggle

        self.search_box = SearchBox(self.scheduler, feedback_duration=feedback_duration)
        self.panel = DetailPanel()
        self.highlighter = Highlighter(self.map, self.scheduler, highlight_duration)

        self.interpreter = QueryInterpreter(
            self.registry,
            client,
            self.map,
            self.search_box,
            self.panel,
            self.highlighter,
            point_zoom=point_zoom,
        )
        self.identify = FeatureIdentify(self.map, self.registry, client)

    @classmethod
    def from_settings(cls, settings, transport: httpx.AsyncBaseTransport | None = None) -> AppState:
        """Build the state from the viewer's Settings object."""
        client = GeoServerClient(
            settings.geoserver_url,
            settings.workspace,
            timeout=settings.http_timeout,
            transport=transport,
        )
        policy_factory = ViewportPolicy.free if settings.viewport_mode == "free" else ViewportPolicy.island
        policy = policy_factory(
            min_zoom=settings.min_zoom,
            max_zoom=settings.max_zoom,
            initial_center=(settings.initial_center_lat, settings.initial_center_lng),
            initial_zoom=settings.initial_zoom,
            max_bounds_pad=settings.max_bounds_pad,
        )
        return cls(
            client,
            policy,
            osm_tile_url=settings.osm_tile_url,
            boundary_layer=settings.boundary_layer,
            container_size=(settings.container_width, settings.container_height),
            fit_delay=settings.fit_delay,
            fit_padding_top_left=tuple(settings.fit_padding_top_left),
            fit_padding_bottom_right=tuple(settings.fit_padding_bottom_right),
            background_color=settings.background_color,
            highlight_duration=settings.highlight_duration,
            feedback_duration=settings.feedback_duration,
            point_zoom=settings.point_zoom,
        )

    async def start(self) -> bool:
        """Show the basemap, load the boundary and mask the map to it.

        Returns False when the boundary could not be loaded or used; the
        viewer keeps running unmasked.
        """
        self.registry.toggle(BASEMAP_LAYER_ID, True)
        try:
            boundary = await self.client.fetch_boundary(self.boundary_layer)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Boundary load failed: {e}")
            return False
        return self.viewport.initialize(boundary)

    def close(self) -> None:
        self.scheduler.cancel_all()
        self.highlighter.clear()

    def snapshot(self) -> dict:
        """Everything the page needs to render the current state."""
        return {
            "map": self.map.to_dict(),
            "layers": self.registry.to_dict(),
            "viewport": self.viewport.to_dict(),
            "panel": self.panel.to_dict(),
            "search": self.search_box.to_dict(),
        }
