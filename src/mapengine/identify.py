"""Feature identify: click a map point, see the feature's attributes.

Queries only the topmost visible data layer. The popup lists raw
properties, unformatted, unlike the search detail panel.
"""

from __future__ import annotations

import httpx
from loguru import logger

from mapengine.geoserver import GeoServerClient
from mapengine.layers.registry import LayerRegistry
from mapengine.map.view import MapView, Popup


class FeatureIdentify:
    def __init__(self, map_view: MapView, registry: LayerRegistry, client: GeoServerClient) -> None:
        self.map = map_view
        self.registry = registry
        self.client = client

    async def on_map_click(self, lat: float, lng: float) -> Popup | None:
        """Identify the feature under (lat, lng) and open a popup for it."""
        layer_id = self.registry.active_data_layer()
        if layer_id is None:
            return None

        handle = self.registry.get(layer_id).handle
        x, y = self.map.latlng_to_container_point(lat, lng)
        width, height = self.map.size
        try:
            features = await self.client.get_feature_info(
                handle.layers_param,
                self.map.get_bounds(),
                width,
                height,
                round(x),
                round(y),
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Identify on '{layer_id}' failed: {e}")
            return None

        if not features:
            return None

        popup = Popup(lat=lat, lng=lng, title="Details", properties=features[0].properties)
        self.map.open_popup(popup)
        return popup
