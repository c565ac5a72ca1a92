"""MapView: headless model of the browser map.

Holds everything the page renders: center/zoom, container size, pan
restriction, the ordered set of layers on the map, and the open popup.
The browser mirrors this state; it never owns it.

Draw order is a single global z-index: basemap < mask < thematic layers.
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field

from mapengine.map.geometry import Bounds, project, unproject

_seq = itertools.count()


# ---------------------------------------------------------------------------
# Layer handles
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class MapLayer:
    """Base class for anything that can sit on the map."""

    name: str
    z_index: int = 0
    kind: str = "layer"

    def to_dict(self) -> dict:
        return {"name": self.name, "kind": self.kind, "z_index": self.z_index}


@dataclass(eq=False)
class TileLayer(MapLayer):
    """XYZ raster tiles (the OpenStreetMap basemap)."""

    url_template: str = ""
    max_zoom: int = 19
    attribution: str = ""
    kind: str = "tile"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(url=self.url_template, max_zoom=self.max_zoom, attribution=self.attribution)
        return d


@dataclass(eq=False)
class WmsLayer(MapLayer):
    """WMS GetMap tile layer; params are sent with every tile request."""

    url: str = ""
    params: dict = field(default_factory=dict)
    kind: str = "wms"

    def set_params(self, **params) -> None:
        """Merge params; a None value removes the key (clears a filter)."""
        for key, value in params.items():
            if value is None:
                self.params.pop(key, None)
            else:
                self.params[key] = value

    @property
    def layers_param(self) -> str:
        return self.params.get("layers", "")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(url=self.url, params=dict(self.params))
        return d


@dataclass(eq=False)
class VectorLayer(MapLayer):
    """Client-drawn vector overlay: the mask polygon or a highlight."""

    geometry: dict = field(default_factory=dict)
    style: dict = field(default_factory=dict)
    interactive: bool = True
    kind: str = "vector"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update(geometry=self.geometry, style=dict(self.style), interactive=self.interactive)
        return d


@dataclass
class Popup:
    """An attribute popup anchored at a map location."""

    lat: float
    lng: float
    title: str
    properties: dict

    def to_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "title": self.title,
            "properties": dict(self.properties),
        }


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------

class MapView:
    """The map-rendering capability set the engine works against."""

    def __init__(
        self,
        center: tuple[float, float],
        zoom: float,
        size: tuple[int, int] = (1280, 800),
        min_zoom: int = 0,
        max_zoom: int = 19,
    ) -> None:
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.zoom = self._clamp_zoom(zoom)
        self.center = (float(center[0]), float(center[1]))
        self.size = size
        self.max_bounds: Bounds | None = None
        self.popup: Popup | None = None
        self._pending_size: tuple[int, int] | None = None
        self._layers: dict[int, tuple[int, MapLayer]] = {}

    # -- layers -------------------------------------------------------------

    def add_layer(self, layer: MapLayer) -> bool:
        """Add a layer. Returns False if it was already on the map."""
        if id(layer) in self._layers:
            return False
        self._layers[id(layer)] = (next(_seq), layer)
        return True

    def remove_layer(self, layer: MapLayer) -> bool:
        """Remove a layer. Returns False if it was not on the map."""
        return self._layers.pop(id(layer), None) is not None

    def has_layer(self, layer: MapLayer) -> bool:
        return id(layer) in self._layers

    def layers(self) -> list[MapLayer]:
        """Layers in draw order, bottom first."""
        entries = sorted(self._layers.values(), key=lambda e: (e[1].z_index, e[0]))
        return [layer for _, layer in entries]

    def bring_to_front(self, layer: MapLayer) -> None:
        others = [l.z_index for _, l in self._layers.values() if l is not layer]
        if others and layer.z_index <= max(others):
            layer.z_index = max(others) + 1

    def bring_to_back(self, layer: MapLayer) -> None:
        others = [l.z_index for _, l in self._layers.values() if l is not layer]
        if others and layer.z_index >= min(others):
            layer.z_index = min(others) - 1

    # -- view ---------------------------------------------------------------

    def _clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(zoom, self.max_zoom))

    def set_view(self, center: tuple[float, float], zoom: float | None = None) -> None:
        lat, lng = float(center[0]), float(center[1])
        if self.max_bounds is not None:
            lat, lng = self.max_bounds.clamp(lat, lng)
        self.center = (lat, lng)
        if zoom is not None:
            self.zoom = self._clamp_zoom(zoom)

    def set_max_bounds(self, bounds: Bounds | None) -> None:
        """Restrict panning to *bounds*; None lifts the restriction."""
        self.max_bounds = bounds
        if bounds is not None and not bounds.contains(*self.center):
            self.set_view(self.center)

    def get_bounds_zoom(
        self,
        bounds: Bounds,
        padding: tuple[float, float] = (0, 0),
    ) -> float:
        """Largest whole zoom at which *bounds* fits inside the container."""
        avail_w = self.size[0] - padding[0]
        avail_h = self.size[1] - padding[1]
        if avail_w <= 0 or avail_h <= 0:
            return self.min_zoom

        sw = project(bounds.south, bounds.west, 0)
        ne = project(bounds.north, bounds.east, 0)
        span_w = abs(ne[0] - sw[0])
        span_h = abs(sw[1] - ne[1])
        if span_w == 0 and span_h == 0:
            return self.max_zoom

        scales = []
        if span_w:
            scales.append(avail_w / span_w)
        if span_h:
            scales.append(avail_h / span_h)
        zoom = math.floor(math.log2(min(scales)))
        return self._clamp_zoom(zoom)

    def fit_bounds(
        self,
        bounds: Bounds,
        padding_top_left: tuple[int, int] = (0, 0),
        padding_bottom_right: tuple[int, int] = (0, 0),
    ) -> None:
        """Center and zoom so *bounds* is visible inside the padded area.

        Padding is in container pixels and accounts for panels that cover
        part of the map.
        """
        padding = (
            padding_top_left[0] + padding_bottom_right[0],
            padding_top_left[1] + padding_bottom_right[1],
        )
        zoom = self.get_bounds_zoom(bounds, padding)

        sw = project(bounds.south, bounds.west, zoom)
        ne = project(bounds.north, bounds.east, zoom)
        offset_x = (padding_bottom_right[0] - padding_top_left[0]) / 2
        offset_y = (padding_bottom_right[1] - padding_top_left[1]) / 2
        cx = (sw[0] + ne[0]) / 2 + offset_x
        cy = (sw[1] + ne[1]) / 2 + offset_y
        self.set_view(unproject(cx, cy, zoom), zoom)

    def latlng_to_container_point(self, lat: float, lng: float) -> tuple[float, float]:
        px, py = project(lat, lng, self.zoom)
        cx, cy = project(self.center[0], self.center[1], self.zoom)
        return px - cx + self.size[0] / 2, py - cy + self.size[1] / 2

    def get_bounds(self) -> Bounds:
        """Lat/lng rectangle currently visible in the container."""
        cx, cy = project(self.center[0], self.center[1], self.zoom)
        half_w, half_h = self.size[0] / 2, self.size[1] / 2
        north, west = unproject(cx - half_w, cy - half_h, self.zoom)
        south, east = unproject(cx + half_w, cy + half_h, self.zoom)
        return Bounds(south, west, north, east)

    # -- container size -----------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Record the container size reported by the page.

        Takes effect on the next invalidate_size(), the way a layout change
        only reaches the map after a forced recalculation.
        """
        self._pending_size = (int(width), int(height))

    def invalidate_size(self) -> bool:
        """Recompute the container size. Returns True if it changed."""
        if self._pending_size is None or self._pending_size == self.size:
            self._pending_size = None
            return False
        self.size = self._pending_size
        self._pending_size = None
        return True

    # -- popup --------------------------------------------------------------

    def open_popup(self, popup: Popup) -> None:
        self.popup = popup

    def close_popup(self) -> None:
        self.popup = None

    def to_dict(self) -> dict:
        return {
            "center": list(self.center),
            "zoom": self.zoom,
            "size": list(self.size),
            "min_zoom": self.min_zoom,
            "max_zoom": self.max_zoom,
            "max_bounds": self.max_bounds.to_list() if self.max_bounds else None,
            "layers": [layer.to_dict() for layer in self.layers()],
            "popup": self.popup.to_dict() if self.popup else None,
        }
