"""LayerDescriptor and FeatureResult dataclasses for the viewer's layer system.

Feature geometry is kept exactly as GeoServer returns it: [lng, lat].
Only the mask and the map model flip to [lat, lng].
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LayerKind(str, Enum):
    """Basemaps are never filterable; thematic layers are."""

    BASEMAP = "basemap"
    THEMATIC = "thematic"


@dataclass(frozen=True)
class LayerDescriptor:
    """A catalog entry describing one remote layer.

    Attributes:
        id: Stable lowercase, underscore-separated identifier ("fire_stations").
        display_name: Human-readable name ("Fire Stations").
        remote_layer_name: Workspace-qualified GeoServer name
            ("gramagis:Fire Stations"), or a tile URL template for basemaps.
        z_index: Initial draw order (higher = on top).
        kind: BASEMAP or THEMATIC.
    """

    id: str
    display_name: str
    remote_layer_name: str
    z_index: int
    kind: LayerKind = LayerKind.THEMATIC

    @property
    def filterable(self) -> bool:
        return self.kind is LayerKind.THEMATIC


@dataclass
class FeatureResult:
    """A single feature returned by GetFeatureInfo or a WFS search.

    Attributes:
        properties: Attribute mapping (scalar values).
        geometry_type: GeoJSON type ("Point", "Polygon", "MultiPolygon", ...).
        geometry: The raw GeoJSON geometry dict, coordinates in [lng, lat].
        feature_id: GeoServer feature id when present ("Schools.12").
    """

    properties: dict
    geometry_type: str
    geometry: dict
    feature_id: str = ""

    @property
    def is_point(self) -> bool:
        return self.geometry_type == "Point"

    def to_geojson(self) -> dict:
        return {
            "type": "Feature",
            "id": self.feature_id,
            "geometry": self.geometry,
            "properties": dict(self.properties),
        }


@dataclass
class RegistryEntry:
    """Live state of one catalog layer inside the LayerRegistry.

    Attributes:
        descriptor: The immutable catalog descriptor.
        handle: The map-side layer handle (WMS or tile layer).
        visible: Checkbox state; mirrors whether the handle is on the map.
        filter: Active CQL filter string, or None.
    """

    descriptor: LayerDescriptor
    handle: object
    visible: bool = False
    filter: str | None = None
