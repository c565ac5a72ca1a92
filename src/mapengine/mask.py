"""Geometry mask builder: the "world with a hole" polygon.

The mask covers every part of the world except the administrative boundary,
filled with the page background so only the area of interest shows through.

GeoServer returns [lng, lat]; the browser map wants [lat, lng], so the hole
ring is flipped. MultiPolygon boundaries use only the first polygon's outer
ring: additional islands are left unmasked.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Covers the full valid lat/lng range, in [lat, lng].
WORLD_RING: list[list[float]] = [[90, -180], [90, 180], [-90, 180], [-90, -180]]

MASK_Z_INDEX = 900


class EmptyBoundaryError(ValueError):
    """The boundary feature collection held no usable feature."""


def flip_coordinates(coords: list) -> list:
    """Swap [lng, lat] -> [lat, lng] at any nesting depth."""
    return [
        flip_coordinates(c) if isinstance(c[0], (list, tuple)) else [c[1], c[0]]
        for c in coords
    ]


@dataclass(frozen=True)
class MaskStyle:
    color: str = "none"
    weight: int = 0
    fill_color: str = "#e3eaef"
    fill_opacity: float = 1.0
    interactive: bool = False
    z_index: int = MASK_Z_INDEX

    def to_dict(self) -> dict:
        return {
            "color": self.color,
            "weight": self.weight,
            "fillColor": self.fill_color,
            "fillOpacity": self.fill_opacity,
        }


@dataclass(frozen=True)
class MaskPolygon:
    """Two-ring polygon: [world outer ring, boundary hole], in [lat, lng]."""

    rings: list
    style: MaskStyle = field(default_factory=MaskStyle)

    @property
    def outer(self) -> list:
        return self.rings[0]

    @property
    def hole(self) -> list:
        return self.rings[1]


def build_mask(feature_collection: dict, fill_color: str = "#e3eaef") -> MaskPolygon:
    """Build the mask polygon from a boundary FeatureCollection.

    Args:
        feature_collection: GeoJSON FeatureCollection; the first feature's
            Polygon or MultiPolygon geometry is used.
        fill_color: Page background color the mask is painted with.

    Raises:
        EmptyBoundaryError: No features, or the first one has no polygon.
    """
    features = (feature_collection or {}).get("features") or []
    if not features:
        raise EmptyBoundaryError("Boundary collection has no features")

    geometry = features[0].get("geometry") or {}
    coordinates = geometry.get("coordinates")
    if not coordinates:
        raise EmptyBoundaryError("Boundary feature has no geometry")

    if geometry.get("type") == "MultiPolygon":
        hole = flip_coordinates(coordinates[0][0])
    elif geometry.get("type") == "Polygon":
        hole = flip_coordinates(coordinates[0])
    else:
        raise EmptyBoundaryError(f"Unsupported boundary geometry: {geometry.get('type')}")

    return MaskPolygon(
        rings=[[list(corner) for corner in WORLD_RING], hole],
        style=MaskStyle(fill_color=fill_color),
    )
