"""Geographic bounds and spherical Web-Mercator projection.

Pixel math follows the tile pyramid convention: at zoom z the world is
256 * 2**z pixels wide, origin at the top-left (lat 85.0511, lng -180).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798


def project(lat: float, lng: float, zoom: float) -> tuple[float, float]:
    """Project lat/lng to absolute pixel coordinates at *zoom*."""
    lat = max(min(lat, MAX_LATITUDE), -MAX_LATITUDE)
    scale = TILE_SIZE * 2 ** zoom
    x = (lng + 180.0) / 360.0 * scale
    sin_lat = math.sin(math.radians(lat))
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * scale
    return x, y


def unproject(x: float, y: float, zoom: float) -> tuple[float, float]:
    """Inverse of project(); returns (lat, lng)."""
    scale = TILE_SIZE * 2 ** zoom
    lng = x / scale * 360.0 - 180.0
    n = math.pi - 2 * math.pi * y / scale
    lat = math.degrees(math.atan(math.sinh(n)))
    return lat, lng


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned lat/lng rectangle."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_coordinates(cls, coords) -> Bounds:
        """Bounds of a GeoJSON coordinate tree ([lng, lat] pairs, any depth).

        Raises:
            ValueError: If the tree holds no coordinate pairs.
        """
        lngs: list[float] = []
        lats: list[float] = []

        def walk(node) -> None:
            if not node:
                return
            if isinstance(node[0], (list, tuple)):
                for child in node:
                    walk(child)
            else:
                lngs.append(float(node[0]))
                lats.append(float(node[1]))

        walk(coords)
        if not lngs:
            raise ValueError("No coordinates to compute bounds from")
        return cls(min(lats), min(lngs), max(lats), max(lngs))

    @classmethod
    def from_geojson(cls, data: dict) -> Bounds:
        """Bounds of a Feature, FeatureCollection or bare geometry dict."""
        kind = data.get("type")
        if kind == "FeatureCollection":
            coords = [
                (f.get("geometry") or {}).get("coordinates") or []
                for f in data.get("features") or []
            ]
        elif kind == "Feature":
            coords = (data.get("geometry") or {}).get("coordinates") or []
        else:
            coords = data.get("coordinates") or []
        return cls.from_coordinates(coords)

    @property
    def center(self) -> tuple[float, float]:
        return (self.south + self.north) / 2, (self.west + self.east) / 2

    def pad(self, ratio: float) -> Bounds:
        """Grow the bounds by *ratio* of their size on every side."""
        dlat = abs(self.north - self.south) * ratio
        dlng = abs(self.east - self.west) * ratio
        return Bounds(
            self.south - dlat, self.west - dlng,
            self.north + dlat, self.east + dlng,
        )

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def clamp(self, lat: float, lng: float) -> tuple[float, float]:
        return (
            max(self.south, min(lat, self.north)),
            max(self.west, min(lng, self.east)),
        )

    def to_bbox_string(self) -> str:
        """WMS 1.1.1 EPSG:4326 bbox order: minx,miny,maxx,maxy."""
        return f"{self.west},{self.south},{self.east},{self.north}"

    def to_list(self) -> list[list[float]]:
        """[[south, west], [north, east]] as the browser map expects."""
        return [[self.south, self.west], [self.north, self.east]]
