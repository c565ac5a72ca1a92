"""Headless map model: projection, bounds, layer handles and the view."""

from mapengine.map.geometry import Bounds, project, unproject
from mapengine.map.view import MapLayer, MapView, Popup, TileLayer, VectorLayer, WmsLayer

__all__ = [
    "Bounds",
    "MapLayer",
    "MapView",
    "Popup",
    "TileLayer",
    "VectorLayer",
    "WmsLayer",
    "project",
    "unproject",
]
