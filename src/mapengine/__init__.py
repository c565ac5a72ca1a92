"""GramaGIS map engine: mask, viewport, layers, identify and search.

The engine owns the viewer's state; the browser only renders it.
"""

from mapengine.state import AppState

__all__ = ["AppState"]
