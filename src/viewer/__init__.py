"""GramaGIS Viewer: FastAPI service around the map engine."""
