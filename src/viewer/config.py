"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "GramaGIS Viewer"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # GeoServer
    geoserver_url: str = "http://localhost:8080/geoserver"
    workspace: str = "gramagis"
    boundary_layer: str = "Ward Boundary"
    http_timeout: float = 10.0

    # Basemap
    osm_tile_url: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"

    # Viewport: "island" locks panning to the boundary, "free" does not
    viewport_mode: str = "island"
    initial_center_lat: float = 9.916
    initial_center_lng: float = 76.945
    initial_zoom: int = 13
    min_zoom: int = 10
    max_zoom: int = 19
    max_bounds_pad: float = 0.2         # pan lock reaches 20% past the boundary
    point_zoom: int = 17                # zoom used when a search hits a point

    # Fit-to-boundary. Padding keeps the boundary clear of the side panels.
    fit_delay: float = 0.5              # seconds, lets the page layout settle
    fit_padding_top_left: tuple[int, int] = (340, 20)
    fit_padding_bottom_right: tuple[int, int] = (20, 20)
    container_width: int = 1280         # until the page reports its size
    container_height: int = 800

    # Page
    background_color: str = "#e3eaef"   # mask fill matches the page background
    highlight_duration: float = 3.0
    feedback_duration: float = 3.0


settings = Settings()
