"""GeoServer client: WMS GetFeatureInfo and WFS GetFeature over httpx.

Endpoints live under one workspace:
- <geoserver_url>/<workspace>/wms  GetMap tiles, GetFeatureInfo
- <geoserver_url>/<workspace>/ows  WFS GetFeature (GeoJSON)

Failures surface as httpx.HTTPError (transport or status) or ValueError
(body is not GeoJSON); callers decide how to degrade.
"""

from __future__ import annotations

import httpx
from loguru import logger

from mapengine.layers.layer import FeatureResult
from mapengine.layers.parsers.geojson import parse_feature_collection
from mapengine.map.geometry import Bounds

_USER_AGENT = "GramaGIS-Viewer/0.1.0"


class GeoServerClient:
    """Async client for one GeoServer workspace."""

    def __init__(
        self,
        base_url: str,
        workspace: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.workspace = workspace
        self.timeout = timeout
        self._transport = transport

    @property
    def wms_url(self) -> str:
        return f"{self.base_url}/{self.workspace}/wms"

    @property
    def ows_url(self) -> str:
        return f"{self.base_url}/{self.workspace}/ows"

    def type_name(self, display_name: str) -> str:
        """'Ward Boundary' -> 'gramagis:Ward Boundary'."""
        return f"{self.workspace}:{display_name}"

    # -- request parameters -------------------------------------------------

    @staticmethod
    def feature_info_params(
        layer_name: str,
        bbox: Bounds,
        width: int,
        height: int,
        x: int,
        y: int,
    ) -> dict:
        """WMS 1.1.1 GetFeatureInfo parameters for a click at pixel (x, y)."""
        return {
            "request": "GetFeatureInfo",
            "service": "WMS",
            "srs": "EPSG:4326",
            "version": "1.1.1",
            "format": "image/png",
            "bbox": bbox.to_bbox_string(),
            "height": height,
            "width": width,
            "layers": layer_name,
            "query_layers": layer_name,
            "info_format": "application/json",
            "x": x,
            "y": y,
        }

    def get_feature_params(self, display_name: str, cql_filter: str | None = None) -> dict:
        """WFS 1.0.0 GetFeature parameters returning GeoJSON."""
        params = {
            "service": "WFS",
            "version": "1.0.0",
            "request": "GetFeature",
            "typeName": self.type_name(display_name),
            "outputFormat": "application/json",
        }
        if cql_filter:
            params["CQL_FILTER"] = cql_filter
        return params

    # -- requests -----------------------------------------------------------

    async def _get_json(self, url: str, params: dict) -> dict:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": _USER_AGENT},
        ) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as e:
            raise ValueError(f"GeoServer returned non-JSON body from {url}") from e
        if not isinstance(data, dict):
            raise ValueError(f"GeoServer returned {type(data).__name__}, not a GeoJSON object, from {url}")
        return data

    async def get_feature_info(
        self,
        layer_name: str,
        bbox: Bounds,
        width: int,
        height: int,
        x: int,
        y: int,
    ) -> list[FeatureResult]:
        """Identify features of *layer_name* under pixel (x, y)."""
        params = self.feature_info_params(layer_name, bbox, width, height, x, y)
        data = await self._get_json(self.wms_url, params)
        return parse_feature_collection(data)

    async def fetch_boundary(self, display_name: str) -> dict:
        """Load the boundary layer as a raw FeatureCollection dict."""
        data = await self._get_json(self.ows_url, self.get_feature_params(display_name))
        count = len(data.get("features") or [])
        logger.info(f"Boundary '{display_name}' loaded: {count} feature(s)")
        return data

    async def search_features(self, display_name: str, cql_filter: str) -> list[FeatureResult]:
        """WFS search of one layer restricted by *cql_filter*."""
        params = self.get_feature_params(display_name, cql_filter)
        data = await self._get_json(self.ows_url, params)
        return parse_feature_collection(data)
