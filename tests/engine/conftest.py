"""Shared fixtures for map engine tests.

FakeGeoServer answers WMS/WFS requests from canned GeoJSON through
httpx.MockTransport, so no test touches the network.
"""

from __future__ import annotations

import httpx
import pytest

from mapengine.geoserver import GeoServerClient
from mapengine.state import AppState
from mapengine.viewport import ViewportPolicy

GEOSERVER_URL = "http://geo.test/geoserver"
WORKSPACE = "gramagis"
OSM_URL = "https://tile.test/{z}/{x}/{y}.png"

# Ward boundary around the panchayat, [lng, lat].
BOUNDARY_RING = [
    [76.90, 9.88],
    [77.00, 9.88],
    [77.00, 9.95],
    [76.90, 9.95],
    [76.90, 9.88],
]

BOUNDARY = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "id": "Ward Boundary.1",
            "geometry": {"type": "Polygon", "coordinates": [BOUNDARY_RING]},
            "properties": {"ward_name": "Kanjar", "ward_no": 1},
        },
    ],
}


def feature_collection(*features: dict) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


class FakeGeoServer:
    """Records every request and answers by request type."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.boundary: dict = BOUNDARY
        self.search_results: list[dict] = []
        self.info_results: list[dict] = []
        self.fail = False
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="error")

        params = request.url.params
        if params.get("request") == "GetFeatureInfo":
            return httpx.Response(200, json=feature_collection(*self.info_results))
        if "CQL_FILTER" in params:
            return httpx.Response(200, json=feature_collection(*self.search_results))
        return httpx.Response(200, json=self.boundary)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def params(self, index: int = -1) -> httpx.QueryParams:
        return self.requests[index].url.params


@pytest.fixture
def geoserver():
    return FakeGeoServer()


@pytest.fixture
def client(geoserver):
    return GeoServerClient(GEOSERVER_URL, WORKSPACE, transport=geoserver.transport)


@pytest.fixture
def state_factory(geoserver):
    """Build an AppState wired to the fake GeoServer, timers shortened."""

    def make_state(policy: ViewportPolicy | None = None, **kwargs) -> AppState:
        options = dict(
            osm_tile_url=OSM_URL,
            fit_delay=0.0,
            highlight_duration=0.05,
            feedback_duration=0.05,
        )
        options.update(kwargs)
        return AppState(
            GeoServerClient(GEOSERVER_URL, WORKSPACE, transport=geoserver.transport),
            policy or ViewportPolicy.island(min_zoom=0),
            **options,
        )

    return make_state


@pytest.fixture
def state(state_factory):
    return state_factory()
