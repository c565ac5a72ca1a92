"""Unit tests for the map router: layers, search, identify, viewport.

Endpoints run against a real AppState wired to the fake GeoServer
(httpx.MockTransport), so no test touches the network.
"""
from __future__ import annotations

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import ValidationError

from mapengine.map import Popup
from viewer.routers.map import ClickRequest, ViewportRequest, router


def _make_client(state=None):
    app = FastAPI()
    app.include_router(router)
    if state is not None:
        app.state.viewer = state
    return TestClient(app)


@pytest.fixture
def api(state):
    return _make_client(state)


# ---------------------------------------------------------------------------
# Pydantic Models
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestMapModels:

    def test_click_request(self):
        r = ClickRequest(lat=9.9, lng=76.9)
        assert r.lat == pytest.approx(9.9)

    def test_click_request_missing(self):
        with pytest.raises(ValidationError):
            ClickRequest(lat=9.9)

    def test_viewport_request_view_optional(self):
        r = ViewportRequest(width=800, height=600)
        assert r.lat is None
        assert r.zoom is None


# ---------------------------------------------------------------------------
# State / layers
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestStateEndpoints:

    def test_not_initialized(self):
        resp = _make_client().get("/api/map/state")
        assert resp.status_code == 503

    def test_state(self, api):
        resp = api.get("/api/map/state")
        assert resp.status_code == 200
        data = resp.json()
        assert set(data) == {"map", "layers", "viewport", "panel", "search"}
        assert data["map"]["zoom"] == 13

    def test_list_layers(self, api):
        layers = api.get("/api/map/layers").json()
        assert len(layers) == 17
        assert layers[0]["id"] == "world_map"
        assert layers[1]["id"] == "panchayat_basemap"
        assert all(layer["visible"] is False for layer in layers)

    def test_wms_params(self, api):
        data = api.get("/api/map/layers/schools/wms").json()
        assert data["url"] == "http://geo.test/geoserver/gramagis/wms"
        assert data["params"]["layers"] == "gramagis:Schools"
        assert data["params"]["zIndex"] == 1000

    def test_wms_params_unknown_layer(self, api):
        assert api.get("/api/map/layers/nope/wms").status_code == 404

    def test_wms_params_basemap(self, api):
        assert api.get("/api/map/layers/world_map/wms").status_code == 400


@pytest.mark.unit
class TestToggle:

    def test_toggle_on(self, api):
        resp = api.post("/api/map/layers/schools/toggle", json={"visible": True})
        assert resp.status_code == 200
        layers = {l["id"]: l for l in resp.json()["layers"]}
        assert layers["schools"]["visible"] is True
        assert resp.json()["map"]["layers"][-1]["name"] == "schools"

    def test_toggle_unknown(self, api):
        resp = api.post("/api/map/layers/nope/toggle", json={"visible": True})
        assert resp.status_code == 404

    def test_toggle_bad_body(self, api):
        resp = api.post("/api/map/layers/schools/toggle", json={})
        assert resp.status_code == 422

    def test_world_mode(self, api, state):
        asyncio.run(state.start())
        resp = api.post("/api/map/world-mode", json={"enabled": True})
        viewport = resp.json()["viewport"]
        assert viewport["world_mode"] is True
        assert viewport["masked"] is False


# ---------------------------------------------------------------------------
# Search / identify
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestQuery:

    def test_filtered_query(self, api):
        resp = api.post("/api/map/query", json={"text": "schools in ward 3"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["outcome"]["status"] == "filtered"
        assert data["outcome"]["cql_filter"] == "ward_no = 3"
        layers = {l["id"]: l for l in data["state"]["layers"]}
        assert layers["schools"]["filter"] == "ward_no = 3"
        assert layers["schools"]["visible"] is True

    def test_no_category(self, api, geoserver):
        data = api.post("/api/map/query", json={"text": "xyz"}).json()
        assert data["outcome"]["status"] == "no_category"
        assert data["state"]["search"]["placeholder"] == "No results found!"
        assert geoserver.requests == []

    def test_found_opens_panel(self, api, geoserver):
        geoserver.search_results = [{
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [76.94, 9.91]},
            "properties": {"name": "GLPS Kanjar", "gid": 1},
        }]
        data = api.post("/api/map/query", json={"text": "schools kanjar"}).json()
        assert data["outcome"]["status"] == "found"
        assert data["state"]["panel"]["title"] == "GLPS Kanjar"
        assert data["state"]["map"]["zoom"] == 17

    def test_close_panel(self, api, state):
        state.panel.show({"name": "A"})
        resp = api.post("/api/map/panel/close")
        assert resp.json()["visible"] is False


@pytest.mark.unit
class TestClick:

    def test_click_without_layers(self, api):
        resp = api.post("/api/map/click", json={"lat": 9.9, "lng": 76.9})
        assert resp.json() == {"popup": None}

    def test_click_identifies(self, api, geoserver):
        geoserver.info_results = [{
            "type": "Feature",
            "geometry": None,
            "properties": {"name": "SBI Kanjar", "ifsc": "SBIN0001"},
        }]
        api.post("/api/map/layers/banks/toggle", json={"visible": True})
        popup = api.post("/api/map/click", json={"lat": 9.9, "lng": 76.9}).json()["popup"]
        assert popup["title"] == "Details"
        assert popup["properties"] == {"name": "SBI Kanjar", "ifsc": "SBIN0001"}

    def test_close_popup(self, api, state):
        state.map.open_popup(Popup(9.9, 76.9, "Details", {}))
        assert api.post("/api/map/popup/close").json() == {"popup": None}
        assert state.map.popup is None


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestViewport:

    def test_invalid_size(self, api):
        resp = api.post("/api/map/viewport", json={"width": 0, "height": 600})
        assert resp.status_code == 400

    def test_resize(self, api):
        data = api.post("/api/map/viewport", json={"width": 900, "height": 600}).json()
        assert data["size"] == [900, 600]

    def test_pan_and_zoom(self, api):
        data = api.post(
            "/api/map/viewport",
            json={"width": 900, "height": 600, "lat": 9.9, "lng": 76.95, "zoom": 15},
        ).json()
        assert data["center"] == [9.9, 76.95]
        assert data["zoom"] == 15

    def test_resize_runs_pending_fit(self, state_factory):
        state = state_factory(fit_delay=10.0)
        api = _make_client(state)
        assert asyncio.run(state.start()) is True
        assert state.viewport.fit_pending is True

        data = api.post("/api/map/viewport", json={"width": 900, "height": 600}).json()
        assert data["size"] == [900, 600]
        assert data["max_bounds"] is not None
        assert state.viewport.fit_pending is False

    def test_pan_lock_applies(self, api, state):
        async def start():
            await state.start()
            await asyncio.sleep(0.02)

        asyncio.run(start())
        data = api.post(
            "/api/map/viewport",
            json={"width": 1280, "height": 800, "lat": 20.0, "lng": 80.0},
        ).json()
        south_west, north_east = data["max_bounds"]
        assert data["center"] == north_east
