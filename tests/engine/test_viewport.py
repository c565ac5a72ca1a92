"""Tests for the viewport controller: mask, deferred fit, pan lock, world mode."""

import asyncio

import pytest

from mapengine.map import Bounds
from mapengine.viewport import ViewportPolicy

BOUNDARY_BOUNDS = Bounds(9.88, 76.90, 9.95, 77.00)


async def _start(state, settle=0.02):
    ok = await state.start()
    await asyncio.sleep(settle)
    return ok


def _layer_names(state):
    return [layer.name for layer in state.map.layers()]


@pytest.mark.unit
class TestStartup:

    def test_mask_and_fit(self, state):
        assert asyncio.run(_start(state)) is True
        assert _layer_names(state) == ["panchayat_basemap", "mask"]
        assert state.viewport.bounds == BOUNDARY_BOUNDS
        assert state.viewport.fit_pending is False

        visible = state.map.get_bounds()
        assert visible.contains(BOUNDARY_BOUNDS.south, BOUNDARY_BOUNDS.west)
        assert visible.contains(BOUNDARY_BOUNDS.north, BOUNDARY_BOUNDS.east)

    def test_island_locks_to_padded_boundary(self, state):
        asyncio.run(_start(state))
        locked = state.map.max_bounds
        padded = BOUNDARY_BOUNDS.pad(0.2)
        assert locked.south == pytest.approx(padded.south)
        assert locked.north == pytest.approx(padded.north)
        assert locked.west == pytest.approx(padded.west)
        assert locked.east == pytest.approx(padded.east)

    def test_free_policy_never_locks(self, state_factory):
        state = state_factory(ViewportPolicy.free())
        asyncio.run(_start(state))
        assert state.map.max_bounds is None
        assert "mask" in _layer_names(state)

    def test_fit_waits_for_delay(self, state_factory):
        state = state_factory(fit_delay=10.0)

        async def run():
            await _start(state)
            assert state.viewport.fit_pending is True
            assert state.map.max_bounds is None
            state.map.resize(900, 600)
            state.viewport.fit_now()
            assert state.viewport.fit_pending is False

        asyncio.run(run())
        assert state.map.size == (900, 600)
        assert state.map.max_bounds is not None

    def test_fit_uses_padding(self, state_factory):
        plain = state_factory()
        padded = state_factory(fit_padding_top_left=(340, 20))
        asyncio.run(_start(plain))
        asyncio.run(_start(padded))
        assert padded.map.center[1] < plain.map.center[1]

    def test_empty_boundary_leaves_map_unmasked(self, state, geoserver):
        geoserver.boundary = {"type": "FeatureCollection", "features": []}
        assert asyncio.run(_start(state)) is False
        assert _layer_names(state) == ["panchayat_basemap"]
        assert state.map.max_bounds is None
        assert state.viewport.to_dict()["masked"] is False

    def test_unreachable_geoserver_keeps_basemap(self, state, geoserver):
        geoserver.fail = True
        assert asyncio.run(_start(state)) is False
        assert _layer_names(state) == ["panchayat_basemap"]

    def test_server_error(self, state, geoserver):
        geoserver.status_code = 500
        assert asyncio.run(_start(state)) is False

    def test_non_object_boundary_leaves_map_unmasked(self, state, geoserver):
        geoserver.boundary = []
        assert asyncio.run(_start(state)) is False
        assert _layer_names(state) == ["panchayat_basemap"]
        assert state.map.max_bounds is None


@pytest.mark.unit
class TestWorldMode:

    def test_world_mode_removes_mask_and_unlocks(self, state):
        asyncio.run(_start(state))
        state.registry.toggle("world_map", True)
        assert "mask" not in _layer_names(state)
        assert state.map.max_bounds is None
        assert state.viewport.to_dict()["world_mode"] is True

    def test_leaving_world_mode_restores_mask_and_lock(self, state):
        asyncio.run(_start(state))
        state.registry.toggle("world_map", True)
        state.registry.toggle("world_map", False)
        assert "mask" in _layer_names(state)
        assert state.map.max_bounds is not None

    def test_data_layers_stay_above_mask(self, state):
        asyncio.run(_start(state))
        state.registry.toggle("schools", True)
        state.registry.toggle("world_map", True)
        state.registry.toggle("world_map", False)
        assert _layer_names(state)[-1] == "schools"

    def test_filters_survive_world_mode(self, state):
        asyncio.run(_start(state))
        state.registry.apply_filter("schools", "ward_no = 3")
        state.registry.toggle("world_map", True)
        state.registry.toggle("world_map", False)
        assert state.registry.get("schools").filter == "ward_no = 3"

    def test_repeat_toggle_is_noop(self, state):
        asyncio.run(_start(state))
        state.registry.toggle("world_map", False)
        assert _layer_names(state).count("mask") == 1

    def test_world_mode_before_boundary(self, state):
        state.registry.toggle("world_map", True)
        asyncio.run(_start(state))
        assert "mask" not in _layer_names(state)
        assert state.map.max_bounds is None
        state.registry.toggle("world_map", False)
        assert "mask" in _layer_names(state)
