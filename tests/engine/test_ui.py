"""Tests for the detail panel, search box feedback and highlighter."""

import asyncio

import pytest

from mapengine.layers.layer import FeatureResult
from mapengine.map import MapView, WmsLayer
from mapengine.scheduler import Scheduler
from mapengine.ui import (
    DEFAULT_PLACEHOLDER,
    MISSING_VALUE,
    NO_RESULTS_PLACEHOLDER,
    DetailPanel,
    Highlighter,
    SearchBox,
    format_key,
)


def _point(name="GLPS Kanjar"):
    return FeatureResult(
        properties={"name": name},
        geometry_type="Point",
        geometry={"type": "Point", "coordinates": [76.94, 9.91]},
    )


@pytest.mark.unit
class TestDetailPanel:

    def test_format_key(self):
        assert format_key("date_established") == "Date Established"
        assert format_key("ward_no") == "Ward No"

    def test_show_formats_rows_and_skips_internal_fields(self):
        panel = DetailPanel()
        panel.show({"gid": 4, "name": "GLPS Kanjar", "ward_no": 3, "OBJECTID": 9, "geom": "x"})
        assert panel.visible is True
        assert panel.title == "GLPS Kanjar"
        assert panel.rows == [("Name", "GLPS Kanjar"), ("Ward No", 3)]

    def test_missing_values(self):
        panel = DetailPanel()
        panel.show({"status": None, "remarks": ""})
        assert panel.title == "Details"
        assert panel.rows == [("Status", MISSING_VALUE), ("Remarks", MISSING_VALUE)]

    def test_zero_is_not_missing(self):
        panel = DetailPanel()
        panel.show({"ward_no": 0})
        assert panel.rows == [("Ward No", 0)]

    def test_close(self):
        panel = DetailPanel()
        panel.show({"name": "A"})
        panel.close()
        assert panel.to_dict()["visible"] is False


@pytest.mark.unit
class TestSearchBox:

    def test_no_results_then_restore(self):
        async def run():
            box = SearchBox(Scheduler(), feedback_duration=0.01)
            box.value = "xyz"
            box.show_no_results()
            assert box.to_dict() == {
                "value": "",
                "placeholder": NO_RESULTS_PLACEHOLDER,
                "error": True,
            }
            await asyncio.sleep(0.05)
            return box

        box = asyncio.run(run())
        assert box.placeholder == DEFAULT_PLACEHOLDER
        assert box.error is False

    def test_restore_text_override(self):
        async def run():
            box = SearchBox(Scheduler(), feedback_duration=0.01)
            box.show_no_results("Try: Schools")
            await asyncio.sleep(0.05)
            return box

        assert asyncio.run(run()).placeholder == "Try: Schools"

    def test_repeat_feedback_keeps_original_placeholder(self):
        async def run():
            box = SearchBox(Scheduler(), feedback_duration=0.02)
            box.show_no_results()
            box.show_no_results()
            await asyncio.sleep(0.06)
            return box

        box = asyncio.run(run())
        assert box.placeholder == DEFAULT_PLACEHOLDER


@pytest.mark.unit
class TestHighlighter:

    def test_show_adds_top_layer_and_expires(self):
        async def run():
            view = MapView(center=(9.9, 76.9), zoom=13)
            data = WmsLayer(name="schools", z_index=1000)
            view.add_layer(data)
            highlighter = Highlighter(view, Scheduler(), duration=0.01)
            layer = highlighter.show(_point())
            assert view.layers()[-1] is layer
            assert layer.style == {"color": "yellow", "weight": 5}
            await asyncio.sleep(0.05)
            return view, highlighter

        view, highlighter = asyncio.run(run())
        assert highlighter.layer is None
        assert [l.name for l in view.layers()] == ["schools"]

    def test_new_highlight_replaces_old(self):
        async def run():
            view = MapView(center=(9.9, 76.9), zoom=13)
            highlighter = Highlighter(view, Scheduler(), duration=1.0)
            first = highlighter.show(_point("A"))
            second = highlighter.show(_point("B"))
            assert not view.has_layer(first)
            assert view.has_layer(second)
            highlighter.clear()
            assert view.layers() == []

        asyncio.run(run())
