"""Page-side UI state: detail panel, search box feedback, feature highlight.

The browser renders these exactly as they are reported by /api/map/state.
Timed behaviour (placeholder restore, highlight removal) runs through the
Scheduler so a newer trigger replaces a pending one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from mapengine.layers.layer import FeatureResult
from mapengine.map.view import MapView, VectorLayer
from mapengine.scheduler import Scheduler

# Internal identifier fields never shown in the detail panel.
EXCLUDED_FIELDS = {"geom", "id", "gid", "objectid"}

MISSING_VALUE = "Attribute not found"
NO_RESULTS_PLACEHOLDER = "No results found!"
DEFAULT_PLACEHOLDER = "Search places, wards, categories..."

HIGHLIGHT_STYLE = {"color": "yellow", "weight": 5}


def format_key(key: str) -> str:
    """'date_established' -> 'Date Established'."""
    return re.sub(r"\b\w", lambda m: m.group().upper(), key.replace("_", " "))


def format_value(value):
    if value is None or value == "":
        return MISSING_VALUE
    return value


@dataclass
class DetailPanel:
    """Right-hand panel listing a searched feature's attributes."""

    visible: bool = False
    title: str = ""
    rows: list[tuple[str, object]] = field(default_factory=list)

    def show(self, properties: dict) -> None:
        self.title = properties.get("name") or properties.get("Name") or "Details"
        self.rows = [
            (format_key(key), format_value(value))
            for key, value in properties.items()
            if key.lower() not in EXCLUDED_FIELDS
        ]
        self.visible = True

    def close(self) -> None:
        self.visible = False

    def to_dict(self) -> dict:
        return {
            "visible": self.visible,
            "title": self.title,
            "rows": [{"label": label, "value": value} for label, value in self.rows],
        }


class SearchBox:
    """The search input's value and placeholder feedback."""

    FEEDBACK_KEY = "search.feedback"

    def __init__(
        self,
        scheduler: Scheduler,
        placeholder: str = DEFAULT_PLACEHOLDER,
        feedback_duration: float = 3.0,
    ) -> None:
        self.scheduler = scheduler
        self.feedback_duration = feedback_duration
        self.value = ""
        self.placeholder = placeholder
        self.error = False
        self._restore_text = placeholder

    def show_no_results(self, restore_text: str | None = None) -> None:
        """Clear the input and flash "No results found!".

        The placeholder switches to *restore_text* (default: the current
        placeholder) after the feedback duration.
        """
        if restore_text is None:
            # While already flashing, keep the text we were going to restore.
            restore_text = self._restore_text if self.error else self.placeholder
        self._restore_text = restore_text

        self.value = ""
        self.placeholder = NO_RESULTS_PLACEHOLDER
        self.error = True
        self.scheduler.schedule(self.FEEDBACK_KEY, self.feedback_duration, self._restore)

    def _restore(self) -> None:
        self.placeholder = self._restore_text
        self.error = False

    def to_dict(self) -> dict:
        return {"value": self.value, "placeholder": self.placeholder, "error": self.error}


class Highlighter:
    """Temporary outline drawn over a searched feature."""

    KEY = "highlight"

    def __init__(self, map_view: MapView, scheduler: Scheduler, duration: float = 3.0) -> None:
        self.map = map_view
        self.scheduler = scheduler
        self.duration = duration
        self.layer: VectorLayer | None = None

    def show(self, feature: FeatureResult) -> VectorLayer:
        """Draw *feature*, replacing any highlight still on the map."""
        self.clear()
        self.layer = VectorLayer(
            name=self.KEY,
            geometry=feature.to_geojson(),
            style=dict(HIGHLIGHT_STYLE),
        )
        self.map.add_layer(self.layer)
        self.map.bring_to_front(self.layer)
        self.scheduler.schedule(self.KEY, self.duration, self.clear)
        return self.layer

    def clear(self) -> None:
        self.scheduler.cancel(self.KEY)
        if self.layer is not None:
            self.map.remove_layer(self.layer)
            self.layer = None
