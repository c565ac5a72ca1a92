"""Query interpreter: free text to layer filter, zoom and detail panel.

"schools damaged in ward 3" becomes:
- target layer ``schools`` (first catalog keyword found in the text)
- CQL filter ``status = 'damaged' AND ward_no = 3`` on that layer
- a WFS deep search for features whose name or ward name contains the text

Clauses are always built in the order temporal, status, ward. Every query
is independent; only the newest query's deep-search result is applied.
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass, field
from enum import Enum

import httpx
from loguru import logger

from mapengine.geoserver import GeoServerClient
from mapengine.layers.catalog import display_name_for
from mapengine.layers.layer import FeatureResult
from mapengine.layers.registry import LayerRegistry
from mapengine.map.geometry import Bounds
from mapengine.map.view import MapView
from mapengine.query import cql
from mapengine.ui import DetailPanel, Highlighter, SearchBox

# Keyword -> layer id. Scanned in this order; the first hit wins.
LAYER_KEYWORDS: dict[str, str] = {
    "bank": "banks",
    "boundary": "boundaries",
    "college": "colleges",
    "fire": "fire_stations",
    "office": "government_offices",
    "hospital": "hospitals",
    "hotel": "hotels",
    "petrol": "petrol_pumps",
    "police": "police_stations",
    "post": "post_offices",
    "restaurant": "restaurants",
    "road": "roads",
    "school": "schools",
    "toilet": "toilets",
    "ward": "ward_boundary",
}

NO_CATEGORY_HINT = "Try: Schools, Roads, Hotels..."

DATE_ATTRIBUTE = "date_established"
STATUS_ATTRIBUTE = "status"
WARD_ATTRIBUTE = "ward_no"
SEARCH_ATTRIBUTES = ("name", "ward_name")

_YEAR_RE = re.compile(r"\d{4}")
_WARD_RE = re.compile(r"ward\s*(\d+)")
_AFTER_WORDS = ("after", "newer")
_BEFORE_WORDS = ("before", "older")
_DAMAGE_WORDS = ("damaged", "repair")


class QueryStatus(str, Enum):
    NO_CATEGORY = "no_category"
    FILTERED = "filtered"
    FOUND = "found"
    NO_RESULTS = "no_results"
    SEARCH_FAILED = "search_failed"
    STALE = "stale"


@dataclass
class QueryIntent:
    """What a piece of search text asks for."""

    target_layer_id: str | None
    predicate_clauses: list[str] = field(default_factory=list)
    search_text: str = ""

    @property
    def cql_filter(self) -> str | None:
        return cql.and_(*self.predicate_clauses) or None


@dataclass
class QueryOutcome:
    """Result of one execute() call."""

    status: QueryStatus
    intent: QueryIntent
    token: int = 0
    feature: FeatureResult | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "target_layer_id": self.intent.target_layer_id,
            "cql_filter": self.intent.cql_filter,
            "token": self.token,
            "feature": self.feature.to_geojson() if self.feature else None,
        }


def detect_layer(text: str) -> str | None:
    text = text.lower()
    for keyword, layer_id in LAYER_KEYWORDS.items():
        if keyword in text:
            return layer_id
    return None


def temporal_clause(text: str) -> str | None:
    """At most one date clause from the first four-digit year in *text*."""
    match = _YEAR_RE.search(text)
    if match is None:
        return None
    year = match.group(0)
    start = cql.compare(DATE_ATTRIBUTE, ">=", f"{year}-01-01")
    end = cql.compare(DATE_ATTRIBUTE, "<=", f"{year}-12-31")
    if any(word in text for word in _AFTER_WORDS):
        return start
    if any(word in text for word in _BEFORE_WORDS):
        return end
    return cql.and_(start, end)


def status_clause(text: str) -> str | None:
    if any(word in text for word in _DAMAGE_WORDS):
        return cql.compare(STATUS_ATTRIBUTE, "=", "damaged")
    return None


def ward_clause(text: str) -> str | None:
    match = _WARD_RE.search(text)
    if match is None:
        return None
    return cql.compare(WARD_ATTRIBUTE, "=", int(match.group(1)))


def parse(text: str) -> QueryIntent | None:
    """Interpret *text* without touching any state.

    Returns None when no category keyword is present.
    """
    text = text.strip().lower()
    layer_id = detect_layer(text)
    if layer_id is None:
        return None
    clauses = [
        c for c in (temporal_clause(text), status_clause(text), ward_clause(text))
        if c is not None
    ]
    return QueryIntent(target_layer_id=layer_id, predicate_clauses=clauses, search_text=text)


def deep_search_filter(text: str) -> str:
    """``name ILIKE '%text%' OR ward_name ILIKE '%text%'``, text escaped."""
    return cql.or_(*(cql.ilike_contains(attr, text) for attr in SEARCH_ATTRIBUTES))


class QueryInterpreter:
    """Runs search-box queries against the registry and GeoServer."""

    def __init__(
        self,
        registry: LayerRegistry,
        client: GeoServerClient,
        map_view: MapView,
        search_box: SearchBox,
        panel: DetailPanel,
        highlighter: Highlighter,
        point_zoom: int = 17,
    ) -> None:
        self.registry = registry
        self.client = client
        self.map = map_view
        self.search_box = search_box
        self.panel = panel
        self.highlighter = highlighter
        self.point_zoom = point_zoom
        self._tokens = itertools.count(1)
        self._latest = 0

    async def execute(self, text: str) -> QueryOutcome:
        """Interpret *text*, filter and show its layer, then deep-search it."""
        intent = parse(text)
        if intent is None:
            logger.info(f"Query '{text}': no category keyword")
            self.search_box.show_no_results(NO_CATEGORY_HINT)
            return QueryOutcome(QueryStatus.NO_CATEGORY, QueryIntent(None, search_text=text))

        token = next(self._tokens)
        self._latest = token
        self._apply_filter(intent)

        display_name = display_name_for(intent.target_layer_id)
        try:
            features = await self.client.search_features(
                display_name, deep_search_filter(intent.search_text),
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Deep search failed for '{intent.search_text}': {e}")
            return QueryOutcome(QueryStatus.SEARCH_FAILED, intent, token)

        if token != self._latest:
            logger.debug(f"Discarding stale deep search result for '{intent.search_text}'")
            return QueryOutcome(QueryStatus.STALE, intent, token)

        if features:
            feature = features[0]
            self._show_feature(feature)
            return QueryOutcome(QueryStatus.FOUND, intent, token, feature)

        if not intent.predicate_clauses:
            self.search_box.show_no_results()
            return QueryOutcome(QueryStatus.NO_RESULTS, intent, token)
        return QueryOutcome(QueryStatus.FILTERED, intent, token)

    def _apply_filter(self, intent: QueryIntent) -> None:
        self.registry.reset_filters()
        self.registry.apply_filter(intent.target_layer_id, intent.cql_filter)
        entry = self.registry.get(intent.target_layer_id)
        if not entry.visible or not self.map.has_layer(entry.handle):
            self.registry.toggle(intent.target_layer_id, True)
        logger.info(
            f"Layer '{intent.target_layer_id}' filtered: {intent.cql_filter or '(none)'}"
        )

    def _show_feature(self, feature: FeatureResult) -> None:
        try:
            if feature.is_point:
                lng, lat = feature.geometry["coordinates"][:2]
                self.map.set_view((lat, lng), self.point_zoom)
            elif feature.geometry:
                self.map.fit_bounds(Bounds.from_geojson(feature.geometry))
        except (KeyError, ValueError) as e:
            logger.warning(f"Cannot zoom to feature '{feature.feature_id}': {e}")
        self.panel.show(feature.properties)
        if feature.geometry:
            self.highlighter.show(feature)
