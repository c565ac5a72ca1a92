"""Parse GeoServer GeoJSON responses into FeatureResult objects.

GetFeatureInfo (info_format=application/json) and WFS GetFeature
(outputFormat=application/json) both answer with a FeatureCollection.
Coordinates stay in [lng, lat].
"""

from __future__ import annotations

import json

from mapengine.layers.layer import FeatureResult

GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
)


def parse_feature_collection(data: dict | str) -> list[FeatureResult]:
    """Parse a FeatureCollection (dict or JSON string) into features.

    Features without a usable geometry (null, unknown type, or no
    coordinates) are kept with an empty geometry: GetFeatureInfo on
    raster-backed layers may return null geometries.

    Raises:
        ValueError: If the payload is not JSON or not a GeoJSON object.
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid GeoJSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("GeoJSON payload must be an object")

    if data.get("type") == "Feature":
        raw_features = [data]
    else:
        raw_features = data.get("features") or []

    features = []
    for raw in raw_features:
        feature = _parse_feature(raw)
        if feature is not None:
            features.append(feature)
    return features


def _parse_feature(raw: dict) -> FeatureResult | None:
    """Parse a single GeoJSON Feature dict into a FeatureResult."""
    if not isinstance(raw, dict):
        return None

    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}

    geometry = raw.get("geometry")
    if (
        not isinstance(geometry, dict)
        or geometry.get("type") not in GEOMETRY_TYPES
        or not geometry.get("coordinates")
    ):
        geometry = {}

    feature_id = raw.get("id", "")
    if not isinstance(feature_id, str):
        feature_id = str(feature_id)

    return FeatureResult(
        properties=properties,
        geometry_type=geometry.get("type", ""),
        geometry=geometry,
        feature_id=feature_id,
    )
