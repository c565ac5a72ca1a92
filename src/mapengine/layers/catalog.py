"""The fixed layer catalog served by the GramaGIS GeoServer workspace."""

from __future__ import annotations

from mapengine.layers.layer import LayerDescriptor, LayerKind

WORLD_LAYER_ID = "world_map"
BASEMAP_LAYER_ID = "panchayat_basemap"

THEMATIC_Z_INDEX = 1000

# GeoServer layer names in sidebar order.
THEMATIC_LAYER_NAMES = [
    "Banks",
    "Colleges",
    "Fire Stations",
    "Government Offices",
    "Hospitals",
    "Hotels",
    "Petrol Pumps",
    "Police Stations",
    "Post Offices",
    "Restaurants",
    "Schools",
    "Toilets",
    "Roads",
    "Boundaries",
    "Ward Boundary",
]


def layer_id_for(display_name: str) -> str:
    """'Fire Stations' -> 'fire_stations'."""
    return "_".join(display_name.lower().split())


def display_name_for(layer_id: str) -> str:
    """'fire_stations' -> 'Fire Stations'."""
    return " ".join(word[:1].upper() + word[1:] for word in layer_id.split("_"))


def build_catalog(workspace: str, osm_tile_url: str) -> list[LayerDescriptor]:
    """Build the session's descriptors: two basemaps, then thematic layers."""
    catalog = [
        LayerDescriptor(
            id=WORLD_LAYER_ID,
            display_name="World Map",
            remote_layer_name=osm_tile_url,
            z_index=0,
            kind=LayerKind.BASEMAP,
        ),
        LayerDescriptor(
            id=BASEMAP_LAYER_ID,
            display_name="Panchayat Basemap",
            remote_layer_name=osm_tile_url,
            z_index=0,
            kind=LayerKind.BASEMAP,
        ),
    ]
    for name in THEMATIC_LAYER_NAMES:
        catalog.append(LayerDescriptor(
            id=layer_id_for(name),
            display_name=name,
            remote_layer_name=f"{workspace}:{name}",
            z_index=THEMATIC_Z_INDEX,
        ))
    return catalog
