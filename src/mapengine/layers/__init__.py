"""Map layer system: catalog, registry and GeoServer feature parsing."""

from mapengine.layers.catalog import BASEMAP_LAYER_ID, WORLD_LAYER_ID, build_catalog
from mapengine.layers.layer import FeatureResult, LayerDescriptor, LayerKind, RegistryEntry
from mapengine.layers.registry import LayerRegistry

__all__ = [
    "BASEMAP_LAYER_ID",
    "FeatureResult",
    "LayerDescriptor",
    "LayerKind",
    "LayerRegistry",
    "RegistryEntry",
    "WORLD_LAYER_ID",
    "build_catalog",
]
