"""LayerRegistry: registry of the catalog's live map layers.

Owns one entry per LayerDescriptor: the map handle, its checkbox state and
its active CQL filter. Toggling, filtering and the identify target all go
through here.
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

from mapengine.layers.catalog import WORLD_LAYER_ID
from mapengine.layers.layer import LayerDescriptor, RegistryEntry
from mapengine.map.view import MapLayer, MapView, TileLayer, WmsLayer

WMS_FORMAT = "image/png"
WMS_VERSION = "1.1.1"


class LayerRegistry:
    """Registry of the catalog's map layers."""

    def __init__(self, map_view: MapView, wms_url: str) -> None:
        self.map = map_view
        self.wms_url = wms_url
        self.world_mode_handler: Callable[[bool], None] | None = None
        self._entries: dict[str, RegistryEntry] = {}

    def register(self, descriptor: LayerDescriptor) -> RegistryEntry:
        """Create the map handle for a descriptor and register it.

        Raises:
            ValueError: If the id is already registered.
        """
        if descriptor.id in self._entries:
            raise ValueError(f"Duplicate layer id: {descriptor.id}")

        handle: MapLayer | None
        if descriptor.id == WORLD_LAYER_ID:
            # World mode is a viewport state, not a layer of its own.
            handle = None
        elif descriptor.filterable:
            handle = WmsLayer(
                name=descriptor.id,
                z_index=descriptor.z_index,
                url=self.wms_url,
                params={
                    "layers": descriptor.remote_layer_name,
                    "format": WMS_FORMAT,
                    "transparent": True,
                    "version": WMS_VERSION,
                },
            )
        else:
            handle = TileLayer(
                name=descriptor.id,
                z_index=descriptor.z_index,
                url_template=descriptor.remote_layer_name,
                attribution="© OpenStreetMap",
            )

        entry = RegistryEntry(descriptor=descriptor, handle=handle)
        self._entries[descriptor.id] = entry
        return entry

    def get(self, layer_id: str) -> RegistryEntry:
        """Get an entry by id.

        Raises:
            KeyError: If the layer_id is not registered.
        """
        entry = self._entries.get(layer_id)
        if entry is None:
            raise KeyError(f"Layer not found: {layer_id}")
        return entry

    def __contains__(self, layer_id: str) -> bool:
        return layer_id in self._entries

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def toggle(self, layer_id: str, visible: bool) -> None:
        """Show or hide a layer, the way its sidebar checkbox does.

        Thematic layers are raised above the mask when shown. The world map
        switches world mode (mask off, panning unlocked) instead.
        """
        entry = self.get(layer_id)
        entry.visible = visible

        if layer_id == WORLD_LAYER_ID:
            if self.world_mode_handler is not None:
                self.world_mode_handler(visible)
            return

        if not visible:
            self.map.remove_layer(entry.handle)
            return

        self.map.add_layer(entry.handle)
        if entry.descriptor.filterable:
            self.map.bring_to_front(entry.handle)
        else:
            self.map.bring_to_back(entry.handle)

    def apply_filter(self, layer_id: str, predicate: str | None) -> None:
        """Set or clear the server-side CQL filter of exactly one layer.

        Raises:
            KeyError: If the layer_id is not registered.
            ValueError: If the layer is a basemap.
        """
        entry = self.get(layer_id)
        if not entry.descriptor.filterable:
            raise ValueError(f"Layer is not filterable: {layer_id}")
        entry.handle.set_params(CQL_FILTER=predicate)
        entry.filter = predicate

    def reset_filters(self) -> None:
        """Clear the filter of every thematic layer."""
        for entry in self._entries.values():
            if entry.descriptor.filterable and entry.filter is not None:
                self.apply_filter(entry.descriptor.id, None)

    def visible_data_layers(self) -> list[RegistryEntry]:
        """Thematic layers currently on the map, bottom first."""
        shown = [
            e for e in self._entries.values()
            if e.descriptor.filterable and self.map.has_layer(e.handle)
        ]
        return sorted(shown, key=lambda e: e.handle.z_index)

    def active_data_layer(self) -> str | None:
        """The layer identify queries: the topmost visible thematic layer."""
        shown = self.visible_data_layers()
        if not shown:
            return None
        if len(shown) > 1:
            logger.debug(
                f"{len(shown)} data layers visible, identifying topmost: "
                f"{shown[-1].descriptor.id}"
            )
        return shown[-1].descriptor.id

    def wms_params(self, layer_id: str) -> dict:
        """Tile request parameters for a thematic layer.

        Raises:
            KeyError: If the layer_id is not registered.
            ValueError: If the layer is a basemap.
        """
        entry = self.get(layer_id)
        if not entry.descriptor.filterable:
            raise ValueError(f"Layer is not a WMS layer: {layer_id}")
        params = dict(entry.handle.params)
        params["zIndex"] = entry.handle.z_index
        return params

    def to_dict(self) -> list[dict]:
        return [
            {
                "id": e.descriptor.id,
                "name": e.descriptor.display_name,
                "kind": e.descriptor.kind.value,
                "remote_layer_name": e.descriptor.remote_layer_name,
                "visible": e.visible,
                "filter": e.filter,
            }
            for e in self._entries.values()
        ]
