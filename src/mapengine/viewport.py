"""Viewport controller: boundary mask, initial fit and pan locking.

Startup is two-phase. Phase one runs as soon as the boundary arrives: build
and show the mask, compute the boundary's bounds. Phase two runs after a
short delay, once the page layout has settled: recompute the container
size, fit the view, then lock panning to the padded bounds.

World mode (the "World Map" checkbox) removes the mask and lifts the pan
lock; leaving it restores both.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from mapengine.layers.registry import LayerRegistry
from mapengine.map.geometry import Bounds
from mapengine.map.view import MapLayer, MapView, VectorLayer
from mapengine.mask import EmptyBoundaryError, MaskPolygon, build_mask
from mapengine.scheduler import Scheduler


@dataclass(frozen=True)
class ViewportPolicy:
    """How freely the user may move the map.

    Attributes:
        bounded: Lock panning to the boundary once it is fitted.
        min_zoom: Lowest zoom the user can reach.
        max_zoom: Highest zoom the user can reach.
        initial_center: (lat, lng) before the boundary arrives.
        initial_zoom: Zoom before the boundary arrives.
        max_bounds_pad: Fraction the pan lock extends past the boundary.
    """

    bounded: bool = True
    min_zoom: int = 10
    max_zoom: int = 19
    initial_center: tuple[float, float] = (9.916, 76.945)
    initial_zoom: int = 13
    max_bounds_pad: float = 0.2

    @classmethod
    def island(cls, **overrides) -> ViewportPolicy:
        return cls(bounded=True, **overrides)

    @classmethod
    def free(cls, **overrides) -> ViewportPolicy:
        overrides.setdefault("min_zoom", 0)
        return cls(bounded=False, **overrides)


class ViewportController:
    """Keeps the view on the boundary and owns the mask layer."""

    FIT_KEY = "viewport.fit"

    def __init__(
        self,
        map_view: MapView,
        registry: LayerRegistry,
        scheduler: Scheduler,
        policy: ViewportPolicy,
        basemap: MapLayer | None = None,
        fit_delay: float = 0.5,
        padding_top_left: tuple[int, int] = (0, 0),
        padding_bottom_right: tuple[int, int] = (0, 0),
        background_color: str = "#e3eaef",
    ) -> None:
        self.map = map_view
        self.registry = registry
        self.scheduler = scheduler
        self.policy = policy
        self.basemap = basemap
        self.fit_delay = fit_delay
        self.padding_top_left = padding_top_left
        self.padding_bottom_right = padding_bottom_right
        self.background_color = background_color

        self.mask: MaskPolygon | None = None
        self.mask_layer: VectorLayer | None = None
        self.bounds: Bounds | None = None
        self.world_mode = False

    def initialize(self, boundary: dict) -> bool:
        """Mask the map to *boundary* and schedule the deferred fit.

        Returns False when the boundary is unusable; the map then stays
        unmasked and unrestricted.
        """
        try:
            self.mask = build_mask(boundary, fill_color=self.background_color)
            self.bounds = Bounds.from_geojson(boundary)
        except (EmptyBoundaryError, ValueError) as e:
            logger.warning(f"Boundary unusable, map left unmasked: {e}")
            self.mask = None
            self.bounds = None
            return False

        style = self.mask.style
        self.mask_layer = VectorLayer(
            name="mask",
            z_index=style.z_index,
            geometry={"type": "Polygon", "coordinates": self.mask.rings},
            style=style.to_dict(),
            interactive=style.interactive,
        )
        if not self.world_mode:
            self.map.add_layer(self.mask_layer)
        if self.basemap is not None:
            self.map.bring_to_back(self.basemap)
        logger.info("Mask applied")

        self.scheduler.schedule(self.FIT_KEY, self.fit_delay, self._fit)
        return True

    @property
    def fit_pending(self) -> bool:
        return self.scheduler.pending(self.FIT_KEY)

    def fit_now(self) -> None:
        """Run the pending fit immediately (final container size known)."""
        if self.scheduler.cancel(self.FIT_KEY):
            self._fit()

    def _fit(self) -> None:
        if self.bounds is None:
            return
        self.map.invalidate_size()
        self.map.fit_bounds(self.bounds, self.padding_top_left, self.padding_bottom_right)
        self.lock_to_boundary(self.bounds)
        logger.debug(f"View fitted to boundary at zoom {self.map.zoom}")

    def lock_to_boundary(self, bounds: Bounds) -> None:
        """Restrict panning to *bounds* grown by the policy's margin."""
        if not self.policy.bounded or self.world_mode:
            return
        self.map.set_max_bounds(bounds.pad(self.policy.max_bounds_pad))

    def unlock(self) -> None:
        self.map.set_max_bounds(None)

    def on_world_mode_toggle(self, enabled: bool) -> None:
        """Switch between world mode and boundary mode.

        Layer filters are left alone; visible data layers are raised back
        above the mask when it returns.
        """
        if enabled == self.world_mode:
            return
        self.world_mode = enabled

        if enabled:
            if self.mask_layer is not None:
                self.map.remove_layer(self.mask_layer)
            self.unlock()
            logger.info("World mode on")
            return

        if self.mask_layer is not None:
            self.map.add_layer(self.mask_layer)
            for entry in self.registry.visible_data_layers():
                self.map.bring_to_front(entry.handle)
        if self.bounds is not None:
            self.lock_to_boundary(self.bounds)
        logger.info("World mode off")

    def to_dict(self) -> dict:
        return {
            "world_mode": self.world_mode,
            "bounded": self.policy.bounded,
            "masked": self.mask_layer is not None and self.map.has_layer(self.mask_layer),
            "boundary_bounds": self.bounds.to_list() if self.bounds else None,
            "fit_pending": self.fit_pending,
        }
