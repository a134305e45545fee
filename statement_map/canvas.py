"""Map capabilities the core depends on, and an in-memory map that implements them.

The core never talks to a mapping library directly. It attaches and
detaches `Renderable` layers and pans a `Pannable` view. `MapCanvas` keeps
the render tree in memory, which is enough to drive the static folium
export and to test interaction flows without a browser.

Timed effects go through `DeferredCalls`, a simulated clock: nothing runs
until `advance()` moves time forward.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from statement_map.models import Location

logger = logging.getLogger(__name__)


class Renderable(Protocol):
    def set_opacity(self, line_opacity: float, label_opacity: float) -> None: ...


class Pannable(Protocol):
    def fly_to(self, coordinate: tuple[float, float], zoom: int, duration: float) -> None: ...


# --- Simulated clock ---


@dataclass(order=True)
class _Pending:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class DeferredCalls:
    """Delayed callbacks driven by explicit time advancement."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[_Pending] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Pending:
        pending = _Pending(self.now + max(delay, 0.0), next(self._seq), callback)
        heapq.heappush(self._queue, pending)
        return pending

    def cancel(self, pending: _Pending) -> None:
        pending.cancelled = True

    @property
    def pending(self) -> int:
        return sum(1 for p in self._queue if not p.cancelled)

    def advance(self, seconds: float) -> int:
        """Move time forward, running every callback that falls due. Returns count run."""
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0].due <= target:
            pending = heapq.heappop(self._queue)
            if pending.cancelled:
                continue
            self.now = pending.due
            pending.callback()
            ran += 1
        self.now = target
        return ran

    def run_all(self) -> int:
        """Advance until nothing is pending."""
        ran = 0
        while self.pending:
            ran += self.advance(max(p.due for p in self._queue) - self.now)
        return ran


# --- In-memory map ---


class MapCanvas:
    """Render tree of one map view: markers, attached layers, viewport."""

    def __init__(
        self,
        clock: DeferredCalls | None = None,
        center: tuple[float, float] = (54.0, -2.0),
        zoom: int = 5,
    ) -> None:
        self.clock = clock or DeferredCalls()
        self.center = center
        self.zoom = zoom
        self.markers: list[Location] = []
        self.emphasized: list[Location] = []
        self.history: list[tuple[str, Any]] = []
        self._layers: list[Any] = []

    # Layers

    def add_layer(self, layer: Any) -> None:
        if not self.has_layer(layer):
            self._layers.append(layer)
            self.history.append(("add_layer", layer))

    def remove_layer(self, layer: Any) -> None:
        if self.has_layer(layer):
            self._layers = [x for x in self._layers if x is not layer]
            self.history.append(("remove_layer", layer))

    def has_layer(self, layer: Any) -> bool:
        return any(x is layer for x in self._layers)

    @property
    def layers(self) -> list[Any]:
        return list(self._layers)

    # Markers

    def add_markers(self, locations: list[Location]) -> None:
        self.markers.extend(locations)

    def emphasize_marker(self, location: Location, duration: float) -> int:
        """Pulse every marker at this statement+place for `duration` seconds."""
        matched = [
            m for m in self.markers
            if m.statement == location.statement and m.place == location.place
        ]
        self.history.append(("emphasize_marker", location))
        for marker in matched:
            self.emphasized.append(marker)
            self.clock.call_later(duration, lambda m=marker: self._unemphasize(m))
        return len(matched)

    def _unemphasize(self, marker: Location) -> None:
        # one pulse ends; a later pulse on the same marker keeps running
        for i, m in enumerate(self.emphasized):
            if m is marker:
                del self.emphasized[i]
                return

    # Viewport

    def fly_to(self, coordinate: tuple[float, float], zoom: int, duration: float) -> None:
        logger.debug("Flying to %s at zoom %d over %.1fs", coordinate, zoom, duration)
        self.center = coordinate
        self.zoom = zoom
        self.history.append(("fly_to", coordinate))
