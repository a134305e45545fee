"""Map application — owns the state and dispatches interaction events.

Nothing interactive runs until both datasets have loaded. A failed load
leaves the application in the `failed` state with the error panel shown.
"""

import logging
from typing import Callable

from statement_map.canvas import DeferredCalls, MapCanvas
from statement_map.config import Config
from statement_map.connection_index import IndexBuildResult, build_connection_index
from statement_map.events import (
    ConnectionClicked,
    Event,
    MapBackgroundClicked,
    MarkerClicked,
    PanelAction,
    PanelActionClicked,
    PickerDismissed,
    PickerLocationChosen,
    SearchInput,
    SearchResultChosen,
)
from statement_map.loader import Dataset, DatasetLoadError, load_dataset
from statement_map.models import Connection, Location
from statement_map.panel import (
    DetailPanel,
    render_connection,
    render_default,
    render_error,
    render_location,
)
from statement_map.search import StatementSearch
from statement_map.selection import SelectionState, clear_selection, show_statement, toggle_statement
from statement_map.visibility import VisibilityController

logger = logging.getLogger(__name__)


class AppStatus:
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class MapApplication:
    def __init__(self, config: Config | None = None, clock: DeferredCalls | None = None) -> None:
        self.config = config or Config()
        self.clock = clock or DeferredCalls()
        self.canvas = MapCanvas(self.clock, self.config.map.center, self.config.map.zoom)
        self.state = SelectionState()
        self.panel = DetailPanel()
        self.search = StatementSearch(self.jump_to, self.clock, self.config.search)
        self.status = AppStatus.LOADING
        self.dataset: Dataset | None = None
        self.index: IndexBuildResult | None = None
        self.visibility: VisibilityController | None = None
        self._panel_location: Location | None = None

    # --- Loading ---

    def load(self, loader: Callable[[Config], Dataset] = load_dataset) -> bool:
        try:
            dataset = loader(self.config)
        except DatasetLoadError as e:
            logger.error("Error loading data: %s", e)
            self.status = AppStatus.FAILED
            self.panel.show(render_error())
            return False
        self.start(dataset)
        return True

    def start(self, dataset: Dataset) -> None:
        """Build the index and enable interaction for a fully loaded dataset."""
        self.dataset = dataset
        self.index = build_connection_index(dataset.locations, dataset.connections)
        self.visibility = VisibilityController(
            self.canvas, self.index.layers, dataset.connections, self.state, self.config.highlight,
        )
        self.canvas.add_markers(dataset.locations)
        self.search.set_locations(dataset.locations)
        self.status = AppStatus.READY
        logger.info(
            "Map ready: %d markers, %d connection layers",
            len(dataset.locations), len(self.index.layers),
        )

    @property
    def ready(self) -> bool:
        return self.status == AppStatus.READY

    @property
    def subtitle(self) -> str:
        if self.dataset is None:
            return "Statement Location Index"
        return (
            f"Statement Location Index • {len(self.dataset.locations)} locations • "
            f"{len(self.dataset.connections)} connections"
        )

    # --- Dispatch ---

    def handle(self, event: Event) -> None:
        if isinstance(event, SearchInput):
            self.search.input(event.text)
            return

        if not self.ready:
            logger.debug("Ignoring %s before data is loaded", type(event).__name__)
            return

        if isinstance(event, MarkerClicked):
            self.click_marker(event.location)
        elif isinstance(event, ConnectionClicked):
            self.show_connection(event.connection_id)
        elif isinstance(event, MapBackgroundClicked):
            clear_selection(self.state, self.visibility)
            self._panel_location = None
            self.panel.show(render_default())
        elif isinstance(event, SearchResultChosen):
            self.search.choose(event.result)
        elif isinstance(event, PickerLocationChosen):
            self.search.choose_location(event.index)
        elif isinstance(event, PickerDismissed):
            self.search.dismiss_picker()
        elif isinstance(event, PanelActionClicked):
            self._handle_panel_action(event)
        else:
            raise TypeError(f"Unknown event: {event!r}")

    def _handle_panel_action(self, event: PanelActionClicked) -> None:
        if event.action == PanelAction.SHOW_CONNECTION:
            self.show_connection(event.target)
        elif event.action == PanelAction.HIGHLIGHT_CONNECTION:
            self.visibility.highlight_one(event.target)
        elif event.action == PanelAction.CLEAR_CONNECTIONS:
            self.visibility.clear_all()
        elif event.action == PanelAction.SHOW_STATEMENT:
            show_statement(self.state, self.visibility, event.target)
        elif event.action == PanelAction.TOGGLE_CONNECTIONS:
            toggle_statement(self.state, self.visibility, event.target)
            if self._panel_location is not None and self._panel_location.statement == event.target:
                self._show_location(self._panel_location)

    # --- Operations ---

    def click_marker(self, location: Location) -> None:
        toggle_statement(self.state, self.visibility, location.statement)
        self._show_location(location)

    def show_connection(self, connection_id: str) -> None:
        """Connection detail in the panel, and only that connection on the map."""
        conn = self._connection(connection_id)
        if conn is None:
            logger.warning("Unknown connection %s", connection_id)
            return
        self._panel_location = None
        self.panel.show(render_connection(conn))
        self.visibility.isolate(connection_id)

    def jump_to(self, location: Location, statement: str) -> None:
        """Fly to a location; once there, pulse its marker, then show it and its connections."""
        cfg = self.config.search
        self.canvas.fly_to(location.coordinate, cfg.jump_zoom, cfg.fly_duration)
        self.clock.call_later(cfg.fly_duration, lambda: self._arrive(location, statement))

    def _arrive(self, location: Location, statement: str) -> None:
        self.canvas.emphasize_marker(location, self.config.search.pulse_duration)
        show_statement(self.state, self.visibility, statement)
        self._show_location(location)

    def _show_location(self, location: Location) -> None:
        self._panel_location = location
        visible = self.state.is_selected(location.statement) and self.state.connections_visible
        self.panel.show(render_location(
            location,
            self.dataset.connections_for(location.statement),
            connections_visible=visible,
            config=self.config.panel,
        ))

    def _connection(self, connection_id: str) -> Connection | None:
        for conn in self.dataset.connections:
            if conn.id == connection_id:
                return conn
        return None
