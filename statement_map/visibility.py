"""Visibility controller — attaches/detaches precomputed connection layers."""

import logging

from statement_map.canvas import MapCanvas
from statement_map.config import HighlightConfig
from statement_map.connection_index import ConnectionLayer
from statement_map.models import Connection
from statement_map.selection import SelectionState

logger = logging.getLogger(__name__)


class VisibilityController:
    """Keeps the map's attached layers in step with the highlighted set."""

    def __init__(
        self,
        canvas: MapCanvas,
        layers: dict[str, ConnectionLayer],
        connections: list[Connection],
        state: SelectionState,
        config: HighlightConfig | None = None,
    ) -> None:
        self.canvas = canvas
        self.layers = layers
        self.connections = connections
        self.state = state
        self.config = config or HighlightConfig()

    def clear_all(self) -> None:
        """Detach every layer, make every element invisible, empty the highlighted set."""
        for layer in self.layers.values():
            self.canvas.remove_layer(layer)
        for layer in self.layers.values():
            layer.set_opacity(0.0, 0.0)
        self.state.clear_highlights()

    def highlight_one(self, connection_id: str) -> bool:
        layer = self.layers.get(connection_id)
        if layer is None:
            logger.debug("No layer for connection %s", connection_id)
            return False

        self.canvas.add_layer(layer)
        layer.set_opacity(self.config.line_opacity, self.config.label_opacity)
        self.state.add_highlight(connection_id)
        return True

    def highlight_all_for_statement(self, statement: str) -> list[str]:
        """Clear, then highlight every connection touching `statement`."""
        self.clear_all()
        if not statement:
            return []

        shown = []
        for conn in self.connections:
            if conn.involves(statement) and self.highlight_one(conn.id):
                shown.append(conn.id)
        logger.debug("Highlighted %d connections for %s", len(shown), statement)
        return shown

    def isolate(self, connection_id: str) -> bool:
        """Show only this connection."""
        self.clear_all()
        return self.highlight_one(connection_id)
