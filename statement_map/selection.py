"""Selection state and the marker toggle state machine.

Marker click on statement S:
    S selected, connections shown   -> clear all, deselect
    S selected, nothing shown       -> show all for S
    anything else                   -> clear all, select S, show all for S
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from statement_map.visibility import VisibilityController

logger = logging.getLogger(__name__)


class SelectionState:
    """Selected statement plus the ordered set of highlighted connection ids.

    A connection id is in the highlighted set iff its layer is attached to
    the map. Only the visibility controller changes the highlighted set.
    """

    def __init__(self) -> None:
        self.selected_statement: str | None = None
        self._highlighted: list[str] = []

    @property
    def highlighted(self) -> tuple[str, ...]:
        return tuple(self._highlighted)

    @property
    def connections_visible(self) -> bool:
        return bool(self._highlighted)

    def is_selected(self, statement: str) -> bool:
        return self.selected_statement is not None and self.selected_statement == statement

    def select(self, statement: str) -> None:
        self.selected_statement = statement

    def deselect(self) -> None:
        self.selected_statement = None

    def add_highlight(self, connection_id: str) -> None:
        if connection_id not in self._highlighted:
            self._highlighted.append(connection_id)

    def clear_highlights(self) -> None:
        self._highlighted.clear()

    def __repr__(self) -> str:
        return f"SelectionState(selected={self.selected_statement!r}, highlighted={self._highlighted!r})"


def show_statement(state: SelectionState, visibility: "VisibilityController", statement: str) -> None:
    """Clear, select `statement` and show all of its connections."""
    visibility.clear_all()
    state.select(statement)
    visibility.highlight_all_for_statement(statement)


def toggle_statement(state: SelectionState, visibility: "VisibilityController", statement: str) -> bool:
    """Apply the marker toggle rule. Returns whether connections are now shown."""
    if state.is_selected(statement):
        if state.connections_visible:
            logger.debug("Toggling off %s", statement)
            visibility.clear_all()
            state.deselect()
        else:
            visibility.highlight_all_for_statement(statement)
    else:
        show_statement(state, visibility, statement)
    return state.connections_visible


def clear_selection(state: SelectionState, visibility: "VisibilityController") -> None:
    visibility.clear_all()
    state.deselect()
