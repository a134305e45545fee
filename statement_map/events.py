"""Interaction events dispatched to MapApplication.handle()."""

from dataclasses import dataclass
from enum import Enum

from statement_map.models import Location, SearchResult


@dataclass(frozen=True)
class MarkerClicked:
    location: Location


@dataclass(frozen=True)
class ConnectionClicked:
    """A connection line or its label was clicked."""
    connection_id: str


@dataclass(frozen=True)
class MapBackgroundClicked:
    pass


@dataclass(frozen=True)
class SearchInput:
    text: str


@dataclass(frozen=True)
class SearchResultChosen:
    result: SearchResult


@dataclass(frozen=True)
class PickerLocationChosen:
    index: int


@dataclass(frozen=True)
class PickerDismissed:
    pass


class PanelAction(str, Enum):
    SHOW_CONNECTION = "show-connection"
    HIGHLIGHT_CONNECTION = "highlight-connection"
    CLEAR_CONNECTIONS = "clear-connections"
    SHOW_STATEMENT = "show-statement"
    TOGGLE_CONNECTIONS = "toggle-connections"


@dataclass(frozen=True)
class PanelActionClicked:
    """A clickable element inside the detail panel (carries data-action / data-target)."""
    action: PanelAction
    target: str = ""


Event = (
    MarkerClicked | ConnectionClicked | MapBackgroundClicked | SearchInput
    | SearchResultChosen | PickerLocationChosen | PickerDismissed | PanelActionClicked
)
