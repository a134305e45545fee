"""Detail panel — default placeholder, location detail, connection detail.

The panel has three insertion points (title, meta, body). Each render
replaces all three. Clickable elements carry `data-action` and
`data-target` attributes that map onto `PanelActionClicked` events.
"""

import logging
from dataclasses import dataclass

from statement_map.config import PanelConfig
from statement_map.connection_index import connection_color
from statement_map.events import PanelAction
from statement_map.models import Connection, Location

logger = logging.getLogger(__name__)

ENTITY_COLORS: dict[str, str] = {
    "The Spiral": "#9932CC",
    "The Stranger": "#8B0000",
    "The Eye": "#FFD700",
    "The Lonely": "#4682B4",
    "The Buried": "#8B4513",
    "The Corruption": "#32CD32",
    "The Desolation": "#FF4500",
    "The Hunt": "#A0522D",
    "The Slaughter": "#DC143C",
    "The Vast": "#1E90FF",
    "The Web": "#4B0082",
    "The End": "#000000",
    "The Flesh": "#FF69B4",
    "The Dark": "#2F4F4F",
}
DEFAULT_ENTITY_COLOR = "#8b0000"


def _esc(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&#39;")


def _action(action: PanelAction, target: str) -> str:
    return f'data-action="{action.value}" data-target="{_esc(target)}"'


def entity_color(entity: str | None) -> str:
    return ENTITY_COLORS.get(entity or "", DEFAULT_ENTITY_COLOR)


class PanelState:
    DEFAULT = "default"
    LOCATION = "location"
    CONNECTION = "connection"
    ERROR = "error"


@dataclass
class PanelContent:
    state: str
    title: str
    meta: str
    body: str


def render_default() -> PanelContent:
    return PanelContent(
        state=PanelState.DEFAULT,
        title="Statement Archive",
        meta='<span class="statement-number">Select a location to view details</span>',
        body="<p>Click on any marker to view statement details and connections.</p>",
    )


def render_error() -> PanelContent:
    return PanelContent(
        state=PanelState.ERROR,
        title="Statement Archive",
        meta="",
        body=(
            "<p>Unable to load statement data.</p>"
            '<div class="archivist-note"><strong>Archivist\'s Note:</strong> '
            "Check that data files exist and contain valid JSON.</div>"
        ),
    )


def render_location(
    location: Location,
    connections: list[Connection],
    connections_visible: bool = False,
    config: PanelConfig | None = None,
) -> PanelContent:
    """Location detail. `connections` are those touching the location's statement."""
    config = config or PanelConfig()
    statement = location.statement
    entity = location.entity or "Unclassified"
    summary = location.summary or "No statement summary available."

    meta = (
        f'<span class="statement-number">{_esc(statement)}</span>'
        f'<span class="entity-tag" style="background: {entity_color(location.entity)}">'
        f"{_esc(entity)}</span>"
    )

    paragraphs = "".join(f"<p>{_esc(p)}</p>" for p in summary.split("\n"))
    body = [paragraphs]
    if location.date:
        body.append(f'<div class="statement-date">Statement given: {_esc(location.date)}</div>')
    if location.statement_giver:
        body.append(f'<div class="statement-giver">Statement giver: {_esc(location.statement_giver)}</div>')
    if location.supplemental:
        body.append(f'<div class="supplemental-info"><strong>Supplemental:</strong> {_esc(location.supplemental)}</div>')
    if location.archivist_note and location.archivist_note != config.default_archivist_note:
        body.append(
            '<div class="archivist-note"><strong>Archivist\'s Note:</strong> '
            f"{_esc(location.archivist_note)}</div>"
        )

    if connections:
        button = "Hide Connections" if connections_visible else "Show Connections"
        items = []
        for conn in connections:
            items.append(
                f'<div class="connection-item" {_action(PanelAction.SHOW_CONNECTION, conn.id)}>'
                f'<span class="connection-dot" style="background: {connection_color(conn)}"></span>'
                '<div class="connection-info"><div class="connection-header">'
                f'<span class="connection-type">{_esc(conn.type)}</span>'
                f'<span class="connection-strength strength-{_esc(conn.strength)}">{_esc(conn.strength)}</span>'
                "</div>"
                f'<div class="connection-label">{_esc(conn.label or "")}</div>'
                f'<div class="connection-target">→ {_esc(conn.other_end(statement))}</div>'
                "</div></div>"
            )
        body.append(
            '<div class="connections-section">'
            f"<h4>Connections ({len(connections)})</h4>"
            f'<button class="connection-toggle-btn" {_action(PanelAction.TOGGLE_CONNECTIONS, statement)}>'
            f"{button}</button>"
            f'<div class="connections-list">{"".join(items)}</div></div>'
        )

    return PanelContent(
        state=PanelState.LOCATION,
        title=_esc(location.place or "Unknown Location"),
        meta=meta,
        body="".join(body),
    )


def render_connection(connection: Connection) -> PanelContent:
    c = connection
    sections = [
        f"<h3>{_esc(c.label or c.id)}</h3>",
        '<div class="connection-info-grid">',
        f'<div class="connection-info-item"><span class="connection-info-label">Type:</span>'
        f'<span class="connection-info-value">{_esc(c.type)}</span></div>',
        f'<div class="connection-info-item"><span class="connection-info-label">Strength:</span>'
        f'<span class="connection-info-value strength-{_esc(c.strength)}">{_esc(c.strength)}</span></div>',
        f'<div class="connection-info-item"><span class="connection-info-label">From:</span>'
        f'<span class="connection-info-value statement-link" {_action(PanelAction.SHOW_STATEMENT, c.from_statement)}>'
        f"{_esc(c.from_statement)}</span></div>",
        f'<div class="connection-info-item"><span class="connection-info-label">To:</span>'
        f'<span class="connection-info-value statement-link" {_action(PanelAction.SHOW_STATEMENT, c.to_statement)}>'
        f"{_esc(c.to_statement)}</span></div>",
        "</div>",
        f'<div class="connection-description"><h4>Description</h4><p>{_esc(c.description)}</p></div>',
    ]
    if c.evidence:
        sections.append(f'<div class="connection-evidence"><h4>Evidence</h4><p>{_esc(c.evidence)}</p></div>')
    if c.characters:
        tags = "".join(f'<span class="character-tag">{_esc(ch)}</span>' for ch in c.characters)
        sections.append(
            '<div class="connection-characters"><h4>Involved Characters/Entities</h4>'
            f'<div class="character-tags">{tags}</div></div>'
        )
    episodes = "".join(
        f'<span class="episode-tag" {_action(PanelAction.SHOW_STATEMENT, ep)}>{_esc(ep)}</span>'
        for ep in c.episodes
    )
    sections.append(
        '<div class="connection-episodes"><h4>Related Episodes</h4>'
        f'<div class="episode-tags">{episodes}</div></div>'
    )
    sections.append(
        '<div class="connection-actions">'
        f'<button class="connection-action-btn" {_action(PanelAction.HIGHLIGHT_CONNECTION, c.id)}>'
        "Highlight This Connection</button>"
        f'<button class="connection-action-btn" {_action(PanelAction.CLEAR_CONNECTIONS, "")}>'
        "Clear All Connections</button></div>"
    )

    return PanelContent(
        state=PanelState.CONNECTION,
        title="Connection Details",
        meta=f'<span class="statement-number">{_esc(c.id)}</span>',
        body=f'<div class="connection-details">{"".join(sections)}</div>',
    )


class DetailPanel:
    """The side panel's current content."""

    def __init__(self) -> None:
        self.content = render_default()

    @property
    def state(self) -> str:
        return self.content.state

    def show(self, content: PanelContent) -> None:
        logger.debug("Panel -> %s", content.state)
        self.content = content

    def to_html(self) -> str:
        c = self.content
        return (
            '<div id="panel">'
            f'<h2 id="panel-title">{c.title}</h2>'
            f'<div id="panel-meta">{c.meta}</div>'
            f'<div id="panel-text">{c.body}</div>'
            "</div>"
        )
