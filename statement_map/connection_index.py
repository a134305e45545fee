"""Connection index — one precomputed line+label layer per connection.

Every connection is expanded across all location pairs of its two
statements (a statement can have several locations). Layers are built
once, invisible, and never rebuilt; the visibility controller only
attaches them and changes their opacity.
"""

import logging
from dataclasses import dataclass, field

from statement_map.models import Connection, ConnectionType, Location, Strength

logger = logging.getLogger(__name__)

CONNECTION_COLORS: dict[str, str] = {
    ConnectionType.SAME_STATEMENT.value: "#FF6B6B",
    ConnectionType.ENTITY.value: "#8B0000",
    ConnectionType.ARTIFACT.value: "#8B4513",
    ConnectionType.CHARACTER.value: "#4682B4",
    ConnectionType.ORGANIZATION.value: "#32CD32",
    ConnectionType.LOCATION.value: "#9932CC",
    ConnectionType.TIMELINE.value: "#FFD700",
}
DEFAULT_CONNECTION_COLOR = "#666666"

STRENGTH_WEIGHTS: dict[str, int] = {
    Strength.HIGH.value: 4,
    Strength.MEDIUM.value: 3,
}
DEFAULT_WEIGHT = 2

DASH_PATTERN = "10, 10"


def connection_color(connection: Connection) -> str:
    """Type color, else the connection's own color, else the default."""
    return CONNECTION_COLORS.get(connection.type) or connection.color or DEFAULT_CONNECTION_COLOR


def connection_weight(connection: Connection) -> int:
    return STRENGTH_WEIGHTS.get(connection.strength, DEFAULT_WEIGHT)


def connection_dash(connection: Connection) -> str | None:
    if connection.type == ConnectionType.SAME_STATEMENT.value:
        return None
    return DASH_PATTERN


@dataclass(eq=False)
class LineElement:
    connection: Connection
    from_location: Location
    to_location: Location
    color: str
    weight: int
    dash_array: str | None
    opacity: float = 0.0

    @property
    def points(self) -> list[tuple[float, float]]:
        return [self.from_location.coordinate, self.to_location.coordinate]


@dataclass(eq=False)
class LabelElement:
    connection: Connection
    position: tuple[float, float]
    text: str
    color: str
    opacity: float = 0.0


@dataclass(eq=False)
class ConnectionLayer:
    """All visual elements of one connection. Implements Renderable."""
    connection: Connection
    lines: list[LineElement] = field(default_factory=list)
    labels: list[LabelElement] = field(default_factory=list)

    @property
    def connection_id(self) -> str:
        return self.connection.id

    def set_opacity(self, line_opacity: float, label_opacity: float) -> None:
        for line in self.lines:
            line.opacity = line_opacity
        for label in self.labels:
            label.opacity = label_opacity


@dataclass
class IndexBuildResult:
    layers: dict[str, ConnectionLayer] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.warnings)

    def __repr__(self) -> str:
        lines = sum(len(layer.lines) for layer in self.layers.values())
        return (
            f"IndexBuildResult({len(self.layers)} layers, {lines} lines, "
            f"{self.skipped} skipped)"
        )


def _midpoint(a: Location, b: Location) -> tuple[float, float]:
    return ((a.lat + b.lat) / 2, (a.lng + b.lng) / 2)


def build_layer(
    connection: Connection,
    from_locations: list[Location],
    to_locations: list[Location],
) -> ConnectionLayer:
    """Line (and label, if any) for every from×to pair, minus self-pairs."""
    layer = ConnectionLayer(connection=connection)
    color = connection_color(connection)
    weight = connection_weight(connection)
    dash = connection_dash(connection)

    for from_loc in from_locations:
        for to_loc in to_locations:
            if from_loc is to_loc:
                continue
            layer.lines.append(LineElement(
                connection=connection,
                from_location=from_loc,
                to_location=to_loc,
                color=color,
                weight=weight,
                dash_array=dash,
            ))
            if connection.label:
                layer.labels.append(LabelElement(
                    connection=connection,
                    position=_midpoint(from_loc, to_loc),
                    text=connection.label,
                    color=color,
                ))
    return layer


def build_connection_index(
    locations: list[Location],
    connections: list[Connection],
) -> IndexBuildResult:
    """Build every connection layer, skipping connections with an unresolved end."""
    by_statement: dict[str, list[Location]] = {}
    for loc in locations:
        by_statement.setdefault(loc.statement, []).append(loc)

    result = IndexBuildResult()
    for conn in connections:
        from_locations = by_statement.get(conn.from_statement, [])
        to_locations = by_statement.get(conn.to_statement, [])
        if not from_locations or not to_locations:
            msg = f"Could not find locations for connection {conn.id}"
            logger.warning(msg)
            result.warnings.append(msg)
            continue
        result.layers[conn.id] = build_layer(conn, from_locations, to_locations)

    logger.debug("Built connection index: %r", result)
    return result
