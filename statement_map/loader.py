"""Dataset loading: locations GeoJSON + connections JSON, loaded together."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from statement_map.config import Config
from statement_map.models import Connection, Location

logger = logging.getLogger(__name__)


class DatasetLoadError(Exception):
    """Either dataset could not be read or parsed."""


@dataclass
class Dataset:
    locations: list[Location] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)

    def locations_for(self, statement: str) -> list[Location]:
        return [loc for loc in self.locations if loc.statement == statement]

    def connections_for(self, statement: str) -> list[Connection]:
        return [c for c in self.connections if c.involves(statement)]

    @property
    def statements(self) -> list[str]:
        seen: dict[str, None] = {}
        for loc in self.locations:
            seen.setdefault(loc.statement, None)
        return list(seen)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except FileNotFoundError as e:
        raise DatasetLoadError(f"Data file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DatasetLoadError(f"Invalid JSON in {path}: {e}") from e


def parse_locations(raw: Any) -> list[Location]:
    """Parse a GeoJSON FeatureCollection into Location records."""
    if not isinstance(raw, dict) or not isinstance(raw.get("features"), list):
        raise DatasetLoadError("Locations data is not a GeoJSON FeatureCollection")

    locations: list[Location] = []
    for i, feature in enumerate(raw["features"]):
        try:
            coords = feature["geometry"]["coordinates"]
            props = feature.get("properties") or {}
            # GeoJSON order is [lng, lat]; geometry wins over any lat/lng property
            locations.append(Location.model_validate({**props, "lat": coords[1], "lng": coords[0]}))
        except (KeyError, IndexError, TypeError, ValidationError) as e:
            raise DatasetLoadError(f"Invalid location feature #{i}: {e}") from e
    return locations


def parse_connections(raw: Any) -> list[Connection]:
    """Parse the connections document. A missing list means no connections."""
    if not isinstance(raw, dict):
        raise DatasetLoadError("Connections data is not a JSON object")

    connections: list[Connection] = []
    for i, item in enumerate(raw.get("connections") or []):
        try:
            connections.append(Connection.model_validate(item))
        except ValidationError as e:
            raise DatasetLoadError(f"Invalid connection #{i}: {e}") from e
    return connections


def load_dataset(config: Config) -> Dataset:
    """Load both datasets. Raises DatasetLoadError if either fails."""
    locations_path = config.data.resolved_locations_path
    connections_path = config.data.resolved_connections_path

    locations = parse_locations(_read_json(locations_path))
    connections = parse_connections(_read_json(connections_path))

    logger.info("Loaded %d locations and %d connections", len(locations), len(connections))
    return Dataset(locations=locations, connections=connections)
