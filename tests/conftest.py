"""Shared test fixtures for statement map tests."""

import json

import pytest

from statement_map.app import MapApplication
from statement_map.config import Config, DataConfig
from statement_map.loader import parse_connections, parse_locations


def _feature(statement, lng, lat, **props):
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lng, lat]},
        "properties": {"statement": statement, **props},
    }


LOCATIONS_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        _feature(
            "MAG-001", -0.1276, 51.5072, place="London", entity="The Eye",
            summary="A man who would not stop watching.\nHe is still watching.",
            date="2016-03-22", statement_giver="Nathan Watts",
            archivist_note="Statement recorded for posterity.",
            location_type="Primary",
        ),
        _feature(
            "MAG-001", -1.2577, 51.752, place="Oxford", entity="The Eye",
            summary="The library basement.", location_type="Secondary",
        ),
        _feature(
            "MAG-002", -3.1883, 55.9533, place="Edinburgh", entity="The Buried",
            summary="Caves under the old town.",
            archivist_note="Follow-up could not verify the tunnels.",
        ),
        _feature(
            "MAG-010", -5.05, 50.15, place="Lighthouse Point", entity="The Lonely",
            summary="The keeper never came down.",
        ),
        _feature(
            "MAG-003", -3.1791, 51.4816, place="Cardiff", entity="Mystery Entity",
            summary="Unclassified.",
        ),
    ],
}

CONNECTIONS_JSON = {
    "connections": [
        {
            "id": "conn-1", "from": "MAG-001", "to": "MAG-002", "type": "entity",
            "strength": "high", "label": "Shared watcher",
            "description": "Both statements mention the same figure.",
            "evidence": "Identical description of eyes.",
            "characters": ["The Watcher"], "episodes": ["MAG-001", "MAG-002"],
        },
        {
            "id": "conn-2", "from": "MAG-002", "to": "MAG-010", "type": "same_statement",
            "strength": "medium", "label": "Tunnels to the coast",
            "description": "Continuation.", "episodes": ["MAG-002"],
        },
        {
            "id": "conn-3", "from": "MAG-001", "to": "MAG-999", "type": "timeline",
            "strength": "low", "label": "Dangling", "description": "Points nowhere.",
            "episodes": [],
        },
        {
            "id": "conn-4", "from": "MAG-001", "to": "MAG-001", "type": "mystery",
            "strength": "unknown", "description": "Two places, one statement.",
            "episodes": ["MAG-001"],
        },
    ]
}


@pytest.fixture()
def locations():
    return parse_locations(LOCATIONS_GEOJSON)


@pytest.fixture()
def connections():
    return parse_connections(CONNECTIONS_JSON)


@pytest.fixture()
def data_config(tmp_path):
    """Config pointing at dataset files written to a temp dir."""
    loc_path = tmp_path / "locations.geojson"
    conn_path = tmp_path / "connections.json"
    loc_path.write_text(json.dumps(LOCATIONS_GEOJSON))
    conn_path.write_text(json.dumps(CONNECTIONS_JSON))
    return Config(
        output_path=str(tmp_path / "map.html"),
        data=DataConfig(locations_path=str(loc_path), connections_path=str(conn_path)),
    )


@pytest.fixture()
def app(data_config):
    """A MapApplication with both datasets loaded."""
    application = MapApplication(data_config)
    assert application.load()
    return application
