"""Tests for MapApplication event handling."""

import json
from unittest.mock import MagicMock, patch

from statement_map.app import AppStatus, MapApplication
from statement_map.events import (
    ConnectionClicked,
    MapBackgroundClicked,
    MarkerClicked,
    PanelAction,
    PanelActionClicked,
    PickerLocationChosen,
    SearchInput,
    SearchResultChosen,
)
from statement_map.loader import DatasetLoadError
from statement_map.panel import PanelState
from statement_map.search import SearchStatus


def _attached_ids(app):
    return {layer.connection_id for layer in app.canvas.layers}


class TestLoading:
    def test_ready_after_load(self, app):
        assert app.status == AppStatus.READY
        assert len(app.canvas.markers) == 5
        assert set(app.index.layers) == {"conn-1", "conn-2", "conn-4"}
        assert app.subtitle == "Statement Location Index • 5 locations • 4 connections"

    def test_failed_load_shows_error(self, data_config):
        data_config.data.resolved_locations_path.write_text("[oops")
        app = MapApplication(data_config)
        assert not app.load()
        assert app.status == AppStatus.FAILED
        assert app.panel.state == PanelState.ERROR
        assert "Unable to load statement data" in app.panel.to_html()
        assert app.visibility is None
        assert app.canvas.markers == []

    def test_custom_loader_error(self):
        app = MapApplication()
        loader = MagicMock(side_effect=DatasetLoadError("boom"))
        assert not app.load(loader)
        assert app.status == AppStatus.FAILED

    def test_zero_connections(self, data_config):
        data_config.data.resolved_connections_path.write_text(json.dumps({"connections": []}))
        app = MapApplication(data_config)
        assert app.load()
        assert len(app.canvas.markers) == 5
        assert app.index.layers == {}
        assert app.index.warnings == []

    def test_search_before_load_shows_loading(self):
        app = MapApplication()
        app.handle(SearchInput("7"))
        assert app.search.status == SearchStatus.LOADING

    def test_clicks_before_load_ignored(self, locations):
        app = MapApplication()
        app.handle(MarkerClicked(locations[0]))
        app.handle(MapBackgroundClicked())
        assert app.state.selected_statement is None
        assert app.panel.state == PanelState.DEFAULT


class TestMarkerClicks:
    def test_click_selects_and_shows(self, app):
        edinburgh = app.dataset.locations[2]
        app.handle(MarkerClicked(edinburgh))
        assert app.state.selected_statement == "MAG-002"
        assert set(app.state.highlighted) == {"conn-1", "conn-2"}
        assert app.panel.state == PanelState.LOCATION
        assert "Hide Connections" in app.panel.content.body

    def test_double_click_is_identity(self, app):
        edinburgh = app.dataset.locations[2]
        app.handle(MarkerClicked(edinburgh))
        app.handle(MarkerClicked(edinburgh))
        assert app.state.selected_statement is None
        assert app.state.highlighted == ()
        assert app.canvas.layers == []
        assert "Show Connections" in app.panel.content.body

    def test_other_location_of_same_statement_toggles(self, app):
        london, oxford = app.dataset.locations[0], app.dataset.locations[1]
        app.handle(MarkerClicked(london))
        app.handle(MarkerClicked(oxford))
        assert app.state.selected_statement is None
        assert app.panel.content.title == "Oxford"

    def test_background_click_resets(self, app):
        app.handle(MarkerClicked(app.dataset.locations[2]))
        app.handle(MapBackgroundClicked())
        assert app.state.selected_statement is None
        assert app.state.highlighted == ()
        assert app.canvas.layers == []
        assert app.panel.state == PanelState.DEFAULT

    def test_background_click_with_nothing_selected(self, app):
        app.handle(MapBackgroundClicked())
        assert app.panel.state == PanelState.DEFAULT


class TestConnectionClicks:
    def test_shows_only_that_connection(self, app):
        app.handle(MarkerClicked(app.dataset.locations[2]))
        app.handle(ConnectionClicked("conn-2"))
        assert app.state.highlighted == ("conn-2",)
        assert _attached_ids(app) == {"conn-2"}
        assert app.panel.state == PanelState.CONNECTION
        # statement selection is left alone
        assert app.state.selected_statement == "MAG-002"

    def test_unknown_connection(self, app):
        app.handle(ConnectionClicked("nope"))
        assert app.panel.state == PanelState.DEFAULT


class TestPanelActions:
    def test_statement_link(self, app):
        app.handle(ConnectionClicked("conn-1"))
        app.handle(PanelActionClicked(PanelAction.SHOW_STATEMENT, "MAG-002"))
        assert app.state.selected_statement == "MAG-002"
        assert set(app.state.highlighted) == {"conn-1", "conn-2"}

    def test_highlight_adds(self, app):
        app.handle(ConnectionClicked("conn-1"))
        app.handle(PanelActionClicked(PanelAction.HIGHLIGHT_CONNECTION, "conn-2"))
        assert app.state.highlighted == ("conn-1", "conn-2")

    def test_clear(self, app):
        app.handle(ConnectionClicked("conn-1"))
        app.handle(PanelActionClicked(PanelAction.CLEAR_CONNECTIONS))
        assert app.state.highlighted == ()
        assert app.canvas.layers == []

    def test_toggle_button_refreshes_panel(self, app):
        edinburgh = app.dataset.locations[2]
        app.handle(MarkerClicked(edinburgh))
        app.handle(PanelActionClicked(PanelAction.TOGGLE_CONNECTIONS, "MAG-002"))
        assert app.state.highlighted == ()
        assert "Show Connections" in app.panel.content.body
        app.handle(PanelActionClicked(PanelAction.TOGGLE_CONNECTIONS, "MAG-002"))
        assert set(app.state.highlighted) == {"conn-1", "conn-2"}
        assert "Hide Connections" in app.panel.content.body

    def test_list_item_shows_connection(self, app):
        app.handle(MarkerClicked(app.dataset.locations[2]))
        app.handle(PanelActionClicked(PanelAction.SHOW_CONNECTION, "conn-1"))
        assert app.panel.state == PanelState.CONNECTION
        assert app.state.highlighted == ("conn-1",)


class TestSearchJump:
    def test_single_result_sequence(self, app):
        app.handle(SearchInput("lighthouse"))
        [result] = app.search.results

        calls = MagicMock()
        with patch.object(app.canvas, "fly_to", wraps=app.canvas.fly_to) as fly, \
             patch.object(app.canvas, "emphasize_marker", wraps=app.canvas.emphasize_marker) as emph, \
             patch.object(app.visibility, "highlight_all_for_statement",
                          wraps=app.visibility.highlight_all_for_statement) as hl:
            calls.attach_mock(fly, "fly_to")
            calls.attach_mock(emph, "emphasize_marker")
            calls.attach_mock(hl, "highlight_all_for_statement")

            app.handle(SearchResultChosen(result))
            # nothing but the flight until the view transition completes
            assert [c[0] for c in calls.mock_calls] == ["fly_to"]
            assert app.panel.state == PanelState.DEFAULT

            app.clock.advance(app.config.search.fly_duration)

        assert [c[0] for c in calls.mock_calls] == [
            "fly_to", "emphasize_marker", "highlight_all_for_statement",
        ]
        assert app.canvas.center == result.locations[0].coordinate
        assert app.canvas.zoom == 12
        assert app.state.selected_statement == "MAG-010"
        assert app.state.highlighted == ("conn-2",)
        assert app.panel.content.title == "Lighthouse Point"

    def test_pulse_wears_off(self, app):
        app.handle(SearchInput("lighthouse"))
        app.handle(SearchResultChosen(app.search.results[0]))
        app.clock.advance(1.5)
        assert [m.place for m in app.canvas.emphasized] == ["Lighthouse Point"]
        app.clock.advance(2.0)
        assert app.canvas.emphasized == []

    def test_multi_location_needs_choice(self, app):
        app.handle(SearchInput("mag 1"))
        [result] = app.search.results
        app.handle(SearchResultChosen(result))
        app.clock.run_all()
        assert app.state.selected_statement is None
        assert not any(op == "fly_to" for op, _ in app.canvas.history)

        app.handle(PickerLocationChosen(1))
        app.clock.run_all()
        assert app.canvas.center == (51.752, -1.2577)
        assert app.state.selected_statement == "MAG-001"
        assert app.panel.content.title == "Oxford"
