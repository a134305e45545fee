"""Tests for the in-memory map and its simulated clock."""

from statement_map.canvas import DeferredCalls, MapCanvas


class TestDeferredCalls:
    def test_nothing_runs_until_advanced(self):
        clock = DeferredCalls()
        calls = []
        clock.call_later(1.0, lambda: calls.append("a"))
        assert calls == []
        assert clock.advance(1.0) == 1
        assert calls == ["a"]

    def test_cancelled_call_skipped(self):
        clock = DeferredCalls()
        calls = []
        pending = clock.call_later(1.0, lambda: calls.append("a"))
        clock.cancel(pending)
        assert clock.pending == 0
        clock.advance(5.0)
        assert calls == []


class TestEmphasizeMarker:
    def test_overlapping_pulses_end_separately(self, locations):
        canvas = MapCanvas()
        canvas.add_markers(locations)
        edinburgh = locations[2]

        assert canvas.emphasize_marker(edinburgh, 2.0) == 1
        canvas.clock.advance(1.0)
        canvas.emphasize_marker(edinburgh, 2.0)
        assert canvas.emphasized == [edinburgh, edinburgh]

        canvas.clock.advance(1.0)
        assert canvas.emphasized == [edinburgh]
        canvas.clock.advance(1.0)
        assert canvas.emphasized == []

    def test_unknown_location_matches_nothing(self, locations):
        canvas = MapCanvas()
        canvas.add_markers(locations[:1])
        assert canvas.emphasize_marker(locations[2], 2.0) == 0
        assert canvas.emphasized == []
