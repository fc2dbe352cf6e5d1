"""Tests for the Event Ledger."""

from cityworld_kernel.ledger.store import EventLedger


class TestEventLedger:
    def setup_method(self):
        self.ledger = EventLedger()
        for cycle in range(1, 9):
            self.ledger.record(cycle, [f"event {cycle}"])

    def test_lookback_window_excludes_current_cycle(self):
        recent = self.ledger.recent_descriptions(8, lookback=5)
        assert recent == {"event 3", "event 4", "event 5", "event 6", "event 7"}

    def test_record_appends_to_existing_cycle(self):
        self.ledger.record(8, ["another"])
        assert "another" in self.ledger.recent_descriptions(9, lookback=1)
        assert "event 8" in self.ledger.recent_descriptions(9, lookback=1)

    def test_prune(self):
        removed = self.ledger.prune(4)
        assert removed == 3
        assert self.ledger.cycles() == [4, 5, 6, 7, 8]

    def test_snapshot_round_trip(self):
        restored = EventLedger.from_snapshot(self.ledger.get_snapshot())
        assert restored.cycles() == self.ledger.cycles()
        assert restored.recent_descriptions(8) == self.ledger.recent_descriptions(8)
