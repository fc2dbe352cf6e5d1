"""Tests for the Cooldown Store."""

from cityworld_kernel.cooldown.store import CooldownStore


class TestCooldownStore:
    def setup_method(self):
        self.store = CooldownStore()

    def test_empty_store_blocks_nothing(self):
        assert not self.store.is_location_cooling("HEALTH", "Downtown", 10)
        assert not self.store.was_subtype_seen_recently("HEALTH", "Flu Season Strain", 10)

    def test_location_cooldown_expires_at_until_cycle(self):
        self.store.set_cooldown("HEALTH", "Downtown", "Flu Season Strain", cycle=10, length=3)
        assert self.store.location_until("HEALTH", "Downtown") == 13
        assert self.store.is_location_cooling("HEALTH", "Downtown", 12)
        assert not self.store.is_location_cooling("HEALTH", "Downtown", 13)

    def test_location_cooldown_is_per_category(self):
        self.store.set_cooldown("HEALTH", "Downtown", "Flu Season Strain", cycle=10, length=3)
        assert not self.store.is_location_cooling("SAFETY", "Downtown", 11)
        assert not self.store.is_location_cooling("HEALTH", "Uptown", 11)

    def test_subtype_window(self):
        self.store.set_cooldown("ENVIRONMENT", "Laurel", "Air Quality Alert", cycle=5, length=3)
        assert self.store.was_subtype_seen_recently("ENVIRONMENT", "Air Quality Alert", 6)
        assert not self.store.was_subtype_seen_recently("ENVIRONMENT", "Air Quality Alert", 7)

    def test_in_cooldown_combines_both_maps(self):
        self.store.set_cooldown("CIVIC", "Fruitvale", "Inflow Strain", cycle=20, length=4)
        assert self.store.in_cooldown("CIVIC", "Fruitvale", "Other", 21)
        assert self.store.in_cooldown("CIVIC", "Uptown", "Inflow Strain", 21)
        assert not self.store.in_cooldown("CIVIC", "Uptown", "Other", 21)

    def test_snapshot_round_trip(self):
        self.store.set_cooldown("SAFETY", "Uptown", "Property Incident", cycle=8, length=3)
        restored = CooldownStore.from_snapshot(self.store.get_snapshot())
        assert restored.location_until("SAFETY", "Uptown") == 11
        assert restored.subtype_last_seen("SAFETY", "Property Incident") == 8

    def test_prune_removes_only_inert_entries(self):
        self.store.set_cooldown("HEALTH", "Downtown", "A", cycle=1, length=3)
        self.store.set_cooldown("SAFETY", "Uptown", "B", cycle=9, length=3)
        assert len(self.store) == 4

        removed = self.store.prune(10)

        assert removed == 2
        assert self.store.location_until("HEALTH", "Downtown") is None
        assert self.store.location_until("SAFETY", "Uptown") == 12
        assert self.store.subtype_last_seen("SAFETY", "B") == 9
