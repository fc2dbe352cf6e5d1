"""Tests for the Cycle Engine."""

from datetime import datetime

from cityworld_kernel.cooldown.store import CooldownStore
from cityworld_kernel.engine.cycle import CycleEngine, run_cycle
from cityworld_kernel.ledger.store import EventLedger
from cityworld_kernel.models.arc import ArcPhase
from cityworld_kernel.models.domain import Domain
from cityworld_kernel.models.world import WorldState
from cityworld_kernel.texture.policy import SuppressedDomainsPolicy

from rng_helpers import SequenceRng

NOW = datetime(2026, 3, 1, 12, 0)


def _make_state(**overrides):
    data = {
        "cycle": 10,
        "rng_seed": 12345,
        "population": {"illness_rate": 0.09},
        "calendar": {"season": "Winter", "month": 1},
    }
    data.update(overrides)
    return WorldState.model_validate(data)


class TestCycleEngine:
    def setup_method(self):
        self.engine = CycleEngine()
        self.cooldowns = CooldownStore()
        self.arcs = []

    def test_crisis_events_come_first(self):
        # Health hit (chance, subtype, neighborhood), six misses, then the ambient phase.
        rng = SequenceRng([0.0, 0.0, 0.1] + [0.99] * 6)
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, rng=rng, now=NOW
        )

        assert result.events[0].source == "BUCKET"
        assert result.events[0].domain == Domain.HEALTH
        assert all(e.source == "AMBIENT" for e in result.events[1:])
        assert len(result.ambient_events) == len(result.events) - 1
        assert result.audit_issues == ["HEALTH - Respiratory Advisory - Downtown - high"]

    def test_crisis_impact_totals_accepted_crises(self):
        rng = SequenceRng([0.0, 0.0, 0.1] + [0.99] * 6)
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, rng=rng, now=NOW
        )
        assert result.crisis_impact == 50
        assert result.crisis_impact == sum(
            e.impact_score for e in result.events if e.source == "BUCKET"
        )

    def test_quiet_cycle_has_no_crisis_impact(self):
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, rng=SequenceRng([]), now=NOW
        )
        assert result.crises == []
        assert result.crisis_impact == 0

    def test_spawned_arc_visible_in_caller_list_and_hooks(self):
        rng = SequenceRng([0.0, 0.0, 0.1] + [0.99] * 6)
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, rng=rng, now=NOW
        )

        assert len(self.arcs) == 1
        assert result.spawned_arcs == self.arcs
        assert self.arcs[0].phase == ArcPhase.EARLY
        linked = [h.linked_arc_id for h in result.hooks if h.linked_arc_id]
        assert linked == [self.arcs[0].arc_id]
        # Arc domain and arc type both count toward HEALTH, plus the crisis event.
        assert result.domain_presence.get(Domain.HEALTH) >= 3

    def test_cooldowns_written_in_place(self):
        rng = SequenceRng([0.0, 0.0, 0.1] + [0.99] * 6)
        self.engine.run_cycle(_make_state(), self.cooldowns, self.arcs, rng=rng, now=NOW)
        assert self.cooldowns.location_until("HEALTH", "Downtown") == 13

    def test_seeded_cycles_reproduce(self):
        state = _make_state(dynamics={"sentiment": -0.5})
        first = self.engine.run_cycle(state, CooldownStore(), [], now=NOW)
        second = self.engine.run_cycle(state, CooldownStore(), [], now=NOW)

        assert [e.description for e in first.events] == [e.description for e in second.events]
        assert first.audit_issues == second.audit_issues
        assert first.domain_presence.counts == second.domain_presence.counts
        assert [h.text for h in first.hooks] == [h.text for h in second.hooks]

    def test_ledger_recorded_after_cycle(self):
        ledger = EventLedger()
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, ledger=ledger, now=NOW
        )
        ambient = {e.description for e in result.ambient_events}
        assert ledger.cycles() == [10]
        assert ledger.recent_descriptions(11, lookback=1) == ambient

    def test_domain_policy_applied(self):
        policy = SuppressedDomainsPolicy(["NIGHTLIFE", "CRIME"])
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, domain_policy=policy, now=NOW
        )
        for event in result.ambient_events:
            assert event.domain not in (Domain.NIGHTLIFE, Domain.CRIME)
        assert not result.texture_fallback

    def test_total_suppression_reported(self):
        policy = SuppressedDomainsPolicy(list(Domain))
        result = self.engine.run_cycle(
            _make_state(), self.cooldowns, self.arcs, domain_policy=policy, now=NOW
        )
        assert result.texture_fallback
        assert {e.domain for e in result.ambient_events} == {Domain.GENERAL}

    def test_hooks_unique_and_sorted(self):
        state = _make_state(
            shock_flag="shock-flag",
            weather={"type": "rain", "impact": 1.6},
            dynamics={"sentiment": -0.6},
        )
        result = self.engine.run_cycle(state, self.cooldowns, self.arcs, now=NOW)
        keys = [h.dedup_key for h in result.hooks]
        assert len(keys) == len(set(keys))
        priorities = [h.priority for h in result.hooks]
        assert priorities == sorted(priorities, reverse=True)

    def test_presence_total_matches_counts(self):
        result = self.engine.run_cycle(_make_state(), self.cooldowns, self.arcs, now=NOW)
        presence = result.domain_presence
        assert presence.total == sum(presence.counts.values())
        assert presence.cycle == 10


class TestRunCycleFunction:
    def test_accepts_plain_dict(self):
        arcs = []
        result = run_cycle(
            {"cycle": 3, "rng_seed": 7, "calendar": {"holiday": "OaklandPride",
                                                    "holiday_priority": "oakland",
                                                    "month": 6}},
            CooldownStore(),
            arcs,
            now=NOW,
        )
        assert result.cycle == 3
        assert result.texture_context.holiday == "OaklandPride"
        assert result.domain_presence.get(Domain.HOLIDAY) >= 1

    def test_missing_fields_use_neutral_defaults(self):
        result = run_cycle({}, CooldownStore(), [], now=NOW)
        assert result.cycle == 0
        assert len(result.crises) <= 3
        assert 1 <= len(result.ambient_events) <= 6

    def test_snapshot_round_trip_between_cycles(self):
        cooldowns = CooldownStore()
        arcs = []
        run_cycle(_make_state(), cooldowns, arcs, now=NOW)
        restored = CooldownStore.from_snapshot(cooldowns.get_snapshot())
        result = run_cycle(_make_state(cycle=11), restored, arcs, now=NOW)
        assert result.cycle == 11
