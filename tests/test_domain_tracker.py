"""Tests for the Domain Presence Tracker."""

from datetime import datetime

import pytest

from cityworld_kernel.domains.tracker import (
    DomainPresenceTracker,
    calendar_contribution,
    dominant_domain,
)
from cityworld_kernel.models.arc import Arc, ArcPhase, ArcType
from cityworld_kernel.models.domain import Domain
from cityworld_kernel.models.event import StorySeed, WorldEvent
from cityworld_kernel.models.world import WorldState


def _make_event(description, domain=None):
    return WorldEvent(
        cycle=1,
        domain=domain,
        description=description,
        source="AMBIENT",
        timestamp=datetime(2026, 1, 1),
    )


def _make_arc(arc_type=ArcType.HEALTH_CRISIS, domain=Domain.HEALTH, phase=ArcPhase.RISING):
    return Arc(arc_id="A", type=arc_type, domain=domain, phase=phase, neighborhood="Downtown")


class TestCalendarContribution:
    def test_quiet_day_contributes_nothing(self):
        assert calendar_contribution(WorldState()) == {}

    def test_oakland_holiday(self):
        state = WorldState.model_validate({
            "calendar": {"holiday": "OaklandPride", "holiday_priority": "oakland"},
        })
        assert calendar_contribution(state) == {Domain.HOLIDAY: 1, Domain.FESTIVAL: 1}

    def test_minor_holiday_has_no_festival(self):
        state = WorldState.model_validate({
            "calendar": {"holiday": "EarthDay", "holiday_priority": "minor"},
        })
        assert calendar_contribution(state) == {Domain.HOLIDAY: 1}

    def test_first_friday_and_creation_day(self):
        state = WorldState.model_validate({
            "calendar": {"is_first_friday": True, "is_creation_day": True},
        })
        assert calendar_contribution(state) == {
            Domain.ARTS: 2,
            Domain.CULTURE: 1,
            Domain.CIVIC: 1,
            Domain.COMMUNITY: 1,
        }

    def test_sports_phases(self):
        championship = WorldState.model_validate({
            "sports": {"season": "championship", "source": "config-override"},
        })
        playoffs = WorldState.model_validate({
            "sports": {"season": "playoffs", "source": "config-override"},
        })
        month_schedule = WorldState.model_validate({
            "calendar": {"month": 11},
            "sports": {"season": "post-season", "source": "simmonth-calculated"},
        })
        assert calendar_contribution(championship) == {Domain.SPORTS: 3}
        assert calendar_contribution(playoffs) == {Domain.SPORTS: 2}
        assert calendar_contribution(month_schedule) == {Domain.SPORTS: 1}

    def test_month_alone_adds_no_sports(self):
        assert calendar_contribution(WorldState.model_validate({"calendar": {"month": 7}})) == {}

    def test_regular_season_phase_without_override(self):
        state = WorldState.model_validate({
            "calendar": {"month": 6},
            "sports": {"season": "mid-season", "source": "simmonth-calculated"},
        })
        assert calendar_contribution(state) == {Domain.SPORTS: 1}


class TestDominantDomain:
    def test_ties_go_to_earlier_domain(self):
        counts = {Domain.HOLIDAY: 1, Domain.FESTIVAL: 1}
        assert dominant_domain(counts) == Domain.FESTIVAL

    def test_empty_is_none(self):
        assert dominant_domain({}) is None
        assert dominant_domain({Domain.CIVIC: 0}) is None


class TestDomainPresenceTracker:
    def setup_method(self):
        self.tracker = DomainPresenceTracker()

    def test_oakland_pride_scenario(self):
        state = WorldState.model_validate({
            "cycle": 30,
            "calendar": {"holiday": "OaklandPride", "holiday_priority": "oakland"},
        })
        presence = self.tracker.track(state, [], [])
        assert presence.get(Domain.HOLIDAY) == 1
        assert presence.get(Domain.FESTIVAL) == 1
        assert presence.dominant == Domain.FESTIVAL
        assert presence.total == 2
        assert presence.cycle == 30

    def test_events_counted_by_domain_or_inference(self):
        events = [
            _make_event("graffiti tagging", Domain.CRIME),
            _make_event("clinic line out the door"),
            _make_event("something odd"),
        ]
        presence = self.tracker.track(WorldState(), events, [])
        assert presence.get(Domain.CRIME) == 1
        assert presence.get(Domain.HEALTH) == 1
        assert presence.get(Domain.GENERAL) == 1

    def test_active_arc_counts_domain_and_type(self):
        arcs = [_make_arc(ArcType.CRISIS, Domain.ENVIRONMENT)]
        presence = self.tracker.track(WorldState(), [], arcs)
        assert presence.get(Domain.ENVIRONMENT) == 1
        assert presence.get(Domain.CIVIC) == 1

    def test_health_arc_counts_twice(self):
        presence = self.tracker.track(WorldState(), [], [_make_arc()])
        assert presence.get(Domain.HEALTH) == 2

    @pytest.mark.parametrize("arc_type", [ArcType.RIVALRY, ArcType.INSTABILITY, ArcType.OTHER])
    def test_arc_types_without_domain_entry_count_tag_only(self, arc_type):
        presence = self.tracker.track(WorldState(), [], [_make_arc(arc_type, Domain.SPORTS)])
        assert presence.get(Domain.SPORTS) == 1
        assert presence.total == 1

    def test_resolved_arcs_ignored(self):
        presence = self.tracker.track(WorldState(), [], [_make_arc(phase=ArcPhase.RESOLVED)])
        assert presence.total == 0
        assert presence.dominant is None

    def test_story_seeds_with_synonyms(self):
        seeds = [
            StorySeed(domain="medical"),
            StorySeed(domain="GOVERNMENT"),
            StorySeed(text="new gallery opening"),
            StorySeed(domain="nonsense"),
        ]
        presence = self.tracker.track(WorldState(), [], [], story_seeds=seeds)
        assert presence.get(Domain.HEALTH) == 1
        assert presence.get(Domain.CIVIC) == 1
        assert presence.get(Domain.ARTS) == 1
        assert presence.total == 3

    def test_total_is_sum_of_counts(self):
        state = WorldState.model_validate({
            "calendar": {"is_first_friday": True, "month": 5},
        })
        events = [_make_event("bus delay"), _make_event("night market", Domain.NIGHTLIFE)]
        presence = self.tracker.track(state, events, [_make_arc()])
        assert presence.total == sum(presence.counts.values())
        assert all(v >= 0 for v in presence.counts.values())
        assert len(presence.counts) == len(Domain)

    def test_recomputed_from_scratch(self):
        state = WorldState(cycle=2)
        first = self.tracker.track(state, [_make_event("x", Domain.SPORTS)], [])
        second = self.tracker.track(state, [], [])
        assert first.get(Domain.SPORTS) == 1
        assert second.get(Domain.SPORTS) == 0
