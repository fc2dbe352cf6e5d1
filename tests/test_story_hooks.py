"""Tests for the Story Hook Synthesizer."""

from datetime import datetime

from cityworld_kernel.hooks.synthesizer import (
    StoryHookSynthesizer,
    dedupe_hooks,
    desk_for,
)
from cityworld_kernel.models.arc import Arc, ArcPhase, ArcType
from cityworld_kernel.models.crisis import Severity
from cityworld_kernel.models.domain import Domain, DomainPresence
from cityworld_kernel.models.event import WorldEvent
from cityworld_kernel.models.hook import HookType, StoryHook
from cityworld_kernel.models.world import WorldState


def _make_arc(arc_id="A", phase=ArcPhase.EARLY, domain=Domain.HEALTH, neighborhood="Downtown"):
    return Arc(
        arc_id=arc_id,
        type=ArcType.HEALTH_CRISIS,
        phase=phase,
        domain=domain,
        neighborhood=neighborhood,
        summary="HEALTH crisis: Flu Season Strain in Downtown",
    )


def _make_event(description, severity=Severity.LOW, domain=Domain.GENERAL, neighborhood=None):
    return WorldEvent(
        cycle=1,
        domain=domain,
        description=description,
        neighborhood=neighborhood,
        severity=severity,
        source="AMBIENT",
        timestamp=datetime(2026, 1, 1),
    )


def _make_hook(domain, hook_type, priority, text="t"):
    return StoryHook(
        hook_id=text, domain=domain, priority=priority, text=text, hook_type=hook_type,
    )


class TestHelpers:
    def test_desk_routing(self):
        assert desk_for(Domain.HEALTH) == "Health Desk"
        assert desk_for(Domain.ARTS) == "Culture Desk"
        assert desk_for(Domain.FESTIVAL) == "Features Desk"
        assert desk_for(Domain.TECHNOLOGY) == "City Desk"
        assert desk_for(Domain.HOUSING) == "City Desk"

    def test_dedupe_keeps_highest_priority(self):
        hooks = dedupe_hooks([
            _make_hook(Domain.CIVIC, HookType.EVENT, 2, "low"),
            _make_hook(Domain.CIVIC, HookType.EVENT, 3, "high"),
            _make_hook(Domain.CIVIC, HookType.PATTERN, 1, "other"),
        ])
        assert [h.text for h in hooks] == ["high", "other"]

    def test_dedupe_tie_keeps_first(self):
        hooks = dedupe_hooks([
            _make_hook(Domain.SPORTS, HookType.SPORTS, 2, "first"),
            _make_hook(Domain.SPORTS, HookType.SPORTS, 2, "second"),
        ])
        assert [h.text for h in hooks] == ["first"]


class TestStoryHookSynthesizer:
    def setup_method(self):
        self.synth = StoryHookSynthesizer()
        self.empty = DomainPresence()

    def _run(self, state=None, arcs=(), presence=None, events=()):
        return self.synth.synthesize(
            state or WorldState(), list(arcs), presence or self.empty, list(events)
        )

    def test_quiet_cycle_has_no_hooks(self):
        assert self._run() == []

    def test_arc_phase_priorities(self):
        hooks = self._run(arcs=[
            _make_arc("E", ArcPhase.EARLY, Domain.HEALTH),
            _make_arc("R", ArcPhase.RISING, Domain.SAFETY),
            _make_arc("P", ArcPhase.PEAK, Domain.CIVIC),
            _make_arc("D", ArcPhase.DECLINE, Domain.ECONOMIC),
        ])
        by_arc = {h.linked_arc_id: h.priority for h in hooks}
        assert by_arc == {"E": 1, "R": 2, "P": 3, "D": 2}

    def test_resolved_arcs_skipped(self):
        assert self._run(arcs=[_make_arc(phase=ArcPhase.RESOLVED)]) == []

    def test_arc_hook_text_and_desk(self):
        hook = self._run(arcs=[_make_arc()])[0]
        assert hook.text == "Early signals in Downtown: HEALTH crisis: Flu Season Strain in Downtown"
        assert hook.suggested_desk == "Health Desk"
        assert hook.neighborhood == "Downtown"
        assert hook.hook_type == HookType.ARC

    def test_same_domain_arcs_collapse_to_peak(self):
        hooks = self._run(arcs=[
            _make_arc("E", ArcPhase.EARLY),
            _make_arc("P", ArcPhase.PEAK, neighborhood="Uptown"),
        ])
        assert len(hooks) == 1
        assert hooks[0].priority == 3
        assert hooks[0].linked_arc_id == "P"

    def test_cluster_and_signal(self):
        presence = DomainPresence(counts={Domain.HEALTH: 4, Domain.CRIME: 2, Domain.CIVIC: 1})
        hooks = self._run(presence=presence)
        kinds = {(h.domain, h.hook_type, h.priority) for h in hooks}
        assert kinds == {
            (Domain.HEALTH, HookType.CLUSTER, 3),
            (Domain.CRIME, HookType.SIGNAL, 2),
        }

    def test_holiday_table_maps_cultural(self):
        state = WorldState.model_validate({
            "calendar": {"holiday": "Juneteenth", "holiday_priority": "cultural"},
        })
        hook = self._run(state)[0]
        assert hook.domain == Domain.CULTURE
        assert hook.neighborhood == "West Oakland"
        assert hook.priority == 3
        assert hook.suggested_desk == "Culture Desk"

    def test_major_holiday_adds_generic_hook(self):
        state = WorldState.model_validate({
            "calendar": {"holiday": "Thanksgiving", "holiday_priority": "major"},
        })
        domains = {h.domain for h in self._run(state)}
        assert domains == {Domain.HOLIDAY, Domain.COMMUNITY}

    def test_first_friday(self):
        state = WorldState.model_validate({"calendar": {"is_first_friday": True}})
        hooks = self._run(state)
        assert {(h.domain, h.neighborhood) for h in hooks} == {
            (Domain.CULTURE, "Uptown"),
            (Domain.NIGHTLIFE, "KONO"),
        }
        assert all(h.hook_type == HookType.FIRST_FRIDAY for h in hooks)

    def test_creation_day_anniversary(self):
        state = WorldState.model_validate({
            "calendar": {"is_creation_day": True, "creation_day_anniversary": 3},
        })
        texts = [h.text for h in self._run(state)]
        assert "Creation Day marks 3 years. Anniversary retrospective opportunity." in texts
        assert len(texts) == 2

    def test_sports_championship(self):
        state = WorldState.model_validate({
            "sports": {"season": "championship", "source": "config-override"},
        })
        hooks = self._run(state)
        assert len(hooks) == 1
        assert hooks[0].priority == 3
        assert hooks[0].suggested_desk == "Sports Desk"

    def test_late_season_from_month_schedule(self):
        state = WorldState.model_validate({
            "calendar": {"month": 9},
            "sports": {"season": "late-season", "source": "simmonth-calculated"},
        })
        hooks = self._run(state)
        assert len(hooks) == 1
        assert hooks[0].domain == Domain.SPORTS
        assert hooks[0].priority == 2
        assert hooks[0].text.startswith("Late season intensity")

    def test_post_season_from_month_schedule(self):
        state = WorldState.model_validate({
            "calendar": {"month": 11},
            "sports": {"season": "post-season", "source": "simmonth-calculated"},
        })
        hooks = self._run(state)
        assert [(h.domain, h.priority) for h in hooks] == [(Domain.SPORTS, 3)]
        assert hooks[0].text.startswith("PLAYOFFS")

    def test_regular_season_has_no_sports_hook(self):
        state = WorldState.model_validate({
            "calendar": {"month": 6},
            "sports": {"season": "mid-season", "source": "simmonth-calculated"},
        })
        assert self._run(state) == []

    def test_blackout_keyword(self):
        hooks = self._run(events=[_make_event("5-minute blackout", domain=Domain.INFRASTRUCTURE)])
        assert len(hooks) == 1
        assert hooks[0].domain == Domain.INFRASTRUCTURE
        assert hooks[0].neighborhood == "West Oakland"
        assert hooks[0].priority == 3

    def test_fireworks_is_not_a_fire(self):
        assert self._run(events=[_make_event("fireworks debris complaint")]) == []

    def test_fire_keyword(self):
        hooks = self._run(events=[_make_event("turkey fryer fire", neighborhood="Laurel")])
        assert [(h.domain, h.neighborhood) for h in hooks] == [(Domain.SAFETY, "Laurel")]

    def test_protest_priority(self):
        hooks = self._run(events=[_make_event("small protest", domain=Domain.CIVIC)])
        assert [(h.domain, h.priority) for h in hooks] == [(Domain.CIVIC, 3)]

    def test_medium_event_gets_follow_up(self):
        event = _make_event("Transit Delays", Severity.MEDIUM, Domain.INFRASTRUCTURE, "Downtown")
        hook = self._run(events=[event])[0]
        assert hook.priority == 2
        assert hook.text == 'Notable event: "Transit Delays". Follow-up recommended.'

    def test_demographic_shift(self):
        state = WorldState.model_validate({
            "demographic_shifts": [
                {"neighborhood": "Fruitvale", "type": "population_shift",
                 "direction": "growth", "percentage": 12},
                {"neighborhood": "Laurel", "type": "sick_shift",
                 "direction": "up", "percentage": 5},
            ],
        })
        hooks = self._run(state)
        assert len(hooks) == 1
        assert hooks[0].priority == 3
        assert hooks[0].text.startswith("Fruitvale seeing 12% population growth.")

    def test_shock_and_sentiment_sorted(self):
        state = WorldState.model_validate({
            "shock_flag": "shock-flag",
            "dynamics": {"sentiment": -0.5, "nightlife": 1.5},
            "weather_mood": {"perfect_weather": True},
        })
        hooks = self._run(state)
        priorities = [h.priority for h in hooks]
        assert priorities == sorted(priorities, reverse=True)
        keys = [h.dedup_key for h in hooks]
        assert len(keys) == len(set(keys))
        assert (Domain.CIVIC, HookType.SHOCK) in keys
        assert (Domain.CIVIC, HookType.SENTIMENT) in keys

    def test_hooks_stamped_with_cycle(self):
        state = WorldState.model_validate({
            "cycle": 41, "calendar": {"cycle_of_year": 41, "holiday": "SummerSolstice"},
        })
        hook = self._run(state)[0]
        assert hook.cycle == 41
        assert hook.cycle_of_year == 41
        assert hook.hook_type == HookType.SEASONAL
        assert hook.priority == 1
