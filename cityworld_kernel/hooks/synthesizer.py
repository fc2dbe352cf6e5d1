"""
Story Hook Synthesizer — turns the cycle's state into prompts for writers.

Builds hooks from:
  - active arcs (phase-aware)
  - domain accumulation (cluster / signal)
  - holidays, First Friday, Creation Day, sports phase
  - weather severity, special weather events, weather mood
  - sentiment, cultural activity, community engagement
  - pattern and shock flags
  - notable individual world events
  - migration drift and neighborhood demographic shifts
  - nightlife surges and equinox / solstice markers

Hooks are deduplicated on (domain, hook_type), keeping the highest
priority (first seen wins a tie), then sorted by priority descending.
Output is rebuilt from scratch every cycle.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from cityworld_kernel.adapters import resolve_domain
from cityworld_kernel.models.arc import Arc, ArcPhase
from cityworld_kernel.models.config import HookConfig
from cityworld_kernel.models.crisis import Severity
from cityworld_kernel.models.domain import Domain, DomainPresence
from cityworld_kernel.models.event import WorldEvent
from cityworld_kernel.models.hook import HookType, StoryHook
from cityworld_kernel.models.world import WorldState

logger = logging.getLogger(__name__)

DESK_MAP: Dict[Domain, str] = {
    Domain.HEALTH: "Health Desk",
    Domain.CIVIC: "Civic Desk",
    Domain.INFRASTRUCTURE: "Civic Desk",
    Domain.SAFETY: "Civic Desk",
    Domain.WEATHER: "Civic Desk",
    Domain.ENVIRONMENT: "Civic Desk",
    Domain.SPORTS: "Sports Desk",
    Domain.BUSINESS: "Business Desk",
    Domain.EDUCATION: "Education Desk",
    Domain.CULTURE: "Culture Desk",
    Domain.NIGHTLIFE: "Culture Desk",
    Domain.ARTS: "Culture Desk",
    Domain.COMMUNITY: "Community Desk",
    Domain.GENERAL: "City Desk",
    Domain.HOLIDAY: "Features Desk",
    Domain.FESTIVAL: "Features Desk",
}

DEFAULT_DESK = "City Desk"

ARC_PHASE_PRIORITY = {
    ArcPhase.EARLY: 1,
    ArcPhase.RISING: 2,
    ArcPhase.PEAK: 3,
    ArcPhase.DECLINE: 2,
}

# holiday -> (domain, neighborhood, priority, text)
HOLIDAY_HOOKS = {
    "NewYear": ("COMMUNITY", None, 2, 'New Year: Resolution stories, fresh-start profiles, "year ahead" features.'),
    "NewYearsEve": ("NIGHTLIFE", "Downtown", 2, "New Year's Eve: Party scene coverage, midnight moments, celebration roundup."),
    "MLKDay": ("CIVIC", "West Oakland", 2, "MLK Day: Service events, community reflection, legacy stories. Interview local leaders."),
    "Juneteenth": ("CULTURAL", "West Oakland", 3, "Juneteenth: Major celebration in West Oakland. Cultural pride, historical significance, community voices."),
    "Independence": ("COMMUNITY", "Lake Merritt", 2, "Fourth of July: Fireworks coverage, patriotic gatherings, neighborhood celebrations."),
    "Halloween": ("CULTURE", "Temescal", 2, "Halloween: Costume scenes, neighborhood trick-or-treat, party coverage. Photo opportunity."),
    "Thanksgiving": ("COMMUNITY", None, 2, "Thanksgiving: Community dinners, gratitude stories, family traditions. Human interest."),
    "Holiday": ("COMMUNITY", None, 2, "Christmas: Holiday spirit coverage, charitable giving, community celebrations."),
    "CincoDeMayo": ("CULTURAL", "Fruitvale", 3, "Cinco de Mayo: Fruitvale celebrations peak. Mariachi, street festivals, cultural pride. Photo essay opportunity."),
    "DiaDeMuertos": ("CULTURAL", "Fruitvale", 3, "Día de los Muertos: Altars, processions, cemetery gatherings in Fruitvale. Deeply meaningful visual story."),
    "PrideMonth": ("CULTURAL", "Downtown", 2, "Pride Month begins: Rainbow flags appear. Preview Oakland Pride, community voices, LGBTQ+ features."),
    "BlackHistoryMonth": ("CULTURAL", "West Oakland", 2, "Black History Month: Educational events, cultural programming, historical features. Oakland's rich heritage."),
    "IndigenousPeoplesDay": ("CIVIC", None, 2, "Indigenous Peoples Day: Native heritage observances, land acknowledgment, community events."),
    "OpeningDay": ("SPORTS", "Jack London", 3, "A's Opening Day: Baseball returns! Tailgate scenes, fan profiles, optimism stories. Stadium atmosphere."),
    "OaklandPride": ("CULTURAL", "Downtown", 3, "Oakland Pride: Major parade and celebration. LGBTQ+ community spotlight, parade coverage, party scenes."),
    "ArtSoulFestival": ("CULTURE", "Downtown", 3, "Art + Soul Festival: Oakland's signature summer event. Music, art, food, community. Full coverage recommended."),
    "EarthDay": ("ENVIRONMENT", "Lake Merritt", 2, "Earth Day: Environmental events at Lake Merritt. Volunteer cleanups, sustainability features."),
}

SEASONAL_HOOKS = {
    "SpringEquinox": ("GENERAL", None, 'Spring equinox: Seasonal transition. "Signs of spring" feature opportunity.'),
    "SummerSolstice": ("COMMUNITY", "Lake Merritt", "Summer solstice: Longest day. Evening gatherings, outdoor celebrations."),
    "FallEquinox": ("GENERAL", None, "Fall equinox: Seasonal shift. Back-to-school wrap-up, autumn preview."),
    "WinterSolstice": ("GENERAL", None, "Winter solstice: Darkest day. Holiday season mood, year-end reflection."),
}


def desk_for(domain: Domain) -> str:
    return DESK_MAP.get(domain, DEFAULT_DESK)


def dedupe_hooks(hooks: Sequence[StoryHook]) -> List[StoryHook]:
    """Keep the highest-priority hook per (domain, hook_type), sorted by priority."""
    best: Dict[tuple, StoryHook] = {}
    for hook in hooks:
        current = best.get(hook.dedup_key)
        if current is None or current.priority < hook.priority:
            best[hook.dedup_key] = hook
    return sorted(best.values(), key=lambda h: -h.priority)


class HookContext:
    """Inputs shared by every hook rule for one cycle."""

    def __init__(
        self,
        state: WorldState,
        arcs: Sequence[Arc],
        presence: DomainPresence,
        events: Sequence[WorldEvent],
    ):
        self.state = state
        self.arcs = arcs
        self.presence = presence
        self.events = events


class StoryHookSynthesizer:
    """
    Rule-based hook builder.
    Each rule returns zero or more hooks; rules run in registration order.
    """

    def __init__(self, config: Optional[HookConfig] = None):
        self.config = config or HookConfig()
        self._rules: List[Callable[[HookContext], List[StoryHook]]] = []
        self._register_default_rules()

    def _register_default_rules(self) -> None:
        self._rules = [
            self._rule_arcs,
            self._rule_domain_accumulation,
            self._rule_holidays,
            self._rule_first_friday,
            self._rule_creation_day,
            self._rule_sports,
            self._rule_weather,
            self._rule_weather_mood,
            self._rule_sentiment,
            self._rule_city_dynamics,
            self._rule_pattern_flags,
            self._rule_shock,
            self._rule_world_events,
            self._rule_migration_drift,
            self._rule_demographic_shifts,
            self._rule_nightlife,
            self._rule_seasonal,
        ]

    def synthesize(
        self,
        state: WorldState,
        arcs: Sequence[Arc],
        presence: DomainPresence,
        events: Sequence[WorldEvent],
    ) -> List[StoryHook]:
        ctx = HookContext(state, arcs, presence, events)
        raw: List[StoryHook] = []
        for rule in self._rules:
            raw.extend(rule(ctx))

        hooks = dedupe_hooks(raw)
        logger.info(
            "Cycle %d hooks: %d emitted, %d dropped as duplicates",
            state.cycle, len(hooks), len(raw) - len(hooks),
        )
        return hooks

    def _make(
        self,
        ctx: HookContext,
        domain,
        neighborhood: Optional[str],
        priority: int,
        text: str,
        hook_type: HookType,
        linked_arc_id: Optional[str] = None,
    ) -> StoryHook:
        resolved = resolve_domain(domain)
        return StoryHook(
            hook_id=uuid4().hex[:8],
            domain=resolved,
            neighborhood=neighborhood or None,
            priority=priority,
            text=text,
            linked_arc_id=linked_arc_id,
            hook_type=hook_type,
            suggested_desk=desk_for(resolved),
            cycle=ctx.state.cycle,
            cycle_of_year=ctx.state.calendar.cycle_of_year,
        )

    # -- rules ------------------------------------------------------------------

    def _rule_arcs(self, ctx: HookContext) -> List[StoryHook]:
        hooks = []
        for arc in ctx.arcs:
            if not arc.is_active:
                continue
            where = arc.neighborhood or "the city"
            if arc.phase == ArcPhase.EARLY:
                text = f"Early signals in {where}: {arc.summary or 'Something is building.'}"
            elif arc.phase == ArcPhase.RISING:
                text = f"Rising tension in {where}: {arc.summary or 'Situation developing.'} Worth watching."
            elif arc.phase == ArcPhase.PEAK:
                text = (
                    f"PEAK: {arc.neighborhood or 'City'} facing acute pressure. "
                    f"{arc.summary or 'This is the moment.'} Immediate attention recommended."
                )
            else:
                text = f"Cooling down in {where}: {arc.summary or 'Tension easing.'} Follow-up angle available."
            hooks.append(self._make(
                ctx, arc.domain, arc.neighborhood, ARC_PHASE_PRIORITY[arc.phase],
                text, HookType.ARC, linked_arc_id=arc.arc_id,
            ))
        return hooks

    def _rule_domain_accumulation(self, ctx: HookContext) -> List[StoryHook]:
        hooks = []
        for domain, count in ctx.presence.ordered_counts():
            name = domain.value.lower()
            if count >= self.config.cluster_threshold:
                hooks.append(self._make(
                    ctx, domain, None, 3,
                    f"Heavy {name} activity this cycle. Multiple incidents creating a pattern. Deep-dive opportunity.",
                    HookType.CLUSTER,
                ))
            elif count >= self.config.signal_threshold:
                hooks.append(self._make(
                    ctx, domain, None, 2,
                    f"Multiple {name} signals detected. Could be coincidence or early pattern.",
                    HookType.SIGNAL,
                ))
        return hooks

    def _rule_holidays(self, ctx: HookContext) -> List[StoryHook]:
        cal = ctx.state.calendar
        hooks = []
        if cal.holiday_priority == "major":
            hooks.append(self._make(
                ctx, Domain.HOLIDAY, cal.holiday_neighborhood, 2,
                f"{cal.holiday} observance citywide. Feature opportunity: How Oakland celebrates. "
                "Human interest angles available.",
                HookType.HOLIDAY,
            ))
        entry = HOLIDAY_HOOKS.get(cal.holiday)
        if entry:
            domain, neighborhood, priority, text = entry
            hooks.append(self._make(ctx, domain, neighborhood, priority, text, HookType.HOLIDAY))
        return hooks

    def _rule_first_friday(self, ctx: HookContext) -> List[StoryHook]:
        if not ctx.state.calendar.is_first_friday:
            return []
        return [
            self._make(
                ctx, Domain.CULTURE, "Uptown", 2,
                "First Friday: Monthly art walk tonight. Gallery openings, street vendors, "
                "neighborhood energy. Photo walk opportunity.",
                HookType.FIRST_FRIDAY,
            ),
            self._make(
                ctx, Domain.NIGHTLIFE, "KONO", 1,
                "First Friday nightlife surge expected. Restaurant and bar scene coverage available.",
                HookType.FIRST_FRIDAY,
            ),
        ]

    def _rule_creation_day(self, ctx: HookContext) -> List[StoryHook]:
        cal = ctx.state.calendar
        if not (cal.is_creation_day or cal.holiday == "CreationDay"):
            return []
        hooks = [self._make(
            ctx, Domain.COMMUNITY, None, 2,
            "Creation Day: The city's founding resonates. Long-time resident reflections, "
            '"how we got here" features.',
            HookType.CREATION_DAY,
        )]
        years = cal.creation_day_anniversary
        if years is not None and years > 0:
            plural = "s" if years > 1 else ""
            hooks.append(self._make(
                ctx, Domain.CIVIC, None, 2,
                f"Creation Day marks {years} year{plural}. Anniversary retrospective opportunity.",
                HookType.CREATION_DAY,
            ))
        return hooks

    def _rule_sports(self, ctx: HookContext) -> List[StoryHook]:
        phase = ctx.state.sports_phase
        if phase in ("playoffs", "post-season"):
            return [self._make(
                ctx, Domain.SPORTS, None, 3,
                "PLAYOFFS: Championship stakes. Fan fever, watch parties, team coverage. All-hands sports desk.",
                HookType.SPORTS,
            )]
        if phase == "championship":
            return [self._make(
                ctx, Domain.SPORTS, None, 3,
                "CHAMPIONSHIP: Historic moment potential. City-wide coverage, celebration preparation, legacy angles.",
                HookType.SPORTS,
            )]
        if phase == "late-season":
            return [self._make(
                ctx, Domain.SPORTS, None, 2,
                "Late season intensity: Pennant race heating up. Fan tension, playoff scenarios, player profiles.",
                HookType.SPORTS,
            )]
        return []

    def _rule_weather(self, ctx: HookContext) -> List[StoryHook]:
        weather = ctx.state.weather
        special = set(ctx.state.weather_events)
        hooks = []
        if weather.impact >= 1.5:
            hooks.append(self._make(
                ctx, Domain.WEATHER, None, 3,
                f"Severe weather ({weather.type}) impacting city operations. "
                "Human interest and infrastructure angles available.",
                HookType.WEATHER,
            ))
        elif weather.impact >= 1.3:
            hooks.append(self._make(
                ctx, Domain.WEATHER, None, 2,
                f"Challenging weather ({weather.type}) affecting daily routines. Street-level color available.",
                HookType.WEATHER,
            ))

        if "first_snow" in special:
            hooks.append(self._make(
                ctx, Domain.WEATHER, None, 2,
                "First snow of the season! Rare Oakland moment. Resident reactions, photo opportunity.",
                HookType.WEATHER,
            ))
        if "first_warm_day" in special:
            hooks.append(self._make(
                ctx, Domain.COMMUNITY, "Lake Merritt", 1,
                "First warm day of spring. Parks filling up, outdoor energy returns. Seasonal feature.",
                HookType.WEATHER,
            ))
        if "heat_wave_declared" in special:
            hooks.append(self._make(
                ctx, Domain.WEATHER, None, 3,
                "Heat wave declared: Extended dangerous heat. Cooling centers, vulnerable populations, "
                "infrastructure strain.",
                HookType.WEATHER,
            ))
        return hooks

    def _rule_weather_mood(self, ctx: HookContext) -> List[StoryHook]:
        mood = ctx.state.weather_mood
        hooks = []
        if mood.perfect_weather:
            hooks.append(self._make(
                ctx, Domain.COMMUNITY, "Lake Merritt", 1,
                "Perfect weather drawing crowds outdoors. Street scene, park life, café patios. Photo walk.",
                HookType.WEATHER,
            ))
        if mood.conflict_potential > 0.3:
            hooks.append(self._make(
                ctx, Domain.SAFETY, None, 2,
                "Weather conditions raising tension citywide. Watch for conflict, temper flares.",
                HookType.WEATHER,
            ))
        return hooks

    def _rule_sentiment(self, ctx: HookContext) -> List[StoryHook]:
        sentiment = ctx.state.dynamics.sentiment
        if sentiment <= -0.4:
            return [self._make(
                ctx, Domain.CIVIC, None, 3,
                "City sentiment notably depressed. What's weighing on residents? Investigation angle.",
                HookType.SENTIMENT,
            )]
        if sentiment >= 0.35:
            return [self._make(
                ctx, Domain.COMMUNITY, "Lake Merritt", 2,
                "Positive energy in the city. What's driving the mood? Feature opportunity.",
                HookType.SENTIMENT,
            )]
        return []

    def _rule_city_dynamics(self, ctx: HookContext) -> List[StoryHook]:
        dyn = ctx.state.dynamics
        hooks = []
        if dyn.cultural_activity >= 1.5:
            hooks.append(self._make(
                ctx, Domain.CULTURE, None, 2,
                "Cultural activity surge detected. Arts scene energized. Gallery/venue roundup opportunity.",
                HookType.CULTURAL,
            ))
        if dyn.community_engagement >= 1.4:
            hooks.append(self._make(
                ctx, Domain.COMMUNITY, None, 2,
                "Community engagement elevated. Residents gathering, organizing, connecting. Profile opportunity.",
                HookType.COMMUNITY,
            ))
        return hooks

    def _rule_pattern_flags(self, ctx: HookContext) -> List[StoryHook]:
        flag = ctx.state.pattern_flag
        if flag == "strain-trend":
            return [self._make(
                ctx, Domain.CIVIC, "Downtown", 3,
                "Strain trend detected across multiple cycles. Systemic pressure building. Explainer piece warranted.",
                HookType.PATTERN,
            )]
        if flag == "calm-after-shock":
            return [self._make(
                ctx, Domain.GENERAL, None, 2,
                "Recovery phase following recent shock. How is the city bouncing back? Follow-up angle.",
                HookType.PATTERN,
            )]
        return []

    def _rule_shock(self, ctx: HookContext) -> List[StoryHook]:
        if not ctx.state.shock_flag or ctx.state.shock_flag == "none":
            return []
        return [self._make(
            ctx, Domain.CIVIC, None, 3,
            "SHOCK EVENT: Unexpected disruption detected. Breaking news potential. All desks alert.",
            HookType.SHOCK,
        )]

    def _rule_world_events(self, ctx: HookContext) -> List[StoryHook]:
        hooks = []
        for event in ctx.events:
            desc = event.description.lower()
            if event.severity == Severity.MEDIUM:
                hooks.append(self._make(
                    ctx, event.domain or Domain.GENERAL, event.neighborhood, 2,
                    f'Notable event: "{event.description}". Follow-up recommended.',
                    HookType.EVENT,
                ))
            # Keyword hooks fire regardless of declared severity
            if "earthquake" in desc:
                hooks.append(self._make(
                    ctx, Domain.ENVIRONMENT, None, 3,
                    "Seismic activity reported. Resident reactions and structural checks warranted.",
                    HookType.EVENT,
                ))
            if "blackout" in desc or "outage" in desc:
                hooks.append(self._make(
                    ctx, Domain.INFRASTRUCTURE, "West Oakland", 3,
                    "Power disruption reported. Cause and impact investigation needed.",
                    HookType.EVENT,
                ))
            if "protest" in desc or "rally" in desc:
                hooks.append(self._make(
                    ctx, Domain.CIVIC, "Downtown", 3,
                    "Public demonstration activity. Organizer interviews and crowd size verification.",
                    HookType.EVENT,
                ))
            if "fire" in desc and "fireworks" not in desc:
                hooks.append(self._make(
                    ctx, Domain.SAFETY, event.neighborhood, 3,
                    "Fire incident reported. Scene coverage, displacement, cause investigation.",
                    HookType.EVENT,
                ))
        return hooks

    def _rule_migration_drift(self, ctx: HookContext) -> List[StoryHook]:
        drift = ctx.state.migration_drift
        if drift < -35:
            return [self._make(
                ctx, Domain.COMMUNITY, None, 2,
                "Significant population outflow detected. Who's leaving and why? Long-form opportunity.",
                HookType.DEMOGRAPHIC,
            )]
        if drift > 30:
            return [self._make(
                ctx, Domain.COMMUNITY, None, 2,
                "Population inflow surge. New residents arriving. Neighborhood change angle.",
                HookType.DEMOGRAPHIC,
            )]
        return []

    def _rule_demographic_shifts(self, ctx: HookContext) -> List[StoryHook]:
        shifts = ctx.state.demographic_shifts
        hooks = []
        for shift in shifts:
            # Only significant shifts (8%+)
            if shift.percentage < 8:
                continue
            text = self._demographic_text(shift)
            if text is None:
                continue
            domain, priority, body = text
            hooks.append(self._make(
                ctx, domain, shift.neighborhood, priority, body, HookType.DEMOGRAPHIC,
            ))

        if ctx.state.neighborhood_demographics_known and len(shifts) >= 3:
            hooks.append(self._make(
                ctx, Domain.CIVIC, None, 2,
                "Multiple neighborhood demographic shifts detected this cycle. "
                "City-wide population dynamics story.",
                HookType.DEMOGRAPHIC,
            ))
        return hooks

    @staticmethod
    def _demographic_text(shift):
        hood = shift.neighborhood
        pct = shift.percentage
        pct_text = f"{pct:g}"
        kind, direction = shift.type, shift.direction

        if kind == "population_shift" and direction == "growth":
            return (Domain.COMMUNITY, 3 if pct >= 12 else 2,
                    f"{hood} seeing {pct_text}% population growth. New residents arriving. "
                    "Who are they and why? Neighborhood change angle.")
        if kind == "population_shift" and direction == "decline":
            return (Domain.COMMUNITY, 3 if pct >= 12 else 2,
                    f"{hood} experiencing {pct_text}% population decline. "
                    "Who's leaving and why? Long-form opportunity.")
        if kind == "seniors_shift" and direction == "up":
            return (Domain.HEALTH, 2,
                    f"{hood}'s senior population up {pct_text}%. Aging-in-place story? "
                    "Senior services demand increasing.")
        if kind == "seniors_shift" and direction == "down":
            return (Domain.COMMUNITY, 2,
                    f"{hood} losing senior residents ({pct_text}% decline). "
                    "Displacement? Family migration? Feature angle.")
        if kind == "students_shift" and direction == "up":
            return (Domain.EDUCATION, 2,
                    f"{hood}'s student population up {pct_text}%. Young families moving in? "
                    "School capacity angle.")
        if kind == "students_shift" and direction == "down":
            return (Domain.EDUCATION, 2,
                    f"{hood} seeing {pct_text}% decline in student population. "
                    "Schools affected? Family migration angle.")
        if kind == "unemployed_shift" and direction == "up":
            return (Domain.BUSINESS, 3 if pct >= 10 else 2,
                    f"Unemployment in {hood} up {pct_text}%. Economic stress story. "
                    "Who's affected and why?")
        if kind == "unemployed_shift" and direction == "down":
            return (Domain.BUSINESS, 2,
                    f"{hood} unemployment down {pct_text}%. Recovery story. "
                    "What's driving job growth?")
        if kind == "sick_shift" and direction == "up":
            return (Domain.HEALTH, 3 if pct >= 10 else 2,
                    f"Illness rates in {hood} up {pct_text}%. Public health concern? "
                    "Investigation warranted.")
        return None

    def _rule_nightlife(self, ctx: HookContext) -> List[StoryHook]:
        if ctx.state.dynamics.nightlife < 1.4:
            return []
        return [self._make(
            ctx, Domain.NIGHTLIFE, "Jack London", 2,
            "Nightlife surge in the district. Scene report or venue profile opportunity.",
            HookType.NIGHTLIFE,
        )]

    def _rule_seasonal(self, ctx: HookContext) -> List[StoryHook]:
        entry = SEASONAL_HOOKS.get(ctx.state.calendar.holiday)
        if not entry:
            return []
        domain, neighborhood, text = entry
        return [self._make(ctx, domain, neighborhood, 1, text, HookType.SEASONAL)]
