"""
Crisis Generator — per-cycle crisis rolls with cooldown gating.

Seven independent rolls, always in this order:
  HEALTH, EMPLOYMENT, MIGRATION, ECONOMY, INFRASTRUCTURE, SAFETY, ENVIRONMENT
(EMPLOYMENT and ECONOMY are both tagged ECONOMIC, MIGRATION is CIVIC.)

Each roll:
  1. base chance from population / weather / calendar / shock inputs,
     clamped to [0, chance_cap]
  2. × calendar modifier × shock throttle
  3. one uniform draw; on a hit, build a candidate (subtype, severity,
     weighted neighborhood)
  4. cooldown gate; rejected candidates do not use up the budget
  5. accept up to MAX_NEW per cycle, write cooldowns, maybe spawn an arc

Every roll consumes exactly one draw for its chance check whether or not
the chance is zero, so the stream position after the crisis phase only
depends on which rolls hit.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from cityworld_kernel.arcs.lifecycle import ArcLifecycleManager
from cityworld_kernel.arcs.registry import ArcRegistry
from cityworld_kernel.cooldown.store import CooldownStore
from cityworld_kernel.models.arc import Arc, ArcType
from cityworld_kernel.models.config import CrisisConfig
from cityworld_kernel.models.crisis import Crisis, CrisisCategory, Severity
from cityworld_kernel.models.event import WorldEvent
from cityworld_kernel.models.world import NEIGHBORHOODS, WorldState
from cityworld_kernel.rng import RandomSource, round_half_up, pick

logger = logging.getLogger(__name__)

ROLL_ORDER = (
    "HEALTH",
    "EMPLOYMENT",
    "MIGRATION",
    "ECONOMY",
    "INFRASTRUCTURE",
    "SAFETY",
    "ENVIRONMENT",
)

NEIGHBORHOOD_WEIGHTS: Dict[str, float] = {
    "Temescal": 0.9,
    "Downtown": 1.3,
    "Fruitvale": 1.0,
    "Lake Merritt": 0.8,
    "West Oakland": 1.2,
    "Laurel": 0.7,
    "Rockridge": 0.5,
    "Jack London": 1.0,
    "Uptown": 1.1,
    "KONO": 0.8,
    "Chinatown": 0.9,
    "Piedmont Ave": 0.4,
}

PEACEFUL_HOLIDAYS = ("Thanksgiving", "Holiday", "Easter", "MothersDay", "FathersDay")
CIVIC_REST_HOLIDAYS = ("MLKDay", "PresidentsDay", "MemorialDay", "LaborDay", "VeteransDay")
GATHERING_HOLIDAYS = ("Thanksgiving", "Holiday", "NewYearsEve", "Independence", "OpeningDay")
RETAIL_HOLIDAYS = ("Holiday", "BlackFriday")
TRAVEL_HOLIDAYS = ("Thanksgiving", "Holiday", "MemorialDay", "LaborDay", "Independence")
CROWD_HOLIDAYS = ("Independence", "NewYearsEve", "Halloween", "OpeningDay", "OaklandPride")
FIREWORKS_HOLIDAYS = ("Independence", "NewYearsEve")

HEALTH_WINTER_POOL = ("Respiratory Advisory", "Clinic Overcapacity", "Transit Illness Watch", "Flu Season Strain")
HEALTH_HEAT_POOL = ("Heat Exhaustion Calls", "Cooling Center Demand", "Dehydration Advisory")
HEALTH_GATHERING_POOL = ("Post-Gathering Illness Uptick", "Clinic Busy Period", "Seasonal Illness Watch")
HEALTH_DEFAULT_POOL = ("Foodborne Advisory", "Seasonal Allergy Spike", "Air Quality Notice")
ECONOMY_POOL = ("Budget Tightening", "Business Closures", "Revenue Shortfall", "Service Cuts")
INFRA_TRAVEL_POOL = ("Transit Overcrowding", "Airport Delays", "Road Congestion", "Parking Shortage")
INFRA_STADIUM_POOL = ("Stadium Area Congestion", "Transit Surge", "Parking Overflow")
INFRA_DEFAULT_POOL = ("Transit Delays", "Road Hazards", "Power Fluctuations", "Flood Watch")
SAFETY_CROWD_POOL = ("Crowd Control Issue", "Public Disturbance", "Celebratory Incident")
SAFETY_FIREWORKS_POOL = ("Fireworks Complaint", "Noise Disturbance", "Fire Hazard Report")
SAFETY_DEFAULT_POOL = ("Public Disturbance", "Property Incident", "Community Tension")
ENV_FIREWORKS_POOL = ("Air Quality Alert", "Noise Pollution Report", "Debris Cleanup Needed")
ENV_HOT_POOL = ("Heat Advisory", "Fire Risk Warning", "Drought Strain")
ENV_DEFAULT_POOL = ("Environmental Complaint", "Waste Management Strain", "Green Space Pressure")


# ---------------------------------------------------------------------------
# Sports helpers
# ---------------------------------------------------------------------------

def override_championship(state: WorldState) -> bool:
    return state.sports.is_override and state.sports.season == "championship"


def override_big_game(state: WorldState) -> bool:
    """A confirmed championship, or Opening Day under a confirmed season."""
    return state.sports.is_override and (
        state.sports.season == "championship"
        or state.calendar.holiday == "OpeningDay"
    )


def _month_phase(month: int) -> str:
    if month == 3:
        return "spring-training"
    if 4 <= month <= 10:
        return "in-season"
    return "off-season"


def crisis_sports_phase(state: WorldState) -> str:
    """Crowd phase for crisis rolls: the override verbatim, otherwise a month guess.

    Only the crisis generator coarsens the phase this way. Every other
    component reads `state.sports_phase` as supplied.
    """
    if state.sports.is_override:
        return state.sports.season
    return _month_phase(state.calendar.month)


def inferred_in_season(state: WorldState) -> bool:
    return not state.sports.is_override and _month_phase(state.calendar.month) == "in-season"


# ---------------------------------------------------------------------------
# Chance arithmetic
# ---------------------------------------------------------------------------

def clamp_chance(chance: float, cap: float = 0.40) -> float:
    return min(max(chance, 0.0), cap)


def calendar_modifier(state: WorldState) -> float:
    """Product of the independent calendar dampeners."""
    cal = state.calendar
    mod = 1.0
    if cal.holiday in PEACEFUL_HOLIDAYS:
        mod *= 0.7
    if cal.holiday in CIVIC_REST_HOLIDAYS:
        mod *= 0.8
    if cal.is_first_friday:
        mod *= 0.75
    if cal.is_creation_day:
        mod *= 0.7
    if state.dynamics.community_engagement >= 1.4:
        mod *= 0.85
    if state.dynamics.cultural_activity >= 1.4:
        mod *= 0.9
    return mod


def shock_throttle(state: WorldState) -> float:
    if state.shock_active:
        return 0.75
    if state.shock_fading:
        return 0.85
    return 1.0


def health_base_chance(state: WorldState) -> float:
    illness = state.population.illness_rate
    season = state.calendar.season
    holiday = state.calendar.holiday
    comfort = state.weather_mood.comfort_index

    chance = 0.02
    if illness >= 0.06:
        chance += 0.06
    if illness >= 0.07:
        chance += 0.08
    if illness >= 0.085:
        chance += 0.10
    if season == "Winter":
        chance += 0.08
    if state.weather.type in ("fog", "rain"):
        chance += 0.04
    if comfort and comfort < 0.3:
        chance += 0.03

    # Prior-cycle chaos already carries the signal
    if state.prior_event_count > 0:
        chance *= 0.85

    if holiday in GATHERING_HOLIDAYS:
        chance += 0.05
    if season == "Winter" and holiday in ("Holiday", "NewYear"):
        chance += 0.04
    return chance


def employment_base_chance(state: WorldState) -> float:
    holiday = state.calendar.holiday
    chance = 0.0
    if state.population.employment_rate < 0.88:
        chance = 0.55
    if state.economic_mood <= 35:
        chance += 0.15
    if holiday in RETAIL_HOLIDAYS:
        chance *= 0.6
    if holiday == "NewYear" and state.population.economy != "strong":
        chance += 0.1
    return chance


def migration_base_chance(state: WorldState) -> float:
    chance = 0.0
    if abs(state.population.migration) > 120:
        chance = 0.55
    if state.calendar.holiday in TRAVEL_HOLIDAYS:
        chance += 0.1
    return chance


def economy_base_chance(state: WorldState) -> float:
    chance = 0.0
    if state.population.economy in ("weak", "struggling"):
        chance = 0.5
    if state.economic_mood <= 30:
        chance += 0.2
    if override_championship(state):
        chance *= 0.7
    if state.calendar.holiday in ("NewYear", "Holiday") and state.population.economy != "strong":
        chance += 0.1
    return chance


def infrastructure_base_chance(state: WorldState) -> float:
    chance = 0.0
    if state.weather.impact >= 1.3:
        chance = 0.35
    if state.calendar.holiday in TRAVEL_HOLIDAYS:
        chance += 0.1
    if override_big_game(state):
        chance += 0.08
    elif inferred_in_season(state):
        chance += 0.03
    return chance


def safety_base_chance(state: WorldState) -> float:
    holiday = state.calendar.holiday
    chance = 0.0
    if state.dynamics.sentiment <= -0.3:
        chance = 0.30
    if holiday in CROWD_HOLIDAYS:
        chance += 0.1
    if state.sports.is_override:
        if state.sports.season == "championship":
            chance += 0.12
        elif state.sports.season in ("playoffs", "post-season"):
            chance += 0.06
    elif inferred_in_season(state):
        chance += 0.03
    if holiday in FIREWORKS_HOLIDAYS:
        chance += 0.08
    if state.calendar.is_first_friday:
        chance += 0.05
    return chance


def environment_base_chance(state: WorldState) -> float:
    holiday = state.calendar.holiday
    chance = 0.0
    if state.weather.type == "hot":
        chance = 0.25
    if state.weather.impact >= 1.4:
        chance += 0.15
    if holiday in FIREWORKS_HOLIDAYS:
        chance += 0.15
    if holiday in CROWD_HOLIDAYS or override_championship(state):
        chance += 0.08
    return chance


# ---------------------------------------------------------------------------
# Neighborhood sampling
# ---------------------------------------------------------------------------

def neighborhood_weights(
    state: WorldState, bonus: Optional[Dict[str, float]] = None
) -> Dict[str, float]:
    """Base weights plus category and calendar bonuses."""
    weights = dict(NEIGHBORHOOD_WEIGHTS)

    def add(name: str, amount: float) -> None:
        weights[name] = weights.get(name, 1.0) + amount

    for name, amount in (bonus or {}).items():
        add(name, amount)

    holiday = state.calendar.holiday
    if state.calendar.is_first_friday:
        add("Uptown", 0.3)
        add("KONO", 0.2)
    if holiday == "LunarNewYear":
        add("Chinatown", 0.4)
    if holiday in ("CincoDeMayo", "DiaDeMuertos"):
        add("Fruitvale", 0.3)

    if override_big_game(state):
        add("Jack London", 0.4)
        add("Downtown", 0.3)
    elif inferred_in_season(state):
        add("Jack London", 0.15)
        add("Downtown", 0.10)
    return weights


def neighborhood_units(weights: Dict[str, float]) -> List[tuple]:
    """(name, units) pairs: weight floored at 0.1, in tenths, in fixed order."""
    return [
        (name, round_half_up(max(weights.get(name, 1.0), 0.1) * 10))
        for name in NEIGHBORHOODS
    ]


def pick_neighborhood(rng: RandomSource, weights: Dict[str, float]) -> str:
    """Cumulative-unit pick; same odds as a pool with `units` copies of each name."""
    units = neighborhood_units(weights)
    total = sum(u for _, u in units)
    index = int(rng.random() * total)
    for name, count in units:
        if index < count:
            return name
        index -= count
    return units[-1][0]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class CrisisCandidate:
    """A rolled crisis plus the rules that apply if it is accepted."""

    def __init__(
        self,
        roll: str,
        crisis: Crisis,
        cooldown_base: int,
        arc_type: ArcType,
        spawn_if: Callable[[Crisis], bool],
    ):
        self.roll = roll
        self.crisis = crisis
        self.cooldown_base = cooldown_base
        self.arc_type = arc_type
        self.spawn_if = spawn_if


class CrisisResult:
    """Everything the crisis phase produced for one cycle."""

    def __init__(
        self,
        crises: List[Crisis],
        events: List[WorldEvent],
        spawned_arcs: List[Arc],
        audit_issues: List[str],
        chances: Dict[str, float],
        max_new: int,
        rejected: int,
    ):
        self.crises = crises
        self.events = events
        self.spawned_arcs = spawned_arcs
        self.audit_issues = audit_issues
        self.chances = chances
        self.max_new = max_new
        self.rejected = rejected


class CrisisGenerator:
    """
    Rule-based crisis roller.

    Rolls are registered in order; the order is part of the seeded
    reproducibility contract.
    """

    def __init__(self, config: Optional[CrisisConfig] = None):
        self.config = config or CrisisConfig()
        self._rolls: List[Callable] = []
        self._register_default_rolls()

    def _register_default_rolls(self) -> None:
        self._rolls = [
            self._roll_health,
            self._roll_employment,
            self._roll_migration,
            self._roll_economy,
            self._roll_infrastructure,
            self._roll_safety,
            self._roll_environment,
        ]

    def max_new(self, state: WorldState) -> int:
        if state.in_any_shock:
            return self.config.max_new_under_shock
        return self.config.max_new

    def final_chance(self, base: float, state: WorldState) -> float:
        return clamp_chance(base, self.config.chance_cap) * \
            calendar_modifier(state) * shock_throttle(state)

    def cooldown_length(self, base: int, state: WorldState) -> int:
        length = base
        if state.shock_active:
            length += 1
        if state.calendar.is_creation_day:
            length += 1
        return length

    def generate(
        self,
        state: WorldState,
        cooldowns: CooldownStore,
        registry: ArcRegistry,
        rng: RandomSource,
        now: Optional[datetime] = None,
    ) -> CrisisResult:
        """Run all seven rolls and return the accepted crises."""
        now = now or datetime.utcnow()
        lifecycle = ArcLifecycleManager(registry)
        budget = self.max_new(state)

        accepted: List[Crisis] = []
        spawned: List[Arc] = []
        chances: Dict[str, float] = {}
        rejected = 0

        for roll in self._rolls:
            candidate = roll(state, rng, chances)
            if candidate is None:
                continue

            if not self._passes_gate(candidate, state, cooldowns, registry, len(accepted), budget):
                rejected += 1
                continue

            crisis = candidate.crisis
            accepted.append(crisis)
            cooldowns.set_cooldown(
                crisis.category.value,
                crisis.location,
                crisis.subtype,
                state.cycle,
                self.cooldown_length(candidate.cooldown_base, state),
            )

            if candidate.spawn_if(crisis):
                arc = lifecycle.try_spawn_arc(
                    crisis,
                    candidate.arc_type,
                    state.cycle,
                    holiday=state.calendar.holiday,
                    season=state.calendar.season,
                )
                if arc is not None:
                    spawned.append(arc)

        events = [self._to_event(c, state, now) for c in accepted]
        audit = [c.audit_line() for c in accepted]

        logger.info(
            "Cycle %d crisis phase: %d accepted, %d rejected, %d arcs spawned (max %d)",
            state.cycle, len(accepted), rejected, len(spawned), budget,
        )
        return CrisisResult(
            crises=accepted,
            events=events,
            spawned_arcs=spawned,
            audit_issues=audit,
            chances=chances,
            max_new=budget,
            rejected=rejected,
        )

    def _passes_gate(
        self,
        candidate: CrisisCandidate,
        state: WorldState,
        cooldowns: CooldownStore,
        registry: ArcRegistry,
        accepted_count: int,
        budget: int,
    ) -> bool:
        crisis = candidate.crisis
        category = crisis.category.value
        if accepted_count >= budget:
            logger.debug("%s rejected: cycle budget of %d reached", candidate.roll, budget)
            return False
        if cooldowns.is_location_cooling(category, crisis.location, state.cycle):
            logger.debug("%s rejected: %s cooling in %s", candidate.roll, category, crisis.location)
            return False
        if cooldowns.was_subtype_seen_recently(
            category, crisis.subtype, state.cycle, self.config.subtype_repeat_window
        ):
            logger.debug("%s rejected: subtype %r seen recently", candidate.roll, crisis.subtype)
            return False
        if registry.has_active_arc(crisis.domain, crisis.location):
            logger.debug("%s rejected: active arc in %s", candidate.roll, crisis.location)
            return False
        return True

    def _to_event(self, crisis: Crisis, state: WorldState, now: datetime) -> WorldEvent:
        cal = state.calendar
        return WorldEvent(
            cycle=state.cycle,
            domain=crisis.domain,
            subdomain=crisis.subtype,
            description=f"{crisis.category.value} - {crisis.subtype} ({crisis.location})",
            neighborhood=crisis.location,
            severity=crisis.severity,
            source="BUCKET",
            timestamp=now,
            holiday_context=cal.holiday if cal.has_holiday else None,
            sports_context=crisis_sports_phase(state),
            first_friday=cal.is_first_friday,
        )

    # -- shared roll mechanics ------------------------------------------------

    def _hit(self, name: str, base: float, state: WorldState, rng: RandomSource, chances: Dict[str, float]) -> bool:
        chance = self.final_chance(base, state)
        chances[name] = chance
        return rng.random() < chance

    def _forced_severity(self, state: WorldState, rng: RandomSource, metric: float) -> Optional[Severity]:
        """Shock bias: push severity to high instead of adding volume."""
        if state.shock_active and rng.random() < self.config.shock_high_override:
            return Severity.HIGH
        if metric > 0 and state.shock_fading and rng.random() < self.config.fading_high_override:
            return Severity.HIGH
        return None

    def _crisis(
        self,
        category: CrisisCategory,
        subtype: str,
        severity: Severity,
        state: WorldState,
        rng: RandomSource,
        bonus: Optional[Dict[str, float]] = None,
    ) -> Crisis:
        location = pick_neighborhood(rng, neighborhood_weights(state, bonus))
        return Crisis(category=category, subtype=subtype, severity=severity, location=location)

    # -- rolls ------------------------------------------------------------------

    def _roll_health(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("HEALTH", health_base_chance(state), state, rng, chances):
            return None

        illness = state.population.illness_rate
        conflict = state.weather_mood.conflict_potential
        if state.calendar.season == "Winter":
            pool = HEALTH_WINTER_POOL
        elif state.weather.type == "hot" or conflict > 0.3:
            pool = HEALTH_HEAT_POOL
        elif state.calendar.holiday in GATHERING_HOLIDAYS:
            pool = HEALTH_GATHERING_POOL
        else:
            pool = HEALTH_DEFAULT_POOL
        subtype = pick(rng, pool)

        severity = self._forced_severity(state, rng, illness)
        if severity is None:
            if illness >= 0.085:
                severity = Severity.HIGH
            else:
                severity = Severity.LOW if rng.random() < 0.5 else Severity.MEDIUM

        crisis = self._crisis(CrisisCategory.HEALTH, subtype, severity, state, rng)
        return CrisisCandidate(
            "HEALTH", crisis, 3, ArcType.HEALTH_CRISIS,
            lambda c: c.severity == Severity.HIGH or illness >= 0.08,
        )

    def _roll_employment(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("EMPLOYMENT", employment_base_chance(state), state, rng, chances):
            return None

        employment = state.population.employment_rate
        subtype = "Layoff Pressure" if employment < 0.84 else "Hiring Slowdown"
        severity = self._forced_severity(state, rng, 1) or (
            Severity.HIGH if employment < 0.84 else Severity.MEDIUM
        )
        crisis = self._crisis(
            CrisisCategory.ECONOMIC, subtype, severity, state, rng,
            {"Downtown": 0.3, "West Oakland": 0.2},
        )
        return CrisisCandidate(
            "EMPLOYMENT", crisis, 4, ArcType.ECONOMIC_CRISIS,
            lambda c: c.severity == Severity.HIGH,
        )

    def _roll_migration(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("MIGRATION", migration_base_chance(state), state, rng, chances):
            return None

        migration = state.population.migration
        subtype = "Inflow Strain" if migration > 0 else "Outflow Drift"
        severity = self._forced_severity(state, rng, abs(migration) / 300) or (
            Severity.HIGH if abs(migration) > 300 else Severity.LOW
        )
        crisis = self._crisis(CrisisCategory.CIVIC, subtype, severity, state, rng)
        return CrisisCandidate(
            "MIGRATION", crisis, 4, ArcType.DEMOGRAPHIC,
            lambda c: abs(migration) > 250,
        )

    def _roll_economy(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("ECONOMY", economy_base_chance(state), state, rng, chances):
            return None

        mood = state.economic_mood
        subtype = pick(rng, ECONOMY_POOL)
        severity = self._forced_severity(state, rng, 1) or (
            Severity.HIGH if mood <= 30 else Severity.MEDIUM
        )
        crisis = self._crisis(
            CrisisCategory.ECONOMIC, subtype, severity, state, rng, {"Downtown": 0.3}
        )
        return CrisisCandidate(
            "ECONOMY", crisis, 5, ArcType.ECONOMIC_CRISIS,
            lambda c: c.severity == Severity.HIGH or mood <= 25,
        )

    def _roll_infrastructure(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("INFRASTRUCTURE", infrastructure_base_chance(state), state, rng, chances):
            return None

        impact = state.weather.impact
        if state.calendar.holiday in TRAVEL_HOLIDAYS:
            pool = INFRA_TRAVEL_POOL
        elif override_big_game(state):
            pool = INFRA_STADIUM_POOL
        else:
            pool = INFRA_DEFAULT_POOL
        subtype = pick(rng, pool)
        severity = self._forced_severity(state, rng, impact) or (
            Severity.HIGH if impact >= 1.4 else Severity.MEDIUM
        )
        crisis = self._crisis(
            CrisisCategory.INFRASTRUCTURE, subtype, severity, state, rng,
            {"Downtown": 0.2, "Jack London": 0.2},
        )
        return CrisisCandidate(
            "INFRASTRUCTURE", crisis, 3, ArcType.CRISIS,
            lambda c: impact >= 1.5,
        )

    def _roll_safety(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("SAFETY", safety_base_chance(state), state, rng, chances):
            return None

        holiday = state.calendar.holiday
        sentiment = state.dynamics.sentiment
        crowd = holiday in CROWD_HOLIDAYS
        if crowd or override_championship(state):
            pool = SAFETY_CROWD_POOL
        elif holiday in FIREWORKS_HOLIDAYS:
            pool = SAFETY_FIREWORKS_POOL
        else:
            pool = SAFETY_DEFAULT_POOL
        subtype = pick(rng, pool)
        severity = self._forced_severity(state, rng, 1) or (
            Severity.HIGH if sentiment <= -0.4 else Severity.MEDIUM
        )
        bonus = {"Downtown": 0.4, "Jack London": 0.3, "Lake Merritt": 0.2} if crowd else None
        crisis = self._crisis(CrisisCategory.SAFETY, subtype, severity, state, rng, bonus)
        return CrisisCandidate(
            "SAFETY", crisis, 3, ArcType.PATTERN_WAVE,
            lambda c: c.severity == Severity.HIGH or sentiment <= -0.5,
        )

    def _roll_environment(self, state, rng, chances) -> Optional[CrisisCandidate]:
        if not self._hit("ENVIRONMENT", environment_base_chance(state), state, rng, chances):
            return None

        impact = state.weather.impact
        if state.calendar.holiday in FIREWORKS_HOLIDAYS:
            pool = ENV_FIREWORKS_POOL
        elif state.weather.type == "hot":
            pool = ENV_HOT_POOL
        else:
            pool = ENV_DEFAULT_POOL
        subtype = pick(rng, pool)
        severity = self._forced_severity(state, rng, impact) or (
            Severity.HIGH if impact >= 1.4 else Severity.MEDIUM
        )
        crisis = self._crisis(CrisisCategory.ENVIRONMENT, subtype, severity, state, rng)
        return CrisisCandidate(
            "ENVIRONMENT", crisis, 3, ArcType.CRISIS,
            lambda c: impact >= 1.6,
        )
