"""
World Event Texture Generator — ambient, non-crisis happenings.

Behavioral Contract:
  - Categories whose domain the policy suppresses are skipped. If that
    empties the pool, GENERAL categories are used, then the first three
    categories unconditionally. The pool is never empty.
  - Event count is 1 + uniform{0,1,2} plus bonuses, clamped to [1, 6],
    then scaled by event suppression (never below 1).
  - Items already used this cycle or seen in the recent ledger are
    re-drawn up to `retry_limit` times, after which a repeat is accepted.
  - Severity is one additive score per cycle, shared by every ambient event.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel

from cityworld_kernel.models.config import TextureConfig
from cityworld_kernel.models.crisis import Severity
from cityworld_kernel.models.domain import Domain
from cityworld_kernel.models.event import WorldEvent
from cityworld_kernel.models.world import WorldState
from cityworld_kernel.rng import RandomSource, round_half_up, pick_index
from cityworld_kernel.texture.categories import TextureCategory, build_registry
from cityworld_kernel.texture.policy import AllowAllPolicy, DomainPolicy

logger = logging.getLogger(__name__)


class TextureCalendarContext(BaseModel):
    """Calendar context handed to downstream consumers."""

    holiday: str = "none"
    holiday_priority: str = "none"
    is_first_friday: bool = False
    is_creation_day: bool = False
    sports_season: str = "off-season"
    base_count: int = 0
    event_count: int = 0


class TextureResult:
    """Ambient events generated for one cycle."""

    def __init__(
        self,
        events: List[WorldEvent],
        severity: Severity,
        base_count: int,
        calendar_context: TextureCalendarContext,
        used_fallback: bool,
    ):
        self.events = events
        self.severity = severity
        self.base_count = base_count
        self.calendar_context = calendar_context
        self.used_fallback = used_fallback

    @property
    def descriptions(self) -> List[str]:
        return [e.description for e in self.events]


# ---------------------------------------------------------------------------
# Count and severity
# ---------------------------------------------------------------------------

def count_bonus(state: WorldState) -> int:
    """Additive adjustments to the ambient event count."""
    holiday = state.calendar.holiday
    sports = state.sports_phase
    bonus = 0

    if state.nightlife_volume >= 7:
        bonus += 1
    if state.prior_event_count >= 3:
        bonus += 1
    if state.pattern_flag == "micro-event-wave":
        bonus += 1
    if state.dynamics.sentiment <= -0.4:
        bonus += 1
    if state.dynamics.civic_load == "load-strain":
        bonus += 1

    if holiday == "NewYearsEve":
        bonus += 2
    if holiday in ("OaklandPride", "ArtSoulFestival"):
        bonus += 2
    if holiday in ("Independence", "Halloween"):
        bonus += 1
    if holiday in ("LunarNewYear", "CincoDeMayo"):
        bonus += 1
    if state.calendar.holiday_priority == "major":
        bonus += 1
    if state.calendar.is_first_friday:
        bonus += 1
    if sports == "championship":
        bonus += 2
    if sports == "playoffs":
        bonus += 1
    if holiday == "OpeningDay":
        bonus += 1

    # Quieter holidays
    if holiday in ("Thanksgiving", "Easter"):
        bonus -= 1
    if holiday in ("MothersDay", "FathersDay"):
        bonus -= 1
    return bonus


def scale_count(count: int, suppression: float) -> int:
    return max(1, round_half_up(count * suppression))


def ambient_event_count(
    rng: RandomSource, state: WorldState, config: Optional[TextureConfig] = None
) -> Tuple[int, int]:
    """Draw the cycle's event count. Returns (clamped base, final)."""
    config = config or TextureConfig()
    count = int(rng.random() * 3) + 1 + count_bonus(state)
    count = min(max(count, config.min_events), config.max_events)
    return count, scale_count(count, state.event_suppression)


def severity_score(state: WorldState) -> int:
    holiday = state.calendar.holiday
    suppression = state.event_suppression
    score = 0

    if state.prior_event_count >= 3:
        score += 2
    if state.shock_active:
        score += 3
    if state.dynamics.sentiment <= -0.4:
        score += 1
    if state.weather.impact >= 1.3:
        score += 1
    if state.migration_drift <= -20:
        score += 1

    if holiday in ("NewYearsEve", "OaklandPride"):
        score += 1
    if state.sports_phase == "championship":
        score += 1
    if holiday in ("Thanksgiving", "Easter", "MothersDay", "FathersDay"):
        score -= 1

    if suppression <= 0.55:
        score -= 2
    elif suppression <= 0.75:
        score -= 1
    return score


def ambient_severity(state: WorldState) -> Severity:
    score = severity_score(state)
    if score >= 5:
        severity = Severity.HIGH
    elif score >= 3:
        severity = Severity.MEDIUM
    else:
        severity = Severity.LOW

    if severity == Severity.HIGH and state.event_suppression <= 0.55:
        severity = Severity.MEDIUM
    return severity


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def pick_weighted(
    rng: RandomSource, categories: List[Tuple[TextureCategory, float]]
) -> TextureCategory:
    """
    Weighted pick over (category, weight) pairs.
    Non-positive weights are skipped; if none remain, the first category
    is returned without drawing.
    """
    pool = [(c, w) for c, w in categories if w > 0]
    if not pool:
        return categories[0][0]

    total = sum(w for _, w in pool)
    roll = rng.random() * total
    for category, weight in pool:
        if roll < weight:
            return category
        roll -= weight
    return pool[0][0]


def filter_allowed(
    registry: List[TextureCategory], policy: DomainPolicy
) -> Tuple[List[TextureCategory], bool]:
    """Apply domain suppression with the GENERAL / first-three fallback."""
    allowed = [c for c in registry if not policy.is_suppressed(c.domain)]
    if allowed:
        return allowed, False

    general = [c for c in registry if c.domain == Domain.GENERAL]
    if general:
        logger.debug("All ambient domains suppressed; falling back to GENERAL")
        return general, True
    logger.debug("All ambient domains suppressed; falling back to first categories")
    return registry[:3], True


class TextureGenerator:
    """Samples ambient events from the domain-tagged category registry."""

    def __init__(self, config: Optional[TextureConfig] = None):
        self.config = config or TextureConfig()

    def health_weight(self, category: TextureCategory, state: WorldState, health_used: bool) -> float:
        weight = category.weight
        if not category.is_health:
            return weight
        if health_used:
            weight *= self.config.health_repeat_damping
        if state.recovery_level == "heavy":
            weight *= self.config.heavy_recovery_health_damping
        return weight

    def generate(
        self,
        state: WorldState,
        rng: RandomSource,
        policy: Optional[DomainPolicy] = None,
        recent_descriptions: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> TextureResult:
        now = now or datetime.utcnow()
        policy = policy or AllowAllPolicy()
        recent: Set[str] = set(recent_descriptions or ())

        categories, used_fallback = filter_allowed(build_registry(state), policy)
        base_count, count = ambient_event_count(rng, state, self.config)
        severity = ambient_severity(state)
        cal = state.calendar

        used: Set[str] = set()
        health_used = False
        events: List[WorldEvent] = []

        for _ in range(count):
            view = [(c, self.health_weight(c, state, health_used)) for c in categories]
            category = pick_weighted(rng, view)
            if all(item in used for item in category.items):
                category = pick_weighted(rng, [(c, c.weight) for c in categories])

            choice = self._pick_item(rng, category, used, recent)
            used.add(choice)
            if category.is_health:
                health_used = True

            events.append(WorldEvent(
                cycle=state.cycle,
                domain=category.domain,
                subdomain=category.name,
                description=choice,
                neighborhood=None,
                severity=severity,
                source="AMBIENT",
                timestamp=now,
                holiday_context=cal.holiday if cal.has_holiday else None,
                sports_context=state.sports_phase,
                first_friday=cal.is_first_friday,
            ))

        context = TextureCalendarContext(
            holiday=cal.holiday,
            holiday_priority=cal.holiday_priority,
            is_first_friday=cal.is_first_friday,
            is_creation_day=cal.is_creation_day,
            sports_season=state.sports_phase,
            base_count=base_count,
            event_count=len(events),
        )
        logger.info(
            "Cycle %d texture phase: %d ambient events (base %d, suppression %.2f, severity %s)",
            state.cycle, len(events), base_count, state.event_suppression, severity.value,
        )
        return TextureResult(
            events=events,
            severity=severity,
            base_count=base_count,
            calendar_context=context,
            used_fallback=used_fallback,
        )

    def _pick_item(
        self,
        rng: RandomSource,
        category: TextureCategory,
        used: Set[str],
        recent: Set[str],
    ) -> str:
        items = category.items
        choice = items[pick_index(rng, len(items))]
        spins = 0
        while (choice in used or choice in recent) and spins < self.config.retry_limit:
            choice = items[pick_index(rng, len(items))]
            spins += 1
        if choice in used or choice in recent:
            logger.debug("Accepting repeat %r after %d retries", choice, spins)
        return choice
