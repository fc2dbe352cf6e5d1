"""
Domain Presence Tracker — per-cycle domain counts.

A pure function of the cycle's world events, arcs, optional story seeds
and hooks, and calendar flags. Nothing carries over between cycles.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, Optional

from cityworld_kernel.adapters import normalize_domain, resolve_domain
from cityworld_kernel.models.arc import Arc, ArcType
from cityworld_kernel.models.domain import DOMAIN_ORDER, Domain, DomainPresence
from cityworld_kernel.models.event import StorySeed, WorldEvent
from cityworld_kernel.models.hook import StoryHook
from cityworld_kernel.models.world import WorldState

logger = logging.getLogger(__name__)

ARC_TYPE_DOMAINS: Dict[ArcType, Domain] = {
    ArcType.HEALTH_CRISIS: Domain.HEALTH,
    ArcType.CRISIS: Domain.CIVIC,
    ArcType.PATTERN_WAVE: Domain.GENERAL,
    ArcType.FESTIVAL: Domain.FESTIVAL,
    ArcType.CELEBRATION: Domain.HOLIDAY,
    ArcType.SPORTS_FEVER: Domain.SPORTS,
    ArcType.ARTS_WALK: Domain.ARTS,
    ArcType.HERITAGE: Domain.CIVIC,
    ArcType.PARADE: Domain.FESTIVAL,
}


def event_domain(event: WorldEvent) -> Domain:
    return resolve_domain(event.domain, event.description)


def calendar_contribution(state: WorldState) -> Dict[Domain, int]:
    """Fixed increments from calendar and sports flags alone."""
    cal = state.calendar
    counts: Counter = Counter()

    if cal.has_holiday:
        counts[Domain.HOLIDAY] += 1
        if cal.holiday_priority in ("major", "oakland"):
            counts[Domain.FESTIVAL] += 1
    if cal.is_first_friday:
        counts[Domain.ARTS] += 2
        counts[Domain.CULTURE] += 1
    if cal.is_creation_day:
        counts[Domain.CIVIC] += 1
        counts[Domain.COMMUNITY] += 1

    phase = state.sports_phase
    if phase and phase != "off-season":
        counts[Domain.SPORTS] += 1
        if phase == "championship":
            counts[Domain.SPORTS] += 2
        elif phase == "playoffs":
            counts[Domain.SPORTS] += 1
    return dict(counts)


def dominant_domain(counts: Dict[Domain, int]) -> Optional[Domain]:
    """Highest count; ties go to the earlier domain in the fixed order."""
    best: Optional[Domain] = None
    best_count = 0
    for domain in DOMAIN_ORDER:
        if counts.get(domain, 0) > best_count:
            best = domain
            best_count = counts[domain]
    return best


class DomainPresenceTracker:

    def track(
        self,
        state: WorldState,
        events: Iterable[WorldEvent],
        arcs: Iterable[Arc],
        story_seeds: Optional[Iterable[StorySeed]] = None,
        hooks: Optional[Iterable[StoryHook]] = None,
    ) -> DomainPresence:
        counts: Counter = Counter()

        for event in events:
            counts[event_domain(event)] += 1

        for arc in arcs:
            if not arc.is_active:
                continue
            counts[arc.domain] += 1
            type_domain = ARC_TYPE_DOMAINS.get(arc.type)
            if type_domain is not None:
                counts[type_domain] += 1

        for seed in story_seeds or ():
            domain = normalize_domain(seed.domain)
            if domain is None and seed.text:
                domain = resolve_domain(None, seed.text)
            if domain is not None:
                counts[domain] += 1

        for hook in hooks or ():
            counts[hook.domain] += 1

        counts.update(calendar_contribution(state))

        full = {d: counts.get(d, 0) for d in DOMAIN_ORDER}
        presence = DomainPresence(
            cycle=state.cycle,
            counts=full,
            dominant=dominant_domain(full),
            total=sum(full.values()),
        )
        logger.info(
            "Cycle %d domain presence: total %d, dominant %s",
            state.cycle, presence.total,
            presence.dominant.value if presence.dominant else "none",
        )
        return presence
