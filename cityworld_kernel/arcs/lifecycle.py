"""
Arc Lifecycle Manager — the spawn side of the arc contract.

Behavioral Contract:
  - try_spawn_arc is a no-op while a non-resolved arc exists for
    (crisis.domain, crisis.location).
  - Spawned arcs start in `early` with tension 2/4/6 by severity.
  - Phase transitions past `early` belong to an external lifecycle
    processor; this module never rewrites an existing arc.
"""

import logging
from typing import Dict, Optional
from uuid import uuid4

from cityworld_kernel.arcs.registry import ArcRegistry
from cityworld_kernel.models.arc import (
    Arc,
    ArcPhase,
    ArcType,
    DurationRange,
    ResolutionConditions,
)
from cityworld_kernel.models.crisis import Crisis, Severity
from cityworld_kernel.models.domain import Domain

logger = logging.getLogger(__name__)

BASE_TENSION: Dict[Severity, int] = {
    Severity.LOW: 2,
    Severity.MEDIUM: 4,
    Severity.HIGH: 6,
}


def _conditions(text: str, low: int, high: int, accelerators) -> ResolutionConditions:
    return ResolutionConditions(
        natural_resolution=text,
        expected_duration=DurationRange(min_cycles=low, max_cycles=high),
        accelerators=list(accelerators),
    )


RESOLUTION_TABLE: Dict[Domain, ResolutionConditions] = {
    Domain.HEALTH: _conditions(
        "illnessRate drops below 0.05", 3, 6,
        ["improved weather", "holiday end", "treatment rollout"],
    ),
    Domain.ECONOMIC: _conditions(
        "economicMood rises above 50", 4, 8,
        ["new investment", "holiday shopping", "championship boost"],
    ),
    Domain.CIVIC: _conditions(
        "migration stabilizes within ±50", 5, 10,
        ["housing availability", "job growth", "community programs"],
    ),
    Domain.INFRASTRUCTURE: _conditions(
        "weather.impact drops below 1.2", 2, 4,
        ["weather improvement", "repair completion", "holiday end"],
    ),
    Domain.SAFETY: _conditions(
        "sentiment rises above -0.2", 3, 5,
        ["community engagement", "event conclusion", "patrols"],
    ),
    Domain.ENVIRONMENT: _conditions(
        "weather normalizes", 2, 5,
        ["rain", "temperature drop", "cleanup efforts"],
    ),
}

FALLBACK_CONDITIONS = _conditions("conditions improve", 4, 8, [])


def resolution_conditions_for(domain: Domain) -> ResolutionConditions:
    return RESOLUTION_TABLE.get(domain, FALLBACK_CONDITIONS).model_copy(deep=True)


def new_arc_id(cycle: int) -> str:
    return f"CRISIS-{cycle}-{uuid4().hex[:6].upper()}"


class ArcLifecycleManager:
    """Creates arcs from qualifying crises."""

    def __init__(self, registry: ArcRegistry):
        self.registry = registry

    def try_spawn_arc(
        self,
        crisis: Crisis,
        arc_type: ArcType,
        cycle: int,
        holiday: Optional[str] = None,
        season: Optional[str] = None,
    ) -> Optional[Arc]:
        """Spawn an arc unless one is already active for the crisis' pair."""
        if self.registry.has_active_arc(crisis.domain, crisis.location):
            logger.debug(
                "Arc spawn skipped: active %s arc already in %s",
                crisis.domain.value, crisis.location,
            )
            return None

        arc = Arc(
            arc_id=new_arc_id(cycle),
            type=arc_type,
            phase=ArcPhase.EARLY,
            tension=BASE_TENSION[crisis.severity],
            age=0,
            neighborhood=crisis.location,
            domain=crisis.domain,
            summary=(
                f"{crisis.category.value} crisis: {crisis.subtype} "
                f"in {crisis.location}"
            ),
            subtype=crisis.subtype,
            cycle_created=cycle,
            cycle_resolved=None,
            resolution_conditions=resolution_conditions_for(crisis.domain),
            source="BUCKET",
            holiday_context=holiday if holiday and holiday != "none" else None,
            season_context=season,
        )
        self.registry.add(arc)
        logger.info("Spawned %s arc %s in %s", arc.type.value, arc.arc_id, arc.neighborhood)
        return arc

    @staticmethod
    def can_transition(arc: Arc, target: ArcPhase) -> bool:
        """Forward-only check for external lifecycle processors."""
        return ArcPhase.can_advance(arc.phase, target)
