"""
Cycle Engine — the once-per-cycle library entry point.

Data flow:
  WorldState → Crisis Generator → Texture Generator → Domain Tracker
             → Story Hook Synthesizer → CycleResult

One RNG stream per cycle; crisis rolls consume it before ambient
sampling. The caller's arc list and cooldown store are mutated in place
and are visible to every later stage in the same cycle.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from cityworld_kernel.arcs.registry import ArcRegistry
from cityworld_kernel.cooldown.store import CooldownStore
from cityworld_kernel.crisis.generator import CrisisGenerator
from cityworld_kernel.domains.tracker import DomainPresenceTracker
from cityworld_kernel.hooks.synthesizer import StoryHookSynthesizer
from cityworld_kernel.ledger.store import EventLedger
from cityworld_kernel.models.arc import Arc
from cityworld_kernel.models.config import KernelConfig
from cityworld_kernel.models.crisis import Crisis
from cityworld_kernel.models.domain import DomainPresence
from cityworld_kernel.models.event import StorySeed, WorldEvent
from cityworld_kernel.models.hook import StoryHook
from cityworld_kernel.models.world import WorldState
from cityworld_kernel.rng import RandomSource, make_rng
from cityworld_kernel.texture.generator import TextureCalendarContext, TextureGenerator
from cityworld_kernel.texture.policy import DomainPolicy

logger = logging.getLogger(__name__)


class CycleResult(BaseModel):
    """Everything one cycle hands back to the persistence layer."""

    cycle: int
    crises: List[Crisis] = []
    events: List[WorldEvent] = []           # Crisis events first, then ambient
    spawned_arcs: List[Arc] = []
    domain_presence: DomainPresence
    hooks: List[StoryHook] = []
    audit_issues: List[str] = []
    texture_context: TextureCalendarContext
    crisis_chances: Dict[str, float] = {}
    crisis_impact: int = 0                  # Sum of impact scores over accepted crises
    texture_fallback: bool = False          # Every ambient domain was suppressed this cycle

    @property
    def ambient_events(self) -> List[WorldEvent]:
        return [e for e in self.events if e.source == "AMBIENT"]


class CycleEngine:

    def __init__(self, config: Optional[KernelConfig] = None):
        self.config = config or KernelConfig()
        self.crisis_generator = CrisisGenerator(self.config.crisis)
        self.texture_generator = TextureGenerator(self.config.texture)
        self.domain_tracker = DomainPresenceTracker()
        self.hook_synthesizer = StoryHookSynthesizer(self.config.hooks)

    def run_cycle(
        self,
        state: WorldState,
        cooldowns: CooldownStore,
        arcs: List[Arc],
        ledger: Optional[EventLedger] = None,
        domain_policy: Optional[DomainPolicy] = None,
        story_seeds: Optional[Sequence[StorySeed]] = None,
        now: Optional[datetime] = None,
        rng: Optional[RandomSource] = None,
    ) -> CycleResult:
        """
        Run one simulated cycle.

        `arcs` is the caller-owned list; new spawns are appended to it.
        An explicit `rng` overrides the seed-derived stream.
        """
        now = now or datetime.utcnow()
        rng = rng or make_rng(state.rng_seed, state.cycle)
        registry = ArcRegistry(arcs)

        # 1. Crises (and arc spawns)
        crisis_result = self.crisis_generator.generate(
            state, cooldowns, registry, rng, now=now
        )

        # 2. Ambient texture
        recent = set()
        if ledger is not None:
            recent = ledger.recent_descriptions(
                state.cycle, self.config.texture.ledger_lookback_cycles
            )
        texture_result = self.texture_generator.generate(
            state, rng, policy=domain_policy, recent_descriptions=recent, now=now
        )

        events = crisis_result.events + texture_result.events

        # 3. Domain presence
        presence = self.domain_tracker.track(
            state, events, registry.arcs, story_seeds=story_seeds
        )

        # 4. Story hooks
        hooks = self.hook_synthesizer.synthesize(
            state, registry.active(), presence, events
        )

        if ledger is not None:
            ledger.record(state.cycle, texture_result.descriptions)
        if texture_result.used_fallback:
            logger.warning(
                "Cycle %d: domain policy suppressed every ambient category; sampled fallback pool",
                state.cycle,
            )

        logger.info(
            "Cycle %d complete: %d crises, %d events, %d arcs spawned, %d hooks",
            state.cycle, len(crisis_result.crises), len(events),
            len(crisis_result.spawned_arcs), len(hooks),
        )
        return CycleResult(
            cycle=state.cycle,
            crises=crisis_result.crises,
            events=events,
            spawned_arcs=crisis_result.spawned_arcs,
            domain_presence=presence,
            hooks=hooks,
            audit_issues=crisis_result.audit_issues,
            texture_context=texture_result.calendar_context,
            crisis_chances=crisis_result.chances,
            crisis_impact=sum(c.impact_score for c in crisis_result.crises),
            texture_fallback=texture_result.used_fallback,
        )


def run_cycle(state: Any, cooldowns: CooldownStore, arcs: List[Arc], **kwargs) -> CycleResult:
    """Convenience wrapper accepting a WorldState or a plain dict."""
    if not isinstance(state, WorldState):
        state = WorldState.model_validate(state)
    return CycleEngine().run_cycle(state, cooldowns, arcs, **kwargs)
