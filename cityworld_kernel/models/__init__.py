"""City world kernel data models."""

from cityworld_kernel.models.arc import (
    PHASE_ORDER,
    Arc,
    ArcPhase,
    ArcType,
    DurationRange,
    ResolutionConditions,
)
from cityworld_kernel.models.config import (
    CrisisConfig,
    HookConfig,
    KernelConfig,
    TextureConfig,
)
from cityworld_kernel.models.crisis import (
    IMPACT_SCORES,
    Crisis,
    CrisisCategory,
    Severity,
)
from cityworld_kernel.models.domain import DOMAIN_ORDER, Domain, DomainPresence
from cityworld_kernel.models.event import StorySeed, WorldEvent
from cityworld_kernel.models.hook import HookType, StoryHook
from cityworld_kernel.models.world import (
    NEIGHBORHOODS,
    CalendarContext,
    CityDynamics,
    DemographicShift,
    PopulationMetrics,
    SeasonalWeights,
    SportsContext,
    Weather,
    WeatherMood,
    WorldState,
)

__all__ = [
    "Arc",
    "ArcPhase",
    "ArcType",
    "CalendarContext",
    "CityDynamics",
    "Crisis",
    "CrisisCategory",
    "CrisisConfig",
    "DOMAIN_ORDER",
    "DemographicShift",
    "Domain",
    "DomainPresence",
    "DurationRange",
    "HookConfig",
    "HookType",
    "IMPACT_SCORES",
    "KernelConfig",
    "NEIGHBORHOODS",
    "PHASE_ORDER",
    "PopulationMetrics",
    "ResolutionConditions",
    "SeasonalWeights",
    "Severity",
    "SportsContext",
    "StoryHook",
    "StorySeed",
    "TextureConfig",
    "Weather",
    "WeatherMood",
    "WorldEvent",
    "WorldState",
]
