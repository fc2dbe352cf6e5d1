"""Arc — a persisted, multi-cycle narrative thread."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from cityworld_kernel.models.domain import Domain


class ArcPhase(str, Enum):
    """Phases move strictly forward: early → rising → peak → decline → resolved."""
    EARLY = "early"
    RISING = "rising"
    PEAK = "peak"
    DECLINE = "decline"
    RESOLVED = "resolved"

    @property
    def order(self) -> int:
        return PHASE_ORDER.index(self)

    @property
    def is_active(self) -> bool:
        return self is not ArcPhase.RESOLVED

    @staticmethod
    def can_advance(current: "ArcPhase", target: "ArcPhase") -> bool:
        """True if an external lifecycle processor may move current → target."""
        return target.order > current.order


PHASE_ORDER = (
    ArcPhase.EARLY,
    ArcPhase.RISING,
    ArcPhase.PEAK,
    ArcPhase.DECLINE,
    ArcPhase.RESOLVED,
)


class ArcType(str, Enum):
    HEALTH_CRISIS = "health-crisis"
    ECONOMIC_CRISIS = "economic-crisis"
    DEMOGRAPHIC = "demographic"
    CRISIS = "crisis"
    PATTERN_WAVE = "pattern-wave"
    FESTIVAL = "festival"
    CELEBRATION = "celebration"
    SPORTS_FEVER = "sports-fever"
    ARTS_WALK = "arts-walk"
    HERITAGE = "heritage"
    PARADE = "parade"
    INSTABILITY = "instability"
    INFRASTRUCTURE = "infrastructure"
    COMMUNITY = "community"
    CULTURAL_MOMENT = "cultural-moment"
    SAFETY_CONCERN = "safety-concern"
    BUSINESS_DISRUPTION = "business-disruption"
    RIVALRY = "rivalry"
    OTHER = "other"                         # Any tag not listed above

    @classmethod
    def from_tag(cls, tag: str) -> "ArcType":
        """Known tags map to their member; anything else becomes OTHER."""
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            return cls.OTHER


class DurationRange(BaseModel):
    min_cycles: int = Field(ge=0)
    max_cycles: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.min_cycles}-{self.max_cycles} cycles"


class ResolutionConditions(BaseModel):
    """How an arc is expected to wind down. Read by the external lifecycle processor."""

    natural_resolution: str                 # e.g., "illnessRate drops below 0.05"
    expected_duration: DurationRange
    accelerators: List[str] = []


class Arc(BaseModel):
    """
    One narrative arc. Owned by the caller / persistence layer.

    The kernel only writes arcs at spawn time; after that `phase`,
    `tension` and `age` belong to the external lifecycle processor.
    """

    arc_id: str
    type: ArcType
    type_tag: str = ""                      # Type exactly as the producer wrote it
    phase: ArcPhase = ArcPhase.EARLY
    tension: float = Field(ge=0, default=2)
    age: int = Field(ge=0, default=0)
    neighborhood: Optional[str] = None      # None = city-wide
    domain: Domain
    summary: str = ""                       # Free text, human-readable only
    subtype: str = ""
    cycle_created: int = 0
    cycle_resolved: Optional[int] = None
    resolution_conditions: Optional[ResolutionConditions] = None
    source: str = "BUCKET"
    holiday_context: Optional[str] = None
    season_context: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_any_type_tag(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") is not None:
            raw = data["type"]
            tag = raw.value if isinstance(raw, ArcType) else str(raw)
            data = {**data, "type": ArcType.from_tag(tag)}
            if not data.get("type_tag"):
                data["type_tag"] = tag
        return data

    @property
    def is_active(self) -> bool:
        return self.phase.is_active
