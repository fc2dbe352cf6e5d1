"""Story Hook — a prioritized, desk-routed prompt for a human writer."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from cityworld_kernel.models.domain import Domain


class HookType(str, Enum):
    ARC = "arc"
    CLUSTER = "cluster"
    SIGNAL = "signal"
    HOLIDAY = "holiday"
    FIRST_FRIDAY = "firstfriday"
    CREATION_DAY = "creationday"
    SPORTS = "sports"
    WEATHER = "weather"
    SENTIMENT = "sentiment"
    CULTURAL = "cultural"
    COMMUNITY = "community"
    PATTERN = "pattern"
    SHOCK = "shock"
    EVENT = "event"
    DEMOGRAPHIC = "demographic"
    NIGHTLIFE = "nightlife"
    SEASONAL = "seasonal"


class StoryHook(BaseModel):
    """Recomputed from scratch every cycle; never merged across cycles."""

    hook_id: str
    domain: Domain
    neighborhood: Optional[str] = None
    priority: int = Field(ge=1, le=3)       # 3 = most urgent
    text: str
    linked_arc_id: Optional[str] = None
    hook_type: HookType
    suggested_desk: str = "City Desk"
    cycle: int = 0
    cycle_of_year: int = 1

    @property
    def dedup_key(self):
        return (self.domain, self.hook_type)
