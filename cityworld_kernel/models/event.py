"""World Event — append-only log entry produced by the generators."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, model_validator

from cityworld_kernel.models.crisis import IMPACT_SCORES, Severity
from cityworld_kernel.models.domain import Domain


class WorldEvent(BaseModel):
    """
    A single happening in the city this cycle.

    `impact_score` is always derived from `severity`; any value passed in
    is overwritten.
    """

    cycle: int
    domain: Optional[Domain] = None         # None only for raw external records
    subdomain: str = ""
    description: str
    neighborhood: Optional[str] = None
    severity: Severity = Severity.LOW
    impact_score: int = 0
    source: str                             # "BUCKET" (crisis) | "AMBIENT" (texture)
    timestamp: datetime
    holiday_context: Optional[str] = None
    sports_context: Optional[str] = None
    first_friday: bool = False

    @model_validator(mode="after")
    def _derive_impact(self) -> "WorldEvent":
        self.impact_score = IMPACT_SCORES[self.severity]
        return self


class StorySeed(BaseModel):
    """A story seed produced upstream. Only its domain matters to the kernel."""

    domain: Optional[str] = None
    text: str = ""
