"""Domains — the fixed tag set used to classify events, arcs and hooks."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


class Domain(str, Enum):
    CIVIC = "CIVIC"
    CRIME = "CRIME"
    TRANSIT = "TRANSIT"
    ECONOMIC = "ECONOMIC"
    EDUCATION = "EDUCATION"
    HEALTH = "HEALTH"
    WEATHER = "WEATHER"
    COMMUNITY = "COMMUNITY"
    NIGHTLIFE = "NIGHTLIFE"
    HOUSING = "HOUSING"
    CULTURE = "CULTURE"
    SPORTS = "SPORTS"
    BUSINESS = "BUSINESS"
    SAFETY = "SAFETY"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    GENERAL = "GENERAL"
    FESTIVAL = "FESTIVAL"
    HOLIDAY = "HOLIDAY"
    ARTS = "ARTS"
    ENVIRONMENT = "ENVIRONMENT"
    TECHNOLOGY = "TECHNOLOGY"


# Declaration order is the tie-break order for the dominant domain.
DOMAIN_ORDER = tuple(Domain)


class DomainPresence(BaseModel):
    """Per-cycle domain counts. Recomputed from scratch every cycle."""

    cycle: int = 0
    counts: Dict[Domain, int] = {}
    dominant: Optional[Domain] = None      # None when nothing was counted
    total: int = Field(ge=0, default=0)

    @model_validator(mode="after")
    def _fill_and_check(self) -> "DomainPresence":
        for domain in DOMAIN_ORDER:
            self.counts.setdefault(domain, 0)
        if any(v < 0 for v in self.counts.values()):
            raise ValueError("domain counts must be non-negative")
        return self

    def get(self, domain: Domain) -> int:
        return self.counts.get(domain, 0)

    def ordered_counts(self):
        """(domain, count) pairs in fixed domain order."""
        return [(d, self.counts.get(d, 0)) for d in DOMAIN_ORDER]
