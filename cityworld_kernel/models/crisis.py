"""Crisis — a transient, single-cycle disruption candidate."""

from enum import Enum

from pydantic import BaseModel

from cityworld_kernel.models.domain import Domain


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


IMPACT_SCORES = {
    Severity.LOW: 15,
    Severity.MEDIUM: 30,
    Severity.HIGH: 50,
}


class CrisisCategory(str, Enum):
    HEALTH = "HEALTH"
    ECONOMIC = "ECONOMIC"
    CIVIC = "CIVIC"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    SAFETY = "SAFETY"
    ENVIRONMENT = "ENVIRONMENT"

    @property
    def domain(self) -> Domain:
        return Domain(self.value)


class Crisis(BaseModel):
    """A crisis candidate. Created and consumed within one cycle."""

    category: CrisisCategory
    subtype: str                            # e.g., "Flu Season Strain"
    severity: Severity
    location: str                           # One of the 12 neighborhoods

    @property
    def domain(self) -> Domain:
        return self.category.domain

    @property
    def impact_score(self) -> int:
        return IMPACT_SCORES[self.severity]

    def audit_line(self) -> str:
        return (
            f"{self.category.value} - {self.subtype} - "
            f"{self.location} - {self.severity.value}"
        )
