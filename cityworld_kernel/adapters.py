"""
Input-boundary adapters.

Loose records coming from persistence use several spellings for the same
field (`domain`/`Domain`/`domainTag`, `description`/`subtype`/`text`,
camelCase arc keys). These helpers turn them into canonical models so the
rest of the kernel only ever sees one shape.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from cityworld_kernel.models.arc import Arc
from cityworld_kernel.models.domain import Domain
from cityworld_kernel.models.event import StorySeed, WorldEvent

DOMAIN_SYNONYMS: Dict[str, Domain] = {
    "CRIMINAL": Domain.CRIME,
    "MEDICAL": Domain.HEALTH,
    "GOVERNMENT": Domain.CIVIC,
    "TRANSPORTATION": Domain.TRANSIT,
    "ECONOMY": Domain.ECONOMIC,
    "COMMERCE": Domain.BUSINESS,
    "SCHOOL": Domain.EDUCATION,
    "NEIGHBORHOOD": Domain.COMMUNITY,
    "ENTERTAINMENT": Domain.NIGHTLIFE,
    "CULTURAL": Domain.CULTURE,
    "ART": Domain.ARTS,
    "GALLERY": Domain.ARTS,
    "ATHLETICS": Domain.SPORTS,
    "PARADE": Domain.FESTIVAL,
    "CELEBRATION": Domain.FESTIVAL,
    "SEASONAL": Domain.HOLIDAY,
    "ENVIRONMENTAL": Domain.ENVIRONMENT,
    "ECOLOGY": Domain.ENVIRONMENT,
    "TECH": Domain.TECHNOLOGY,
}

# First match wins, so the newer, more specific domains are checked first.
DOMAIN_KEYWORDS = (
    (Domain.FESTIVAL, ("festival", "parade", "celebration", "pride")),
    (Domain.HOLIDAY, ("holiday", "firework", "halloween", "thanksgiving")),
    (Domain.ARTS, ("gallery", "exhibit", "first friday", "artist")),
    (Domain.ENVIRONMENT, ("environment", "cleanup", "tree planting", "earth day")),
    (Domain.TECHNOLOGY, ("drone", "tech", "digital")),
    (Domain.HEALTH, ("health", "illness", "clinic", "hospital")),
    (Domain.CRIME, ("crime", "theft", "break-in", "pursuit")),
    (Domain.TRANSIT, ("transit", "train", "bus", "traffic")),
    (Domain.CIVIC, ("civic", "city hall", "mayor", "council")),
    (Domain.EDUCATION, ("school", "education", "student")),
    (Domain.BUSINESS, ("business", "retail", "store", "shop")),
    (Domain.SPORTS, ("sport", "game", "team", "player")),
    (Domain.WEATHER, ("weather", "rain", "snow", "fog")),
    (Domain.COMMUNITY, ("community", "neighbor", "resident")),
    (Domain.NIGHTLIFE, ("night", "bar", "club", "venue")),
    (Domain.CULTURE, ("art", "music", "concert")),
    (Domain.INFRASTRUCTURE, ("infrastructure", "power", "water", "utility")),
)


def normalize_domain(value: Any) -> Optional[Domain]:
    """Map a free-text domain tag to a Domain, or None if unrecognized."""
    if value is None:
        return None
    if isinstance(value, Domain):
        return value
    key = str(value).strip().upper()
    if not key:
        return None
    if key in DOMAIN_SYNONYMS:
        return DOMAIN_SYNONYMS[key]
    try:
        return Domain(key)
    except ValueError:
        return None


def infer_domain_from_text(text: Optional[str]) -> Optional[Domain]:
    """Keyword-based domain guess for a description."""
    if not text:
        return None
    lower = text.lower()
    for domain, keywords in DOMAIN_KEYWORDS:
        if any(k in lower for k in keywords):
            return domain
    return None


def resolve_domain(explicit: Any, text: Optional[str] = None) -> Domain:
    """Explicit tag, then keyword inference, then GENERAL."""
    return (
        normalize_domain(explicit)
        or infer_domain_from_text(text)
        or Domain.GENERAL
    )


def _first(record: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def event_from_record(
    record: Dict[str, Any],
    cycle: int = 0,
    now: Optional[datetime] = None,
) -> WorldEvent:
    """Build a WorldEvent from a loosely-shaped persisted record."""
    description = _first(record, "description", "Description", "subtype", "text") or ""
    domain = normalize_domain(_first(record, "domain", "Domain"))
    return WorldEvent(
        cycle=_first(record, "cycle", "Cycle") or cycle,
        domain=domain,
        subdomain=_first(record, "subdomain", "subtype") or "",
        description=description,
        neighborhood=_first(record, "neighborhood", "Neighborhood"),
        severity=(_first(record, "severity", "Severity") or "low"),
        source=_first(record, "source", "Source") or "EXTERNAL",
        timestamp=_first(record, "timestamp", "Timestamp") or now or datetime.utcnow(),
        holiday_context=_first(record, "holidayContext", "holiday_context"),
        sports_context=_first(record, "sportsPhase", "sports_context"),
        first_friday=bool(_first(record, "firstFriday", "first_friday")),
    )


def arc_from_record(record: Dict[str, Any]) -> Arc:
    """Build an Arc from a persisted record using either key style."""
    summary = _first(record, "summary", "Summary") or ""
    domain = resolve_domain(
        _first(record, "domainTag", "domain", "Domain"), summary
    )
    return Arc(
        arc_id=_first(record, "arcId", "arc_id", "ArcId"),
        type=_first(record, "type", "Type") or "crisis",
        phase=(_first(record, "phase", "Phase") or "early").lower(),
        tension=_first(record, "tension", "Tension") or 2,
        age=_first(record, "age", "Age") or 0,
        neighborhood=_first(record, "neighborhood", "Neighborhood"),
        domain=domain,
        summary=summary,
        subtype=_first(record, "subtype") or "",
        cycle_created=_first(record, "cycleCreated", "cycle_created") or 0,
        cycle_resolved=_first(record, "cycleResolved", "cycle_resolved"),
        resolution_conditions=_first(record, "resolution_conditions"),
        source=_first(record, "source", "Source") or "BUCKET",
        holiday_context=_first(record, "holidayContext", "holiday_context"),
        season_context=_first(record, "seasonContext", "season_context"),
    )


def seed_from_record(record: Dict[str, Any]) -> StorySeed:
    return StorySeed(
        domain=_first(record, "domain", "Domain"),
        text=_first(record, "text", "description", "seedText") or "",
    )
