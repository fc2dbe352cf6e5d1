"""
Ambient category registry.

Each category carries a Domain tag, a weight derived from the cycle's
seasonal weights, and its item list. Calendar pools (holidays, First
Friday, Creation Day, sports phase) are appended after the base set.
"""

from typing import List

from pydantic import BaseModel

from cityworld_kernel.models.domain import Domain
from cityworld_kernel.models.world import WorldState


class TextureCategory(BaseModel):
    name: str
    domain: Domain
    weight: float
    items: List[str]

    @property
    def is_health(self) -> bool:
        return self.domain == Domain.HEALTH


FESTIVAL_EVENTS = ["parade float breakdown", "crowd surge at barricade", "vendor cart tip-over", "lost child report", "costume malfunction", "balloon escape"]
FIREWORKS_EVENTS = ["fireworks debris complaint", "illegal firework confiscation", "sparkler burn incident", "noise complaint surge"]
PARTY_EVENTS = ["noise complaint wave", "street party overflow", "intoxication incident", "rideshare surge chaos"]

NEW_YEARS_EVE_EVENTS = ["countdown crowd surge", "champagne bottle incident", "midnight noise complaint", "fireworks injury", "party overflow into street"]
INDEPENDENCE_EVENTS = ["illegal firework seizure", "BBQ grill flare-up", "sparkler burn report", "flag pole incident", "patriotic parade delay"]
HALLOWEEN_EVENTS = ["costume altercation", "haunted house panic", "trick-or-treat traffic jam", "pumpkin vandalism", "fake blood slip hazard"]
THANKSGIVING_EVENTS = ["turkey fryer fire", "family dispute call", "grocery store rush incident", "parade balloon snag"]
HOLIDAY_EVENTS = ["shopping rush injury", "package theft spike", "decoration electrical issue", "tree lighting delay"]

LUNAR_NEW_YEAR_EVENTS = ["lion dance traffic stop", "firecracker complaint", "parade dragon tangle", "red envelope dispute"]
CINCO_EVENTS = ["mariachi noise complaint", "street fair overcrowding", "festival food cart fire", "piñata debris cleanup"]
DIA_DE_MUERTOS_EVENTS = ["altar candle fire concern", "marigold supply shortage", "cemetery traffic jam", "face paint allergy report"]
JUNETEENTH_EVENTS = ["parade route adjustment", "festival sound check complaint", "vendor permit dispute", "block party overflow"]
PRIDE_EVENTS = ["parade float breakdown", "rainbow crosswalk photo crowd", "costume heat exhaustion", "glitter cleanup complaint", "celebration crowd surge"]
ART_SOUL_EVENTS = ["stage sound issue", "vendor tent collapse", "art installation damage", "crowd capacity concern", "food vendor line dispute"]
ST_PATRICKS_EVENTS = ["pub crawl overflow", "green beer spill hazard", "parade shamrock float issue", "bar capacity complaint"]
EASTER_EVENTS = ["egg hunt overcrowding", "Easter parade delay", "bunny costume heat issue"]
EARTH_DAY_EVENTS = ["cleanup crew traffic issue", "environmental protest", "tree planting ceremony delay"]
MLK_EVENTS = ["march route adjustment", "memorial service overflow", "unity rally traffic"]
MEMORIAL_VETERANS_EVENTS = ["ceremony cannon complaint", "memorial parade delay", "veteran tribute traffic"]

FIRST_FRIDAY_EVENTS = ["gallery overcrowding", "street performer permit issue", "art installation mishap", "wine spill on artwork", "parking garage backup", "food truck line dispute"]
CREATION_DAY_EVENTS = ["founders ceremony delay", "heritage walk overcrowding", "history exhibit mishap", "community speech feedback issue"]

SPORTS_BASE_EVENTS = ["game day traffic surge", "tailgate grill fire", "parking lot fender-bender", "fan celebration spillover"]
PLAYOFF_EVENTS = ["playoff watch party overflow", "fan altercation", "scalping bust", "sports bar capacity issue", "honking celebration complaint"]
CHAMPIONSHIP_EVENTS = ["championship crowd surge", "victory celebration damage", "championship parade prep", "trophy viewing line chaos", "citywide honking complaint"]
OPENING_DAY_EVENTS = ["Opening Day parade delay", "first pitch ceremony traffic", "sold-out parking chaos", "tailgate zone overflow"]

NIGHTLIFE_EVENTS = ["bar tab dispute", "late-night noise complaint", "club line spillover", "rooftop party shutdown"]


def base_categories(state: WorldState) -> List[TextureCategory]:
    """The 18 always-present categories."""
    w = state.seasonal_weights
    impact = state.weather.impact

    def cat(name: str, domain: Domain, weight: float, items: List[str]) -> TextureCategory:
        return TextureCategory(name=name, domain=domain, weight=weight, items=items)

    return [
        cat("business", Domain.BUSINESS, w.event, ["kitchen fire (minor)", "food poisoning complaint", "staff walkout", "customer dispute"]),
        cat("disturbance", Domain.SAFETY, w.civic, ["noise complaint", "street disturbance", "suspicious activity check", "minor pursuit"]),
        cat("health", Domain.HEALTH, w.event * 0.6, ["unusual ER case", "cluster of fainting spells", "unexplained symptom pattern"]),
        cat("weather", Domain.WEATHER, w.weather * impact, ["sudden downpour", "high-wind pocket", "fog surge", "rapid temperature drop"]),
        cat("celebrity", Domain.CULTURE, w.event * w.cultural, ["actor spotted downtown", "musician near Coliseum", "influencer filming", "athlete sighting"]),
        cat("school", Domain.EDUCATION, w.school, ["test score spike", "school-board dispute", "field trip mishap", "teacher highlight"]),
        cat("sports", Domain.SPORTS, w.sports, ["A's practice disruption", "player rumor", "street celebration", "lineup leak"]),
        cat("civic-process", Domain.CIVIC, w.civic, ["zoning adjustment", "road closure decision", "budget amendment", "committee vote"]),
        cat("protest", Domain.CIVIC, w.civic, ["small protest", "petition rally", "neighborhood grievance", "online call-to-gather"]),
        cat("power", Domain.INFRASTRUCTURE, w.event, ["3-block flicker", "transformer hiccup", "5-minute blackout"]),
        cat("traffic", Domain.TRANSIT, w.event, ["signal malfunction", "jackknifed truck", "stalled bus"]),
        cat("meetings", Domain.CIVIC, w.civic, ["emergency committee meeting", "association briefing", "public-comment session"]),
        cat("records", Domain.CIVIC, w.event, ["email leak", "misfiled document", "missing funds", "staff rumor"]),
        cat("mishaps", Domain.GENERAL, w.event, ["forklift near-tip", "minor fender-bender", "lost dog returned", "locked-out worker"]),
        cat("petty-crime", Domain.CRIME, w.event, ["porch piracy attempt", "petty theft", "graffiti tagging", "car break-in attempt"]),
        cat("utilities", Domain.INFRASTRUCTURE, w.event, ["water-pressure drop", "pothole eruption", "internet disruption"]),
        cat("nightlife", Domain.NIGHTLIFE, w.nightlife, NIGHTLIFE_EVENTS),
        cat("oddities", Domain.GENERAL, w.event, ["flash choir", "balloon release", "earthquake rumble", "influencer prank", "drone mistake"]),
    ]


# holiday -> [(pool name, domain, multiplier on the holiday weight, items)]
HOLIDAY_POOLS = {
    "NewYearsEve": [
        ("new-years-eve", Domain.HOLIDAY, 2, NEW_YEARS_EVE_EVENTS),
        ("fireworks", Domain.HOLIDAY, 1, FIREWORKS_EVENTS),
        ("party", Domain.NIGHTLIFE, 1, PARTY_EVENTS),
    ],
    "Independence": [
        ("independence", Domain.HOLIDAY, 2, INDEPENDENCE_EVENTS),
        ("fireworks", Domain.HOLIDAY, 1, FIREWORKS_EVENTS),
    ],
    "Halloween": [
        ("halloween", Domain.HOLIDAY, 2, HALLOWEEN_EVENTS),
        ("party", Domain.NIGHTLIFE, 1, PARTY_EVENTS),
    ],
    "Thanksgiving": [("thanksgiving", Domain.HOLIDAY, 1, THANKSGIVING_EVENTS)],
    "Holiday": [("winter-holiday", Domain.HOLIDAY, 1, HOLIDAY_EVENTS)],
    "LunarNewYear": [
        ("lunar-new-year", Domain.HOLIDAY, 1.5, LUNAR_NEW_YEAR_EVENTS),
        ("festival", Domain.FESTIVAL, 1, FESTIVAL_EVENTS),
    ],
    "CincoDeMayo": [
        ("cinco-de-mayo", Domain.HOLIDAY, 1.5, CINCO_EVENTS),
        ("festival", Domain.FESTIVAL, 1, FESTIVAL_EVENTS),
    ],
    "DiaDeMuertos": [("dia-de-muertos", Domain.HOLIDAY, 1.5, DIA_DE_MUERTOS_EVENTS)],
    "Juneteenth": [
        ("juneteenth", Domain.FESTIVAL, 1.5, JUNETEENTH_EVENTS),
        ("festival", Domain.FESTIVAL, 1, FESTIVAL_EVENTS),
    ],
    "StPatricksDay": [
        ("st-patricks", Domain.HOLIDAY, 1.5, ST_PATRICKS_EVENTS),
        ("party", Domain.NIGHTLIFE, 1, PARTY_EVENTS),
    ],
    "Easter": [("easter", Domain.HOLIDAY, 1, EASTER_EVENTS)],
    "EarthDay": [("earth-day", Domain.ENVIRONMENT, 1, EARTH_DAY_EVENTS)],
    "MLKDay": [("mlk-day", Domain.CIVIC, 1, MLK_EVENTS)],
    "MemorialDay": [("memorial", Domain.CIVIC, 1, MEMORIAL_VETERANS_EVENTS)],
    "VeteransDay": [("memorial", Domain.CIVIC, 1, MEMORIAL_VETERANS_EVENTS)],
    "OaklandPride": [
        ("pride", Domain.FESTIVAL, 2, PRIDE_EVENTS),
        ("festival", Domain.FESTIVAL, 1, FESTIVAL_EVENTS),
    ],
    "ArtSoulFestival": [
        ("art-soul", Domain.ARTS, 2, ART_SOUL_EVENTS),
        ("festival", Domain.FESTIVAL, 1, FESTIVAL_EVENTS),
    ],
    "OpeningDay": [
        ("opening-day", Domain.SPORTS, 2, OPENING_DAY_EVENTS),
        ("game-day", Domain.SPORTS, 1, SPORTS_BASE_EVENTS),
    ],
}

SPORTS_POOLS = {
    "championship": [
        ("championship", Domain.SPORTS, 2, CHAMPIONSHIP_EVENTS),
        ("playoffs", Domain.SPORTS, 1, PLAYOFF_EVENTS),
    ],
    "playoffs": [
        ("playoffs", Domain.SPORTS, 1.5, PLAYOFF_EVENTS),
        ("game-day", Domain.SPORTS, 1, SPORTS_BASE_EVENTS),
    ],
    "post-season": [
        ("playoffs", Domain.SPORTS, 1.5, PLAYOFF_EVENTS),
        ("game-day", Domain.SPORTS, 1, SPORTS_BASE_EVENTS),
    ],
    "late-season": [("game-day", Domain.SPORTS, 1, SPORTS_BASE_EVENTS)],
}


def calendar_categories(state: WorldState) -> List[TextureCategory]:
    """Holiday, First Friday, Creation Day and sports-phase pools for this cycle."""
    holiday_weight = state.seasonal_weights.event * 1.5
    entries = list(HOLIDAY_POOLS.get(state.calendar.holiday, []))

    if state.calendar.is_first_friday:
        entries.append(("first-friday", Domain.ARTS, 1.5, FIRST_FRIDAY_EVENTS))
    if state.calendar.is_creation_day:
        entries.append(("creation-day", Domain.CIVIC, 1, CREATION_DAY_EVENTS))
        entries.append(("festival", Domain.FESTIVAL, 0.5, FESTIVAL_EVENTS))

    entries.extend(SPORTS_POOLS.get(state.sports_phase, []))

    return [
        TextureCategory(
            name=name, domain=domain, weight=holiday_weight * mult, items=list(items)
        )
        for name, domain, mult, items in entries
    ]


def build_registry(state: WorldState) -> List[TextureCategory]:
    return base_categories(state) + calendar_categories(state)
