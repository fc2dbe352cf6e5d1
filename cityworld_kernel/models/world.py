"""World State — the read-only snapshot handed to the kernel each cycle."""

from typing import List, Optional

from pydantic import BaseModel, Field


NEIGHBORHOODS = (
    "Temescal", "Downtown", "Fruitvale", "Lake Merritt",
    "West Oakland", "Laurel", "Rockridge", "Jack London",
    "Uptown", "KONO", "Chinatown", "Piedmont Ave",
)

SHOCK_STATES = ("shock-flag", "shock-fading", "shock-chronic")


class PopulationMetrics(BaseModel):
    illness_rate: float = Field(ge=0, le=1, default=0.05)
    employment_rate: float = Field(ge=0, le=1, default=0.91)
    migration: int = 0                      # Net movers this cycle
    economy: str = "stable"                 # "strong" | "stable" | "weak" | "struggling"


class Weather(BaseModel):
    type: str = "clear"                     # e.g., "fog", "rain", "hot"
    impact: float = 1.0                     # 1.0 = neutral


class WeatherMood(BaseModel):
    comfort_index: Optional[float] = None
    conflict_potential: float = 0.0
    perfect_weather: bool = False


class CityDynamics(BaseModel):
    sentiment: float = Field(ge=-1, le=1, default=0.0)
    traffic: float = 1.0
    nightlife: float = 1.0
    public_spaces: float = 1.0
    cultural_activity: float = 1.0
    community_engagement: float = 1.0
    civic_load: str = "stable"              # "stable" | "load-strain" | ...


class CalendarContext(BaseModel):
    season: Optional[str] = None            # "Winter" | "Spring" | "Summer" | "Fall"
    holiday: str = "none"
    holiday_priority: str = "none"          # "major" | "cultural" | "oakland" | "minor" | "none"
    holiday_neighborhood: Optional[str] = None
    is_first_friday: bool = False
    is_creation_day: bool = False
    creation_day_anniversary: Optional[int] = None
    cycle_of_year: int = 1
    month: int = Field(ge=1, le=12, default=1)

    @property
    def has_holiday(self) -> bool:
        return self.holiday != "none"


class SportsContext(BaseModel):
    """Sports state is always supplied from outside, possibly human-overridden."""

    season: str = "off-season"              # e.g., "mid-season", "late-season", "post-season"
    source: str = ""                        # "simmonth-calculated" | "config-override"

    @property
    def is_override(self) -> bool:
        return self.source == "config-override"


class SeasonalWeights(BaseModel):
    """Externally computed base weights for ambient category pools."""

    weather: float = 1.0
    civic: float = 1.0
    event: float = 1.0
    nightlife: float = 1.0
    school: float = 1.0
    sports: float = 1.0
    cultural: float = 1.0
    community: float = 1.0


class DemographicShift(BaseModel):
    neighborhood: str
    type: str                               # e.g., "population_shift", "sick_shift"
    direction: str                          # "growth" | "decline" | "up" | "down"
    percentage: float = 0.0


class WorldState(BaseModel):
    """Everything the kernel reads for one cycle. Missing fields take neutral defaults."""

    cycle: int = Field(ge=0, default=0)
    rng_seed: Optional[int] = None

    population: PopulationMetrics = PopulationMetrics()
    weather: Weather = Weather()
    weather_mood: WeatherMood = WeatherMood()
    weather_events: List[str] = []          # "first_snow", "first_warm_day", "heat_wave_declared"
    dynamics: CityDynamics = CityDynamics()
    calendar: CalendarContext = CalendarContext()
    sports: SportsContext = SportsContext()
    seasonal_weights: SeasonalWeights = SeasonalWeights()

    economic_mood: float = Field(ge=0, le=100, default=50)
    shock_flag: str = "none"
    pattern_flag: str = "none"
    migration_drift: float = 0.0
    event_suppression: float = Field(ge=0, le=1, default=1.0)
    recovery_level: str = "none"            # "none" | "light" | "moderate" | "heavy"
    prior_event_count: int = Field(ge=0, default=0)
    nightlife_volume: float = 0.0

    demographic_shifts: List[DemographicShift] = []
    neighborhood_demographics_known: bool = False

    @property
    def shock_active(self) -> bool:
        return self.shock_flag == "shock-flag"

    @property
    def shock_fading(self) -> bool:
        return self.shock_flag == "shock-fading"

    @property
    def in_any_shock(self) -> bool:
        return self.shock_flag in SHOCK_STATES

    @property
    def sports_phase(self) -> str:
        return self.sports.season or "off-season"
