"""
Value types passed between the route weather stages.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    @property
    def tuple_latlon(self) -> Tuple[float, float]:
        return (self.lat, self.lon)


Polyline = List[Coordinate]


@dataclass(frozen=True)
class RoutePoint:
    coordinate: Coordinate
    distance_m: float  # cumulative, from route start


@dataclass(frozen=True)
class Route:
    polyline: Polyline
    distance_m: float
    duration_s: float = 0.0


@dataclass(frozen=True)
class WeatherReading:
    condition_name: str
    description: str
    temperature_f: float
    simulated: bool = False


@dataclass(frozen=True)
class WeatherPoint:
    coordinate: Coordinate
    label: str
    condition_summary: str
    is_hazard: bool
    hazard_message: Optional[str] = None
    distance_m: float = 0.0
    is_error: bool = False


@dataclass
class RouteWeatherResult:
    start_query: str
    end_query: str
    route: Optional[Route] = None
    weather_points: List[WeatherPoint] = field(default_factory=list)
    error: Optional[str] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled

    @property
    def hazard_count(self) -> int:
        return sum(1 for p in self.weather_points if p.is_hazard)
