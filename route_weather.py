import logging
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from functools import lru_cache
from typing import List, Optional
from zoneinfo import ZoneInfo

import pandas as pd
from timezonefinder import TimezoneFinder

from config import M_TO_MILES, MAX_TRACKED_CLIENTS, MAX_WORKERS, OPENWEATHER_API_KEY, SAMPLING_INTERVAL_M
from errors import (
    DecodeError, InvalidInput, RateLimited, RequestCancelled, RequestTimeout, RouteWeatherError,
    ServerError, Unauthorized, WeatherError,
)
from geo import polyline_length_m, sample_route_points
from geocoding import Geocoder, NominatimGeocoder
from hazards import classify_hazard
from models import RoutePoint, RouteWeatherResult, WeatherPoint
from routing import OsrmRouter, Router
from weather import OpenWeatherFetcher, WeatherFetcher

logger = logging.getLogger(__name__)


# --------- per-point weather ---------
def weather_point_for(fetcher: WeatherFetcher, point: RoutePoint, index: int) -> WeatherPoint:
    """Fetch and classify one sample. Weather failures become an error marker, never an exception."""
    label = f"Point {index + 1}"
    logger.info("Fetching weather for %s at %s", label, point.coordinate.tuple_latlon)
    try:
        reading = fetcher.fetch_current(point.coordinate)
    except WeatherError as e:
        logger.warning("Weather fetch failed for %s: %s", label, e)
        return _degraded_point(point, label, e)

    is_hazard, message = classify_hazard(reading.condition_name, reading.description)
    if message and reading.simulated:
        message = f"Simulated: {message}"

    return WeatherPoint(
        coordinate=point.coordinate,
        label=label,
        condition_summary=f"{reading.condition_name} • {int(reading.temperature_f)}°F",
        is_hazard=is_hazard,
        hazard_message=message,
        distance_m=point.distance_m,
    )


def _degraded_point(point: RoutePoint, label: str, err: WeatherError) -> WeatherPoint:
    if isinstance(err, Unauthorized):
        summary, message = "API Key Invalid", "Check your OpenWeather API key"
    elif isinstance(err, (RateLimited, ServerError)):
        summary, message = f"API Error {err.status_code}", "Failed to fetch weather"
    elif isinstance(err, RequestTimeout):
        summary, message = "Error fetching weather", f"Timed out: {err}"
    elif isinstance(err, DecodeError):
        summary, message = "Error fetching weather", f"Bad weather payload: {err}"
    else:
        summary, message = "Error fetching weather", f"Network error: {err}"

    return WeatherPoint(
        coordinate=point.coordinate,
        label=label,
        condition_summary=summary,
        is_hazard=True,
        hazard_message=message,
        distance_m=point.distance_m,
        is_error=True,
    )


def _check_cancelled(cancel_event: Optional[threading.Event]):
    if cancel_event is not None and cancel_event.is_set():
        raise RequestCancelled("Request superseded")


# --------- main program ---------
def build_route_weather(
    start_query: str,
    end_query: str,
    geocoder: Optional[Geocoder] = None,
    router: Optional[Router] = None,
    fetcher: Optional[WeatherFetcher] = None,
    interval_m: float = SAMPLING_INTERVAL_M,
    max_workers: int = MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> RouteWeatherResult:
    """
    Geocode both ends, route between them, sample the route and attach
    weather to every sample.

    Geocoding and routing failures abort the whole request and come back as
    `result.error`. Weather failures only mark the affected point.
    """
    geocoder = geocoder or NominatimGeocoder()
    router = router or OsrmRouter()
    fetcher = fetcher or OpenWeatherFetcher(api_key=OPENWEATHER_API_KEY)

    start_query = (start_query or "").strip()
    end_query = (end_query or "").strip()
    result = RouteWeatherResult(start_query=start_query, end_query=end_query)

    try:
        if not start_query or not end_query:
            raise InvalidInput("Please enter both locations")

        _check_cancelled(cancel_event)
        start = geocoder.geocode(start_query)
        _check_cancelled(cancel_event)
        end = geocoder.geocode(end_query)

        _check_cancelled(cancel_event)
        route = router.route(start, end)
        samples = sample_route_points(route.polyline, interval_m)
        logger.info("Route %.1f km, %d weather points", route.distance_m / 1000.0, len(samples))

        def fetch(indexed):
            index, point = indexed
            _check_cancelled(cancel_event)
            return weather_point_for(fetcher, point, index)

        if max_workers <= 1:
            points = [fetch(item) for item in enumerate(samples)]
        else:
            # map() yields in submission order, whatever order the fetches finish in
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                points = list(pool.map(fetch, enumerate(samples)))

        _check_cancelled(cancel_event)
    except RequestCancelled:
        logger.info("Request %r -> %r cancelled", start_query, end_query)
        result.cancelled = True
        return result
    except RouteWeatherError as e:
        logger.warning("Request %r -> %r failed: %s", start_query, end_query, e)
        result.error = e.message
        return result

    result.route = route
    result.weather_points = points
    return result


class LatestRequestRunner:
    """Runs lookups so that starting a new one cancels whichever one is still in flight."""

    def __init__(self, **build_kwargs):
        self.build_kwargs = build_kwargs
        self._lock = threading.Lock()
        self._current: Optional[threading.Event] = None

    def run(self, start_query: str, end_query: str) -> RouteWeatherResult:
        event = threading.Event()
        with self._lock:
            if self._current is not None:
                self._current.set()
            self._current = event
        try:
            return build_route_weather(start_query, end_query, cancel_event=event, **self.build_kwargs)
        finally:
            with self._lock:
                if self._current is event:
                    self._current = None

    def cancel(self):
        with self._lock:
            if self._current is not None:
                self._current.set()


class ClientRunners:
    """One LatestRequestRunner per client, so a lookup only supersedes that client's own earlier one."""

    def __init__(self, max_clients: int = MAX_TRACKED_CLIENTS, **build_kwargs):
        self.max_clients = max_clients
        self.build_kwargs = build_kwargs
        self._lock = threading.Lock()
        self._runners: "OrderedDict[str, LatestRequestRunner]" = OrderedDict()

    def runner_for(self, client_id: str) -> LatestRequestRunner:
        with self._lock:
            runner = self._runners.get(client_id)
            if runner is None:
                runner = LatestRequestRunner(**self.build_kwargs)
                self._runners[client_id] = runner
            self._runners.move_to_end(client_id)
            # drop the least recently seen clients
            while len(self._runners) > self.max_clients:
                self._runners.popitem(last=False)
            return runner

    def run(self, client_id: str, start_query: str, end_query: str) -> RouteWeatherResult:
        return self.runner_for(client_id).run(start_query, end_query)


# --------- presentation helpers ---------
@lru_cache(maxsize=1)
def _timezone_finder() -> TimezoneFinder:
    return TimezoneFinder()


@lru_cache(maxsize=512)
def _tzname_for_point(lat: float, lon: float) -> str:
    return _timezone_finder().timezone_at(lat=lat, lng=lon) or "UTC"


def parse_departure(depart_local_str: str, lat: float, lon: float) -> datetime:
    # Accept both "YYYY-MM-DD HH:MM" and "YYYY-MM-DDTHH:MM", local to the start point
    naive = datetime.strptime(depart_local_str.strip().replace("T", " "), "%Y-%m-%d %H:%M")
    return naive.replace(tzinfo=ZoneInfo(_tzname_for_point(round(lat, 1), round(lon, 1))))


def weather_table(result: RouteWeatherResult, depart_local_str: Optional[str] = None) -> pd.DataFrame:
    rows: List[dict] = []
    depart = None
    seconds_per_m = 0.0
    if depart_local_str and result.weather_points and result.route:
        first = result.weather_points[0].coordinate
        depart = parse_departure(depart_local_str, first.lat, first.lon)
        # sample distances are measured along the polyline, so scale the router duration by that length
        length_m = polyline_length_m(result.route.polyline)
        if length_m > 0:
            seconds_per_m = result.route.duration_s / length_m

    for p in result.weather_points:
        row = {
            "Point": p.label,
            "Approx Route Miles": round(p.distance_m * M_TO_MILES, 1),
            "Weather": p.condition_summary,
            "Hazard": p.hazard_message or "",
            "Lat": round(p.coordinate.lat, 4),
            "Lon": round(p.coordinate.lon, 4),
        }
        if depart is not None:
            # ETA from average route speed; shown in the point's own time zone
            eta = depart + timedelta(seconds=p.distance_m * seconds_per_m)
            tz = ZoneInfo(_tzname_for_point(round(p.coordinate.lat, 1), round(p.coordinate.lon, 1)))
            row["ETA (local time)"] = eta.astimezone(tz).strftime("%Y-%m-%d %I:%M %p")
        rows.append(row)

    columns = ["Point", "Approx Route Miles", "Weather", "Hazard", "Lat", "Lon"]
    if depart is not None:
        columns.insert(2, "ETA (local time)")
    return pd.DataFrame(rows, columns=columns)


def route_summary(result: RouteWeatherResult) -> dict:
    meta = {"Start": result.start_query, "Destination": result.end_query}
    if result.route is not None:
        duration_s = result.route.duration_s
        meta["Route Distance (miles)"] = round(result.route.distance_m * M_TO_MILES, 1)
        meta["Route Duration (hr)"] = f"{int(duration_s // 3600)}:{int((duration_s % 3600) // 60):02d}"
    meta["Weather Points"] = len(result.weather_points)
    meta["Hazards"] = result.hazard_count
    return meta
