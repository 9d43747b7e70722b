"""
Driving routes from OSRM.
"""
import logging
from typing import Protocol

import requests

from config import OSRM_URL, REQUEST_TIMEOUT_SECONDS
from errors import NetworkError, NoRoute, RequestTimeout
from models import Coordinate, Route

logger = logging.getLogger(__name__)


class Router(Protocol):
    def route(self, start: Coordinate, end: Coordinate) -> Route:
        ...


class OsrmRouter:
    def __init__(self, base_url: str = OSRM_URL, profile: str = "driving",
                 timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout

    def route(self, start: Coordinate, end: Coordinate) -> Route:
        url = f"{self.base_url}/route/v1/{self.profile}/{start.lon},{start.lat};{end.lon},{end.lat}"
        params = {"overview": "full", "geometries": "geojson"}

        logger.info("Routing %s -> %s", start.tuple_latlon, end.tuple_latlon)
        try:
            r = requests.get(url, params=params, timeout=self.timeout)
            data = r.json()
        except requests.Timeout as e:
            raise RequestTimeout("Routing request timed out") from e
        except requests.RequestException as e:
            raise NetworkError(f"Routing request failed: {e}") from e
        except ValueError as e:
            # gateway errors and the like come back as HTML, not an OSRM answer
            raise NetworkError(f"Routing service returned a non-JSON body (HTTP {r.status_code})") from e

        return parse_route(data, r.status_code)


def parse_route(data, status_code: int = 200) -> Route:
    try:
        # OSRM answers 400 with code=NoRoute/NoSegment as JSON, so check the body first
        if data.get("code") != "Ok" or not data.get("routes"):
            raise NoRoute(f"No route found ({data.get('code', status_code)})")

        route = data["routes"][0]
        coords = route["geometry"]["coordinates"]  # list of [lon, lat]
        polyline = [Coordinate(float(lat), float(lon)) for lon, lat in coords]
        distance_m = float(route["distance"])
        duration_s = float(route.get("duration", 0.0))
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise NoRoute(f"No route found (unexpected OSRM payload: {e!r})") from e

    if len(polyline) < 2:
        raise NoRoute("No route found (empty geometry)")

    return Route(polyline=polyline, distance_m=distance_m, duration_s=duration_s)
