import math
from typing import List, Sequence

from config import SAMPLING_INTERVAL_M
from errors import InvalidInput
from models import Coordinate, RoutePoint

EARTH_RADIUS_M = 6371000.0


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    p1, p2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlmb = math.radians(b.lon - a.lon)
    x = math.sin(dphi / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(x))


def polyline_length_m(polyline: Sequence[Coordinate]) -> float:
    return sum(haversine_m(polyline[i - 1], polyline[i]) for i in range(1, len(polyline)))


def sample_route_points(polyline: Sequence[Coordinate], interval_m: float = SAMPLING_INTERVAL_M) -> List[RoutePoint]:
    """
    Walk the polyline and emit a point every `interval_m` metres.

    The first vertex is always first and the last vertex always last, so the
    final gap can be shorter than the interval. Interior points are placed by
    linear interpolation of lat/lon inside the segment that reaches the target
    distance; that is a flat approximation, fine for the short segments a
    router returns.
    """
    if len(polyline) < 2:
        raise InvalidInput(f"Route polyline needs at least 2 points, got {len(polyline)}")
    if interval_m <= 0:
        raise InvalidInput(f"Sampling interval must be positive, got {interval_m}")

    total_m = polyline_length_m(polyline)
    points = [RoutePoint(polyline[0], 0.0)]

    dist_accum = 0.0
    target = interval_m

    for i in range(1, len(polyline)):
        if target >= total_m:
            break
        a, b = polyline[i - 1], polyline[i]
        seg_m = haversine_m(a, b)
        if seg_m <= 0:
            continue

        while target < total_m and target <= dist_accum + seg_m:
            frac = (target - dist_accum) / seg_m
            lat = a.lat + (b.lat - a.lat) * frac
            lon = a.lon + (b.lon - a.lon) * frac
            points.append(RoutePoint(Coordinate(lat, lon), target))
            target += interval_m

        dist_accum += seg_m

    points.append(RoutePoint(polyline[-1], total_m))
    return points
