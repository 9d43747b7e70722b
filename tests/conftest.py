import math

import pytest

from errors import NotFound
from geo import EARTH_RADIUS_M
from models import Coordinate, Route, WeatherReading

METERS_PER_DEGREE_AT_EQUATOR = EARTH_RADIUS_M * math.pi / 180.0


def equator_line(length_m, vertices=2):
    """Straight polyline along the equator, `length_m` long, evenly split into segments."""
    end_lon = length_m / METERS_PER_DEGREE_AT_EQUATOR
    return [Coordinate(0.0, end_lon * i / (vertices - 1)) for i in range(vertices)]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload

    def raise_for_status(self):
        import requests
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeGeocoder:
    def __init__(self, places):
        self.places = places
        self.calls = []

    def geocode(self, text):
        self.calls.append(text)
        if text not in self.places:
            raise NotFound(f"Could not find location: {text}")
        return self.places[text]


class FakeRouter:
    def __init__(self, route=None, error=None):
        self.route_value = route
        self.error = error
        self.calls = []

    def route(self, start, end):
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return self.route_value


class FakeFetcher:
    """Returns `reading` for every point unless `failures` maps a call index to an exception."""

    def __init__(self, reading=None, failures=None):
        self.reading = reading or WeatherReading("Clear", "clear sky", 72.4)
        self.failures = failures or {}
        self.calls = []

    def fetch_current(self, coord):
        index = len(self.calls)
        self.calls.append(coord)
        if index in self.failures:
            raise self.failures[index]
        return self.reading


@pytest.fixture
def places():
    return {"A": Coordinate(0.0, 0.0), "B": equator_line(100000)[-1]}


@pytest.fixture
def straight_route():
    return Route(polyline=equator_line(100000, vertices=5), distance_m=100000.0, duration_s=3600.0)
