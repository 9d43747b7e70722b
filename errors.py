from typing import Optional


class RouteWeatherError(Exception):
    kind = "error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidInput(RouteWeatherError):
    kind = "invalid_input"


class NotFound(RouteWeatherError):
    kind = "not_found"


class NoRoute(RouteWeatherError):
    kind = "no_route"


class RequestTimeout(RouteWeatherError):
    kind = "timeout"


class NetworkError(RouteWeatherError):
    kind = "network"


class RequestCancelled(RouteWeatherError):
    kind = "cancelled"


# Weather-stage failures degrade a single point instead of aborting.
class WeatherError(RouteWeatherError):
    kind = "weather"


class Unauthorized(WeatherError):
    kind = "unauthorized"


class RateLimited(WeatherError):
    kind = "rate_limited"


class ServerError(WeatherError):
    kind = "server_error"


class DecodeError(WeatherError):
    kind = "decode"


class WeatherTimeout(WeatherError, RequestTimeout):
    kind = "timeout"


class WeatherNetworkError(WeatherError, NetworkError):
    kind = "network"
