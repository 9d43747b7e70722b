"""
Configuration for route weather lookups.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# --------- credentials ---------
OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY", "")
# keys that mean "not configured yet"
PLACEHOLDER_API_KEYS = {"", "Your_API_Key", "YOUR_API_KEY_HERE"}

# --------- endpoints ---------
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
OSRM_URL = os.getenv("OSRM_URL", "https://router.project-osrm.org")
OPENWEATHER_URL = "https://api.openweathermap.org/data/3.0/onecall"

USER_AGENT = os.getenv("ROUTE_WEATHER_USER_AGENT", "route-weather/1.0 (contact: set ROUTE_WEATHER_USER_AGENT)")

# --------- request behaviour ---------
REQUEST_TIMEOUT_SECONDS = 15
NOMINATIM_PAUSE_SECONDS = 1.0  # nominatim usage policy: max 1 req/s
MAX_WORKERS = 4  # weather fetches in flight; 1 = sequential
MAX_TRACKED_CLIENTS = 256  # per-client request runners kept by the web app

# --------- sampling ---------
SAMPLING_INTERVAL_M = 48000  # ~30 miles

# --------- units ---------
M_TO_MILES = 0.000621371

# --------- web ---------
FLASK_SECRET_KEY = os.getenv("FLASK_SECRET_KEY") or os.urandom(24).hex()
