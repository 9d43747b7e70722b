from typing import Optional, Tuple

# OpenWeather "main" condition names that always warrant a warning
HAZARD_CONDITIONS = {"Thunderstorm", "Snow", "Squall", "Tornado"}
HAZARD_PHRASES = ("heavy rain", "extreme")


def classify_hazard(condition: str, description: str) -> Tuple[bool, Optional[str]]:
    """Return (is_hazard, message) for a provider condition name and description."""
    text = (description or "").lower()
    is_hazard = condition in HAZARD_CONDITIONS or any(p in text for p in HAZARD_PHRASES)
    if not is_hazard:
        return False, None
    return True, f"hazard: {condition}"
