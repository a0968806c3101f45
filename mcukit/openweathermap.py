"""Weather observations from an OpenWeatherMap style JSON service."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Optional

from .weather_data import WeatherData, WeatherProvider

# The service answers with roughly 470 bytes; anything beyond this is refused.
MAX_RESPONSE_SIZE = 750
_TIMEOUT = 10.0


def _number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _take(obj: dict, key: str, convert):
    value = _number(obj.get(key))
    return None if value is None else convert(value)


def weather_process_json(text: str) -> WeatherData:
    """Extract the observation from a JSON reply.

    Only ``main``, ``wind`` and ``clouds`` are read; other members are
    ignored and missing values keep their defaults.  Raises ValueError if
    TEXT is not a JSON object.
    """
    try:
        root = json.loads(text)
    except ValueError as exc:
        raise ValueError(f"invalid weather JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise ValueError("weather JSON root is not an object")

    wd = WeatherData()
    fields = {
        "main": (("humidity", "humidity", int), ("temp", "temp", float), ("pressure", "pressure", int)),
        "wind": (("speed", "wind_speed", float), ("deg", "wind_deg", int)),
        "clouds": (("all", "clouds", int),),
    }
    for section, entries in fields.items():
        obj = root.get(section)
        if not isinstance(obj, dict):
            continue
        for json_key, attr, convert in entries:
            value = _take(obj, json_key, convert)
            if value is not None:
                setattr(wd, attr, value)
    return wd


def fetch_owm_data(url: Optional[str]) -> Optional[WeatherData]:
    """Fetch and parse the observation at URL; None on any failure."""
    if not url:
        return None
    try:
        with urllib.request.urlopen(url, timeout=_TIMEOUT) as response:
            body = response.read(MAX_RESPONSE_SIZE + 1)
    except (OSError, ValueError):
        return None
    if len(body) > MAX_RESPONSE_SIZE:
        return None
    try:
        return weather_process_json(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None


class OwmProvider(WeatherProvider):
    """Provider reading from a service URL that includes its application id."""

    def __init__(self, url: str = ""):
        self.url = url

    def fetch_weather_data(self) -> Optional[WeatherData]:
        return fetch_owm_data(self.url)