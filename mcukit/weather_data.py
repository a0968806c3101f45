"""Weather observations and the providers that supply them."""

from __future__ import annotations

import abc
import random
import struct
from dataclasses import dataclass
from typing import Optional

_LAYOUT = struct.Struct("<IfIfII")
KELVIN_OFFSET = 273.15


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


@dataclass
class WeatherData:
    """One weather observation.  Empty (false) while temperature is zero."""

    humidity: int = 0      # relative humidity in percent
    temp: float = 0.0      # air temperature in Kelvin
    pressure: int = 0      # air pressure in hPa
    wind_speed: float = 0.0  # km/h
    wind_deg: int = 0      # wind direction in degrees
    clouds: int = 0        # cloud coverage in percent

    def __bool__(self) -> bool:
        return self.temp != 0

    def temp_celsius(self) -> float:
        return self.temp - KELVIN_OFFSET

    def relative_humidity_percent(self) -> int:
        return self.humidity

    def wind_speed_kph(self) -> float:
        return self.wind_speed

    def cloud_coverage_percent(self) -> int:
        return self.clouds

    def to_json(self) -> str:
        return (
            '{"main":{"humidity":%u,"temp":%f,"pressure":%u},'
            '"wind":{"speed":%f,"deg":%u},"clouds":{"all":%u}}'
            % (
                self.humidity, _f32(self.temp), self.pressure,
                _f32(self.wind_speed), self.wind_deg,
                self.clouds,
            )
        )

    def pack(self) -> bytes:
        """Binary record of the observation, floats in single precision."""
        return _LAYOUT.pack(
            self.humidity, self.temp, self.pressure,
            self.wind_speed, self.wind_deg, self.clouds,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "WeatherData":
        if len(data) != _LAYOUT.size:
            raise ValueError(f"weather record must be {_LAYOUT.size} bytes, not {len(data)}")
        humidity, temp, pressure, speed, deg, clouds = _LAYOUT.unpack(data)
        return cls(humidity, temp, pressure, speed, deg, clouds)


PACKED_SIZE = _LAYOUT.size


class WeatherProvider(abc.ABC):
    """Source of current weather observations."""

    @abc.abstractmethod
    def fetch_weather_data(self) -> Optional[WeatherData]:
        """Return the current observation, or None if none could be fetched."""


class RandomWeatherProvider(WeatherProvider):
    """Supplies random observations, for testing."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random()

    def fetch_weather_data(self) -> WeatherData:
        rng = self._rng
        return WeatherData(
            temp=KELVIN_OFFSET + rng.uniform(5.0, 37.0),
            humidity=rng.randint(0, 100),
            clouds=rng.randint(0, 100),
            wind_speed=float(rng.randint(0, 85)),
        )