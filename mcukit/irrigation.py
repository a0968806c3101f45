"""Irrigation factors derived from past weather observations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .weather import Weather
from .weather_data import WeatherData

_FROM_HOUR = 9
_TO_HOUR = 21
_MAX_HOURS = 24 * 7


def wd2rvpt(wd: WeatherData) -> float:
    """Evaporation points of one observation; 0 for an empty one."""
    if not wd:
        return 0.0
    return (
        wd.temp_celsius() * (wd.wind_speed_kph() / 30.0 + 1)
        / (wd.cloud_coverage_percent() / 100.0 + wd.relative_humidity_percent() / 100.0 + 1)
    )


def wdd2rvpt_avg(wdd: Sequence[WeatherData], from_hour: int = _FROM_HOUR, to_hour: int = _TO_HOUR) -> float:
    """Average points of the hours FROM_HOUR..TO_HOUR of one day, ignoring empty ones."""
    points = [pt for pt in map(wd2rvpt, wdd[from_hour:to_hour + 1]) if pt > 0.001]
    return sum(points) / len(points) if points else 0.0


@dataclass(frozen=True)
class WeatherAdapterNeutral:
    """Turns an observation into a factor for irrigation intervals.

    The neutral adapter ignores the weather and yields its fixed factor,
    which is 1 unless set otherwise. Subclasses derive a factor from the data.
    """

    factor: float = 1.0

    def get_factor(self, wd: WeatherData) -> float:
        """Factor by which to scale irrigation intervals for WD."""
        return float(self.factor)


class WeatherIrrigation(Weather):
    """Weather archive that can suggest how to scale irrigation intervals."""

    def get_simple_irrigation_factor(self, hours: int = 24,
                                     adapter: Optional[WeatherAdapterNeutral] = None) -> float:
        """Average adapter factor over the last HOURS hours (at most a week).

        Only hours between 9:00 and 21:00 with data count; the hours are
        walked backwards from now within the current weekday's slots.
        Returns 1.0 when no data was found.
        """
        adapter = adapter if adapter is not None else WeatherAdapterNeutral()
        hours = min(hours, _MAX_HOURS)
        dh = self.get_wday_hour()

        factors = []
        for step in range(max(hours, 0)):
            hour = (dh.hour - step) % 24
            if not _FROM_HOUR <= hour <= _TO_HOUR:
                continue
            wd = self.get_past_weather_data(dh.wday, hour)
            if wd:
                factors.append(adapter.get_factor(wd))
        return sum(factors) / len(factors) if factors else 1.0