"""Archive of the weather observations of the past seven days."""

from __future__ import annotations

import random
import struct
import time
from dataclasses import dataclass
from typing import List, Optional

from .kvs import KvsError, OpenMode, open_store
from .weather_data import KELVIN_OFFSET, PACKED_SIZE, WeatherData, WeatherProvider

KEY_FORMAT = "pastwd%d%d"
RECORD_SIZE = 64
WD_CURRENT_VERSION = 1
_MAX_AGE = 60 * 60 * 24 * 7
_RECORD_HEADER = struct.Struct("<qB7x")
_PADDING = bytes(RECORD_SIZE - _RECORD_HEADER.size - PACKED_SIZE)

PAST_WD_OBJS = 7 * 24


def _key(wday: int, hour: int) -> str:
    return KEY_FORMAT % (wday, hour)


@dataclass
class WdayHour:
    """Day of the week (Sunday is 0) and hour of the day."""

    wday: int = 0
    hour: int = 0


class Weather:
    """Observations indexed by weekday and hour, kept in the store at STORE_PATH."""

    def __init__(self, store_path, provider: Optional[WeatherProvider] = None):
        self.store_path = store_path
        self._provider = provider
        self._past: List[List[WeatherData]] = [[WeatherData() for _ in range(24)] for _ in range(7)]

    def set_weather_provider(self, provider: Optional[WeatherProvider]) -> bool:
        self._provider = provider
        return True

    def get_past_weather_data(self, wday: int, hour: int) -> WeatherData:
        """Observation for WDAY (Sunday=0) and HOUR; empty if none is known."""
        if not (0 <= wday < 7 and 0 <= hour < 24):
            raise IndexError(f"no slot for weekday {wday}, hour {hour}")
        return self._past[wday][hour]

    @staticmethod
    def get_wday_hour() -> WdayHour:
        """Current local weekday (Sunday=0) and hour."""
        t = time.localtime(time.time())
        return WdayHour((t.tm_wday + 1) % 7, t.tm_hour)

    def fetch_and_store_weather_data(self) -> bool:
        """Fetch the current observation and store it in the current slot."""
        if self._provider is None:
            return False
        tdh = self.get_wday_hour()
        wd = self._provider.fetch_weather_data()
        if wd is None:
            return False
        wd_bytes = wd.pack()
        self._past[tdh.wday][tdh.hour] = WeatherData.unpack(wd_bytes)

        record = _RECORD_HEADER.pack(int(time.time()), WD_CURRENT_VERSION) + wd_bytes + _PADDING
        try:
            with open_store(self.store_path, OpenMode.WRITE) as handle:
                handle.set_blob(_key(tdh.wday, tdh.hour), record)
                handle.commit()
        except KvsError:
            return False
        return True

    def load_past_weather_data(self) -> bool:
        """Load stored observations that are at most a week old."""
        tmin = int(time.time()) - _MAX_AGE
        try:
            handle = open_store(self.store_path, OpenMode.READ)
        except KvsError:
            return True
        with handle:
            for wday in range(7):
                for hour in range(24):
                    raw = handle.get_blob(_key(wday, hour), RECORD_SIZE)
                    if raw is None:
                        continue
                    stamp, version = _RECORD_HEADER.unpack_from(raw)
                    if stamp < tmin or version != WD_CURRENT_VERSION:
                        continue
                    start = _RECORD_HEADER.size
                    self._past[wday][hour] = WeatherData.unpack(raw[start:start + PACKED_SIZE])
        return True

    def dev_fill_past_wd_randomly(self) -> None:
        """Fill every slot with random observations, for development."""
        for day in self._past:
            for hour in range(24):
                day[hour] = WeatherData(
                    temp=KELVIN_OFFSET + random.uniform(5.0, 37.0),
                    humidity=random.randint(0, 100),
                    clouds=random.randint(0, 100),
                    wind_speed=float(random.randint(0, 85)),
                )

    def to_json(self) -> str:
        """All slots as a JSON array of 7 arrays of 24 observations."""
        days = ("[" + ",".join(wd.to_json() for wd in day) + "]" for day in self._past)
        return "[" + ",".join(days) + "]"