import json
import time
from unittest import mock

import pytest

from mcukit.weather import PAST_WD_OBJS, WdayHour, Weather
from mcukit.weather_data import RandomWeatherProvider, WeatherProvider


class _FailingProvider(WeatherProvider):
    def fetch_weather_data(self):
        return None


@pytest.fixture
def store(tmp_path):
    return tmp_path / "kvsWeather"


def test_weather_fetch_store_and_load(store):
    w = Weather(store)
    tdh = Weather.get_wday_hour()
    assert not w.get_past_weather_data(tdh.wday, tdh.hour)

    assert w.set_weather_provider(RandomWeatherProvider()) is True
    assert w.fetch_and_store_weather_data() is True

    tdh = Weather.get_wday_hour()
    pwd = w.get_past_weather_data(tdh.wday, tdh.hour)
    assert pwd
    assert -30 <= pwd.temp_celsius() <= 40

    assert w.load_past_weather_data() is True
    assert w.get_past_weather_data(tdh.wday, tdh.hour) == pwd

    w2 = Weather(store)
    assert w2.load_past_weather_data() is True
    pwd2 = w2.get_past_weather_data(tdh.wday, tdh.hour)
    assert pwd2
    assert pwd2 == pwd


def test_fetch_without_provider(store):
    assert Weather(store).fetch_and_store_weather_data() is False


def test_fetch_with_failing_provider(store):
    w = Weather(store, _FailingProvider())
    assert w.fetch_and_store_weather_data() is False
    assert not store.exists()


def test_load_from_missing_store(store):
    w = Weather(store)
    assert w.load_past_weather_data() is True
    assert not any(w.get_past_weather_data(d, h) for d in range(7) for h in range(24))


def test_load_ignores_data_older_than_a_week(store):
    old = time.time() - 8 * 24 * 3600
    w = Weather(store, RandomWeatherProvider())
    with mock.patch("time.time", return_value=old):
        assert w.fetch_and_store_weather_data() is True
    w2 = Weather(store)
    assert w2.load_past_weather_data() is True
    assert not any(w2.get_past_weather_data(d, h) for d in range(7) for h in range(24))


@pytest.mark.parametrize("wday,hour", [(7, 0), (0, 24), (-1, 3)])
def test_get_past_weather_data_out_of_range(store, wday, hour):
    with pytest.raises(IndexError):
        Weather(store).get_past_weather_data(wday, hour)


def test_get_wday_hour_range():
    tdh = Weather.get_wday_hour()
    assert isinstance(tdh, WdayHour)
    assert 0 <= tdh.wday < 7
    assert 0 <= tdh.hour < 24


def test_get_wday_hour_sunday_is_zero():
    sunday_noon = time.struct_time((2024, 3, 3, 12, 0, 0, 6, 63, 0))
    with mock.patch("time.localtime", return_value=sunday_noon):
        assert Weather.get_wday_hour() == WdayHour(0, 12)


def test_dev_fill_and_to_json(store):
    w = Weather(store)
    w.dev_fill_past_wd_randomly()
    assert all(w.get_past_weather_data(d, h) for d in range(7) for h in range(24))
    data = json.loads(w.to_json())
    assert len(data) == 7
    assert all(len(day) == 24 for day in data)
    assert sum(len(day) for day in data) == PAST_WD_OBJS
    assert data[2][5]["clouds"]["all"] == w.get_past_weather_data(2, 5).clouds
    assert data[2][5]["main"]["humidity"] == w.get_past_weather_data(2, 5).humidity