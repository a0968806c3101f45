import pytest

from mcukit.irrigation import (
    WeatherAdapterNeutral,
    WeatherIrrigation,
    wd2rvpt,
    wdd2rvpt_avg,
)
from mcukit.weather_data import WeatherData


def _uniform_day():
    return [WeatherData(temp=273 + 20, humidity=50, clouds=50, wind_speed=5.0) for _ in range(24)]


class _CountingAdapter(WeatherAdapterNeutral):
    def __init__(self, factor):
        self.factor = factor
        self.calls = 0

    def get_factor(self, wd):
        self.calls += 1
        return self.factor


class _LawnAdapter(WeatherAdapterNeutral):
    d_temp, d_wind, d_humi, d_clouds = 0.06, 0.03, 0.005, 0.01

    def get_factor(self, wd):
        return (
            1.0
            - (wd.temp_celsius() - 20) * self.d_temp
            - wd.wind_speed_kph() * self.d_wind
            + (wd.relative_humidity_percent() - 50) * self.d_humi
            + (wd.cloud_coverage_percent() - 50) * self.d_clouds
        )


def test_points_equal_for_identical_hours():
    wda = _uniform_day()
    assert wdd2rvpt_avg(wda) == pytest.approx(wd2rvpt(wda[0]))


def test_points_average_only_uses_day_hours():
    wda = _uniform_day()
    wda[0] = WeatherData(temp=273.15 + 35, humidity=10, clouds=0, wind_speed=40.0)
    assert wd2rvpt(wda[0]) > wd2rvpt(wda[9])
    assert wdd2rvpt_avg(wda) == pytest.approx(wd2rvpt(wda[9]))


def test_points_ignore_empty_entries():
    wda = _uniform_day()
    for hour in range(9, 16):
        wda[hour] = WeatherData()
    assert wdd2rvpt_avg(wda) == pytest.approx(wd2rvpt(wda[20]))


def test_points_of_empty_data():
    assert wd2rvpt(WeatherData()) == 0.0
    assert wdd2rvpt_avg([WeatherData() for _ in range(24)]) == 0.0


def test_points_grow_with_temperature():
    cool = WeatherData(temp=273.15 + 10, humidity=50, clouds=50)
    warm = WeatherData(temp=273.15 + 30, humidity=50, clouds=50)
    assert wd2rvpt(warm) > wd2rvpt(cool) > 0


def test_neutral_adapter():
    assert WeatherAdapterNeutral().get_factor(WeatherData(temp=290.0)) == 1.0


def test_lawn_adapter_is_neutral_for_reference_weather():
    wd = WeatherData(temp=273.15 + 20, humidity=50, clouds=50, wind_speed=0.0)
    assert _LawnAdapter().get_factor(wd) == pytest.approx(1.0, abs=1e-4)


def test_irrigation_factor_without_data(tmp_path):
    wi = WeatherIrrigation(tmp_path / "w")
    assert wi.get_simple_irrigation_factor() == 1.0
    assert wi.get_simple_irrigation_factor(0) == 1.0


def test_irrigation_factor_default_adapter(tmp_path):
    wi = WeatherIrrigation(tmp_path / "w")
    wi.dev_fill_past_wd_randomly()
    assert wi.get_simple_irrigation_factor(48) == pytest.approx(1.0)