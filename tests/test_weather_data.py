import json
import random

import pytest

from mcukit.weather_data import (
    KELVIN_OFFSET,
    PACKED_SIZE,
    RandomWeatherProvider,
    WeatherData,
    WeatherProvider,
)


def sample():
    return WeatherData(humidity=75, temp=285.5, pressure=988, wind_speed=3.5, wind_deg=110, clouds=34)


def test_empty_is_false():
    assert not WeatherData()
    assert sample()


def test_accessors():
    wd = sample()
    assert wd.relative_humidity_percent() == 75
    assert wd.wind_speed_kph() == 3.5
    assert wd.cloud_coverage_percent() == 34
    assert wd.temp_celsius() == pytest.approx(285.5 - KELVIN_OFFSET)


def test_celsius_at_offset_is_zero():
    assert WeatherData(temp=KELVIN_OFFSET).temp_celsius() == pytest.approx(0.0)


def test_to_json_round_trip():
    wd = sample()
    doc = json.loads(wd.to_json())
    assert doc["main"] == {"humidity": 75, "temp": 285.5, "pressure": 988}
    assert doc["wind"] == {"speed": 3.5, "deg": 110}
    assert doc["clouds"] == {"all": 34}


def test_to_json_uses_six_decimals():
    assert '"temp":285.500000' in sample().to_json()


def test_pack_size():
    assert len(sample().pack()) == PACKED_SIZE == 24


def test_pack_unpack_round_trip():
    wd = sample()
    assert WeatherData.unpack(wd.pack()) == wd


def test_pack_is_stable_after_rounding():
    wd = WeatherData(temp=285.09, wind_speed=3.6, humidity=1)
    once = WeatherData.unpack(wd.pack())
    assert once.pack() == wd.pack()
    assert once.temp == pytest.approx(285.09, abs=1e-3)


def test_unpack_wrong_size():
    with pytest.raises(ValueError):
        WeatherData.unpack(b"\0" * (PACKED_SIZE - 1))


def test_provider_is_abstract():
    with pytest.raises(TypeError):
        WeatherProvider()


def test_random_provider_ranges():
    provider = RandomWeatherProvider(random.Random(1))
    for _ in range(200):
        wd = provider.fetch_weather_data()
        assert wd
        assert 5.0 <= wd.temp_celsius() <= 37.0 + 1e-9
        assert 0 <= wd.relative_humidity_percent() <= 100
        assert 0 <= wd.cloud_coverage_percent() <= 100
        assert 0 <= wd.wind_speed_kph() <= 85


def test_random_provider_reproducible():
    a = RandomWeatherProvider(random.Random(7)).fetch_weather_data()
    b = RandomWeatherProvider(random.Random(7)).fetch_weather_data()
    assert a == b