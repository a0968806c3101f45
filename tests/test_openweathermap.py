import io
import urllib.error
from unittest import mock

import pytest

from mcukit.openweathermap import (
    MAX_RESPONSE_SIZE,
    OwmProvider,
    fetch_owm_data,
    weather_process_json,
)

SAMPLE_JSON = (
    '{"coord":{"lon":13.4105,"lat":52.5244},"weather":[{"id":800,"main":"Clear",'
    '"description":"clear sky","icon":"01d"}],"base":"stations","main":{"temp":285.09,'
    '"feels_like":284.3,"temp_min":284.16,"temp_max":285.92,"pressure":988,"humidity":75},'
    '"visibility":10000,"wind":{"speed":3.6,"deg":110},"clouds":{"all":34},"dt":1709397735,'
    '"sys":{"type":2,"id":1000001,"country":"DE","sunrise":1709358611,"sunset":1709398022},'
    '"timezone":3600,"id":1000002,"name":"Berlin","cod":200}'
)


def test_process_json_sample():
    w = weather_process_json(SAMPLE_JSON)
    assert w.temp == pytest.approx(285.09, abs=0.001)
    assert w.pressure == 988
    assert w.relative_humidity_percent() == 75
    assert w.wind_speed_kph() == pytest.approx(3.6, abs=0.001)
    assert w.wind_deg == 110
    assert w.cloud_coverage_percent() == 34


def test_process_json_missing_sections_keep_defaults():
    w = weather_process_json('{"main":{"temp":280.0},"other":[1,2]}')
    assert w.temp == pytest.approx(280.0)
    assert w.humidity == 0
    assert w.clouds == 0
    assert w.wind_speed == 0.0


def test_process_json_skips_non_numeric_values():
    w = weather_process_json('{"main":{"temp":"hot","humidity":40}}')
    assert w.temp == 0.0
    assert w.humidity == 40
    assert not w


@pytest.mark.parametrize("text", ["not json", "[1,2,3]", '"text"'])
def test_process_json_rejects_non_objects(text):
    with pytest.raises(ValueError):
        weather_process_json(text)


def test_fetch_owm_data_parses_response():
    with mock.patch("urllib.request.urlopen", return_value=io.BytesIO(SAMPLE_JSON.encode())):
        wd = fetch_owm_data("http://localhost/weather")
    assert wd.pressure == 988
    assert wd.clouds == 34


def test_fetch_owm_data_without_url():
    assert fetch_owm_data("") is None
    assert fetch_owm_data(None) is None


def test_fetch_owm_data_network_error():
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        assert fetch_owm_data("http://localhost/weather") is None


def test_fetch_owm_data_oversized_reply():
    body = b" " * MAX_RESPONSE_SIZE + b"{}"
    with mock.patch("urllib.request.urlopen", return_value=io.BytesIO(body)):
        assert fetch_owm_data("http://localhost/weather") is None


def test_provider_uses_its_url():
    provider = OwmProvider("http://localhost/weather")
    with mock.patch("urllib.request.urlopen", return_value=io.BytesIO(SAMPLE_JSON.encode())) as op:
        wd = provider.fetch_weather_data()
    assert op.call_args[0][0] == "http://localhost/weather"
    assert wd.humidity == 75


def test_provider_without_url_fails():
    assert OwmProvider().fetch_weather_data() is None