import pytest

from mcukit.config import ConfigStore
from mcukit.kvs import OpenMode, open_store
from mcukit.settings import ConfigItem, Settings, SettingType, component_settings


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path / "config")


def test_save_and_read_str(store):
    store.save_str("key1", "val1")
    assert store.read_str("key1", 80, "def1") == "val1"


def test_component_key_str(store):
    sett = component_settings()
    assert sett.get_kvs_key(ConfigItem.VERBOSE) == "C_VERBOSE"
    store.save_str(sett.get_kvs_key(ConfigItem.VERBOSE), "val2")
    assert store.read_str(sett.get_kvs_key(ConfigItem.VERBOSE), 80, "def2") == "val2"


def test_component_key_read_through_handle(store):
    sett = component_settings()
    store.save_str(sett.get_kvs_key(ConfigItem.VERBOSE), "val2")
    store.save_str(sett.get_kvs_key(ConfigItem.VERBOSE), "val3")
    with open_store(store.path, OpenMode.READ) as handle:
        assert handle.get_str(sett.get_kvs_key(ConfigItem.VERBOSE), 80) == "val3"


def test_str_too_long_for_buffer(store):
    key = component_settings().get_kvs_key(ConfigItem.VERBOSE)
    store.save_str(key, "abcd")
    assert store.read_str(key, 4, "444") == "444"
    assert store.read_str(key, 5, "444") == "abcd"


def test_missing_store_gives_default(store):
    assert store.read_str("key1", 80, "def1") == "def1"
    assert store.read_u32("n", 7) == 7
    assert store.read_float("f", 2.5) == 2.5


def test_u32_round_trip(store):
    store.save_u32("n", "42")
    assert store.read_u32("n", 0) == 42


def test_u32_hex_and_wrap(store):
    store.save_u32("h", "ff", 16)
    assert store.read_u32("h") == 255
    store.save_u32("w", "-1")
    assert store.read_u32("w") == 4294967295


def test_u32_trailing_garbage_ignored(store):
    store.save_u32("n", "12abc")
    assert store.read_u32("n") == 12


def test_i8_round_trip_and_wrap(store):
    store.save_i8("v", "-5")
    assert store.read_i8("v", 3) == -5
    store.save_i8("v", "300")
    assert store.read_i8("v", 3) == 44


def test_float_round_trip(store):
    store.save_float("f", "1.5")
    assert store.read_float("f", 0.0) == 1.5


def test_blob_round_trip(store):
    store.save_blob("b", b"\x01\x02\x03")
    assert store.read_blob("b", 3, b"") == b"\x01\x02\x03"
    assert store.read_blob("b", 4, b"dflt") == b"dflt"


def test_read_item_by_setting_type(store):
    sett = component_settings()
    assert store.read_item(sett, ConfigItem.VERBOSE, 3) == 3
    store.save_i8("C_VERBOSE", "5")
    assert store.read_item(sett, ConfigItem.VERBOSE, 3) == 5


def test_read_item_unhandled_type(store):
    sett = Settings(1)
    sett.init_field(0, "K", "k", SettingType.U16)
    with pytest.raises(ValueError):
        store.read_item(sett, 0, 1)