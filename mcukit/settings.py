"""Table of persistent configuration items.

Each item maps a configuration enum member to the key it is stored under,
the option name used on the command line, its storage type and how a
value given as text is to be stored.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

SoCfgFn = Callable[..., None]


class SettingType(enum.IntEnum):
    """Storage type of a setting."""

    NONE = 0
    I8 = 1
    U8 = 2
    I16 = 3
    U16 = 4
    I32 = 5
    U32 = 6
    I64 = 7
    U64 = 8
    STR = 9
    F = 10
    BLOB = 11
    END = 12


class StoreFun(enum.IntEnum):
    """How a value given as text is stored."""

    NONE = 0
    DIRECT = 1
    DIRECT_HEX = 2
    DIRECT_BOOL = 3


class ConfigItem(enum.IntEnum):
    """Configuration items shared by the components."""

    NONE = -1
    VERBOSE = 0
    WIFI_SSID = 1
    WIFI_PASSWD = 2
    MQTT_URL = 3
    MQTT_USER = 4
    MQTT_PASSWD = 5
    MQTT_CLIENT_ID = 6
    MQTT_ROOT_TOPIC = 7
    MQTT_ENABLE = 8
    HTTP_USER = 9
    HTTP_PASSWD = 10
    HTTP_ENABLE = 11
    NTP_SERVER = 12
    LAN_PHY = 13
    LAN_PWR_GPIO = 14
    STM32_INV_BOOTPIN = 15


CONFIG_ITEM_COUNT = sum(1 for item in ConfigItem if item >= 0)


def _mask(*items: ConfigItem) -> int:
    mask = 0
    for item in items:
        mask |= 1 << item
    return mask


CBM_TXTIO = _mask(ConfigItem.VERBOSE)
CBM_MQTT_CLIENT = _mask(
    ConfigItem.MQTT_ENABLE,
    ConfigItem.MQTT_PASSWD,
    ConfigItem.MQTT_USER,
    ConfigItem.MQTT_URL,
    ConfigItem.MQTT_CLIENT_ID,
    ConfigItem.MQTT_ROOT_TOPIC,
)
CBM_HTTP_SERVER = _mask(ConfigItem.HTTP_ENABLE, ConfigItem.HTTP_PASSWD, ConfigItem.HTTP_USER)
CBM_LAN = _mask(ConfigItem.LAN_PHY, ConfigItem.LAN_PWR_GPIO)


@dataclass(frozen=True)
class SettingsData:
    """Description of one configuration item."""

    kvs_key: Optional[str] = None
    so_cfg_fun: Optional[SoCfgFn] = None
    opt_key: Optional[str] = None
    kvs_type: SettingType = SettingType.NONE
    store_fun: StoreFun = StoreFun.NONE
    id_bit: int = 0


ItemOrOption = Union[int, str, None]


class Settings:
    """Fixed-size table of :class:`SettingsData`, indexed by item.

    Lookups accept either an item (an int or enum member) or an option
    name.  A negative item or an unknown option name yields the empty
    result of the lookup.
    """

    def __init__(self, size: int = CONFIG_ITEM_COUNT, offset: int = 0):
        if size < 0:
            raise ValueError("size must not be negative")
        self.size = size
        self.offset = offset
        self._data: List[SettingsData] = [SettingsData() for _ in range(size)]

    def _index(self, item: int) -> int:
        idx = int(item) - self.offset
        if not 0 <= idx < self.size:
            raise IndexError(f"config item {item!r} out of range")
        return idx

    def _option_index(self, opt_key: Optional[str]) -> int:
        if opt_key is None:
            return -1
        return next((i for i, d in enumerate(self._data) if d.opt_key == opt_key), -1)

    def _lookup(self, item: ItemOrOption) -> Optional[SettingsData]:
        if item is None:
            return None
        if isinstance(item, str):
            idx = self._option_index(item)
            return self._data[idx] if idx >= 0 else None
        if int(item) < 0:
            return None
        return self._data[self._index(item)]

    def init_field(self, item, kvs_key, opt_key, kvs_type, so_cfg_fun=None, store_fun=StoreFun.NONE) -> None:
        """Describe ITEM in the table."""
        idx = self._index(item)
        self._data[idx] = SettingsData(
            kvs_key=kvs_key,
            so_cfg_fun=so_cfg_fun,
            opt_key=opt_key,
            kvs_type=SettingType(kvs_type),
            store_fun=StoreFun(store_fun),
            id_bit=idx,
        )

    def get_settings_data(self, item: ItemOrOption) -> Optional[SettingsData]:
        return self._lookup(item)

    def get_kvs_key(self, item: ItemOrOption) -> Optional[str]:
        data = self._lookup(item)
        return data.kvs_key if data else None

    def get_kvs_type(self, item: ItemOrOption) -> SettingType:
        data = self._lookup(item)
        return data.kvs_type if data else SettingType.NONE

    def get_opt_key(self, item: int) -> Optional[str]:
        data = self._lookup(int(item))
        return data.opt_key if data else None

    def get_so_cfg_fun(self, item: ItemOrOption) -> Optional[SoCfgFn]:
        data = self._lookup(item)
        return data.so_cfg_fun if data else None

    def get_store_fun(self, item: ItemOrOption) -> StoreFun:
        data = self._lookup(item)
        return data.store_fun if data else StoreFun.NONE

    def get_item(self, opt_key: Optional[str]) -> int:
        """Return the item carrying option OPT_KEY, or ``ConfigItem.NONE``."""
        idx = self._option_index(opt_key)
        if idx < 0:
            return ConfigItem.NONE
        value = idx + self.offset
        try:
            return ConfigItem(value)
        except ValueError:
            return value

    def get_bit_mask(self, opt_key: Optional[str]) -> int:
        """Return the single-bit mask of the item for OPT_KEY, or 0."""
        n = int(self.get_item(opt_key))
        return 1 << n if n >= 0 else 0


def register_txtio_settings(settings: Settings) -> None:
    """Describe the settings owned by the text I/O component."""
    settings.init_field(
        ConfigItem.VERBOSE, "C_VERBOSE", "verbose", SettingType.I8, None, StoreFun.DIRECT
    )


def component_settings() -> Settings:
    """Build the settings table of the shared components."""
    settings = Settings(CONFIG_ITEM_COUNT, 0)
    register_txtio_settings(settings)
    return settings