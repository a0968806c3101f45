"""Building blocks for home automation controllers: key/value store, command
lines, settings, text I/O and weather-based irrigation factors."""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "cmdline",
    "config",
    "irrigation",
    "kvs",
    "openweathermap",
    "settings",
    "storage",
    "txtio",
    "weather",
    "weather_data",
]