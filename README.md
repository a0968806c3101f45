# mcukit

Small building blocks for home automation controllers. Only the Python
standard library is needed at run time.

| Module | What it gives you |
| --- | --- |
| `mcukit.kvs` | a typed key/value store kept in one file: fixed-width integers, strings and blobs |
| `mcukit.cmdline` | reading `;`-terminated command lines character by character and splitting them into `key=value` pairs |
| `mcukit.cli` | dispatching parsed command lines, or JSON command objects, to registered handlers |
| `mcukit.settings` | a table describing configuration items (store key, option name, type) |
| `mcukit.config` | reading and saving configuration values in the key/value store |
| `mcukit.storage` | whole-file write, read and delete |
| `mcukit.txtio` | character-level text output and input with hex, decimal, fixed-point and BCD formatting |
| `mcukit.weather_data` | the `WeatherData` record and weather providers (including a random one) |
| `mcukit.openweathermap` | parsing and fetching observations from an OpenWeatherMap style JSON service |
| `mcukit.weather` | an archive of hourly observations for the past week, persisted in the key/value store |
| `mcukit.irrigation` | evaporation points and a factor for scaling irrigation intervals |

## Key/value store

```python
from mcukit.kvs import open_store, foreach, KvsType, OpenMode

with open_store("settings.kvs", OpenMode.WRITE) as h:
    h.set_str("C_MQTT_CID", "controller-1")
    h.set_int("asdf", KvsType.I8, 42)
    h.set_blob("pastwd00", bytes(range(8)))
    h.commit()

with open_store("settings.kvs", OpenMode.READ) as h:
    print(h.get_int("asdf", KvsType.I8, 3))   # 42
    print(h.get_int("nope", KvsType.I8, 3))   # 3, the default
    print(h.get_blob("pastwd00", 8))          # the 8 bytes
    print(h.get_blob("pastwd00", 9))          # None: size differs
    print(h.get_str("C_MQTT_CID"))            # "controller-1"

# count the live i8 entries whose key starts with "asdf"
print(foreach("settings.kvs", KvsType.I8, "asdf", None))
```

- Keys are cut to 14 bytes.
- `get_str(key, size)` returns `None` when the key is missing, the string
  is empty, or it is not shorter than `size`.
- `get_blob(key, size)` returns `None` unless exactly `size` bytes are stored.
- `erase_key` returns `False` when there was no such key.
- Opening a missing file in `OpenMode.READ` and writing through a read-only
  handle raise `KvsError`; a record with a bad magic cookie raises
  `CorruptFileError`.
- `foreach` treats a missing store as empty. With a callback, only entries
  it answers with `CallbackResult.MATCH` or `CallbackResult.DONE` are
  counted, and `DONE` stops the scan.

Erased or replaced entries are only marked deleted; their space is reused
by later entries of fitting size. The file is never compacted.

## Command lines

```python
from mcukit.cmdline import parse_command_line, asc2bool

parse_command_line('config verbose=? name="two words" on')
# [('config', None), ('verbose', '?'), ('name', 'two words'), ('on', None)]

asc2bool("1"), asc2bool(None), asc2bool("0")   # True, True, False
asc2bool("x")                                  # raises ValueError
```

A key without a value gets `None`. The obsolete option `mid=...` is
dropped. A missing value, an unbalanced quote or too many words raise
`CommandLineSyntaxError`.

`CommandReader(getc)` collects characters from any function that returns
one character (or code point), or `None`, `""` or `-1` when no input is
ready. `read_command_line()` returns the next complete line without its
`;`, or `None`. Backspace removes the last character, CR or LF discards
the partial line, and `;` inside double quotes does not end the line.

## Dispatching commands

```python
from mcukit.cli import CommandProcessor, ParmHandler

def config(params, writer):
    writer.append(params)
    return 0

proc = CommandProcessor([ParmHandler("config", config, "show settings")])
out = []
proc.process_cmdline("config verbose=?", out)
proc.process_json('{"config":{"verbose":"?"}}', out)
```

Handlers are called as `process(params, writer)`; what `writer` is, is up
to you. An unknown command makes `process_parameters` and
`process_cmdline` raise `LookupError`. Optional hooks can take over text
lines, JSON text or the `"json"` object, and a password check can refuse
a parsed line. `loop_once(reader, writer)` reads one line from a
`CommandReader` and processes it, logging parse errors and unknown
commands instead of raising.

## Settings and configuration

```python
from mcukit.settings import component_settings, ConfigItem
from mcukit.config import ConfigStore

settings = component_settings()
settings.get_kvs_key(ConfigItem.VERBOSE)   # "C_VERBOSE"
settings.get_item("verbose")               # ConfigItem.VERBOSE

store = ConfigStore("config.kvs")
store.save_i8("C_VERBOSE", "4")
store.read_item(settings, ConfigItem.VERBOSE, 3)   # 4
store.save_str("key1", "val1")
store.read_str("key1", None, "def1")               # "val1"
```

Reads return the default when the store or the key is missing. Numbers
given as text are parsed like `strtoul`/`atoi`/`strtof`; floats are kept
as 4-byte blobs.

## Files and text output

```python
from mcukit.storage import file_write, file_read, file_delete
from mcukit.txtio import TextIO

file_write("blob.bin", b"abc")
file_read("blob.bin", 2)     # b"ab"
file_delete("blob.bin")

chars = []
io = TextIO(putc=chars.append)
io.print_hex_8(5, True)      # "0x05, "
io.print_hex_16(0x1a)        # "0x001a"
io.print_bcd(0x42)           # "42"
```

Without functions, `TextIO` writes to standard output and reads from
standard input. A `putc` that returns `-1` makes the write raise `OSError`.

## Weather and irrigation

```python
from mcukit.openweathermap import weather_process_json
from mcukit.irrigation import WeatherIrrigation, wd2rvpt

wd = weather_process_json(
    '{"main":{"temp":285.09,"pressure":988,"humidity":75},'
    '"wind":{"speed":3.6,"deg":110},"clouds":{"all":34}}'
)
print(wd.temp_celsius(), wd.relative_humidity_percent())
print(wd2rvpt(wd))

wi = WeatherIrrigation("weather.kvs")
wi.dev_fill_past_wd_randomly()
print(wi.get_simple_irrigation_factor(24))
```

`Weather` keeps one `WeatherData` per weekday (Sunday is 0) and hour.
`fetch_and_store_weather_data()` asks its provider for the current
observation, puts it in the current slot and stores it under
`pastwd<wday><hour>`; `load_past_weather_data()` reloads stored records
that are at most one week old. `OwmProvider(url)` fetches from a service
URL that already carries its application id; replies over 750 bytes are
refused. `RandomWeatherProvider` supplies random data for testing.

A factor of `1.0` means "irrigate as usual". `WeatherAdapterNeutral`
always returns its fixed factor; subclass it and override `get_factor` to
weigh temperature, wind, humidity and clouds your own way.

## What the package does not do

- There is no command to run and no console loop of its own; you call
  `CommandProcessor.loop_once` from your own loop.
- No command handlers come with it; you register every command yourself.
- Of the configuration items, only `ConfigItem.VERBOSE` is described in
  `component_settings()`; the others (Wi-Fi, MQTT, HTTP, NTP, LAN) are
  enum members with no table entry.
- There is no network setup, firmware update or serial port handling.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.