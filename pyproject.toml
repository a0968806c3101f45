[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcukit"
version = "0.1.0"
description = "Building blocks for home automation controllers: file-based key/value store, command line parsing and dispatch, settings, text I/O and weather-based irrigation factors."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "home-automation",
    "key-value-store",
    "command-line",
    "settings",
    "weather",
    "irrigation",
    "openweathermap",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mcukit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
