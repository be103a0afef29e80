[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wattmon"
version = "0.1.0"
description = "Building blocks for an electric power monitor: digest auth, request slots, message log, graph store, InfluxDB payloads and power computations"
requires-python = ">=3.10"
dependencies = []
keywords = ["power", "energy", "monitoring", "influxdb", "digest-auth", "adc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wattmon"]

[tool.pytest.ini_options]
addopts = "-ra"
