[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "asp5033"
version = "0.1.0"
description = "Asyncio driver for the ASP5033 differential-pressure airspeed sensor over I2C"
requires-python = ">=3.10"
dependencies = []
keywords = ["i2c", "sensor", "airspeed", "differential-pressure", "asyncio", "driver"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Instrument Drivers",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["asp5033"]

[tool.pytest.ini_options]
addopts = "-ra"
