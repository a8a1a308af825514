[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iotacore"
version = "0.1.0"
description = "Building blocks for an energy monitor: date formatting, DST rules, SNTP packets, simulated solar, input configuration, phase tables and signed release unpacking"
requires-python = ">=3.10"
keywords = ["energy", "monitor", "iot", "ntp", "dst", "solar", "firmware-update"]
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
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["iotacore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
