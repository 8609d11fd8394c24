[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yelpanel"
version = "0.1.0"
description = "Control-panel logic for a positive airway pressure device: numeric helpers, settings store, Nextion display protocol and DRV8308 register map"
requires-python = ">=3.10"
dependencies = []
keywords = ["nextion", "drv8308", "cpap", "nvs", "settings", "registers"]
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
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["yelpanel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
