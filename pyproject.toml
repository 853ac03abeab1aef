[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "onehorn"
version = "0.1.0"
description = "Mod manager for Baldur's Gate 3: reads .pak packages, keeps mod profiles and writes modsettings.lsx"
requires-python = ">=3.10"
keywords = ["baldurs-gate-3", "mods", "mod-manager", "pak", "lsx", "larian"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "lz4",
    "platformdirs",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
onehorn = "onehorn.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["onehorn"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
