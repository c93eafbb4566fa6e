[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tileworld"
version = "0.1.0"
description = "Tile world core for 2D sandbox games: autotiling rules, lightmap propagation, render-chunk management and world editing."
requires-python = ">=3.10"
keywords = ["tilemap", "autotile", "lightmap", "sandbox", "game", "2d"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tileworld"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
