[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dist2land"
version = "0.1.0"
description = "Distance from a point at sea to the nearest land, using downloadable land-polygon shapefiles"
requires-python = ">=3.10"
dependencies = [
    "shapely",
]
keywords = ["gis", "coastline", "distance", "geodesic", "shapefile", "land"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dist2land = "dist2land.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dist2land"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
