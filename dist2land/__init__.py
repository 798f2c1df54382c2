"""Distance to the nearest land from downloadable land-polygon shapefiles."""

__version__ = "0.1.0"