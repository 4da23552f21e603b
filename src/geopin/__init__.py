"""GeoPin: a personal point-of-interest store with radius, bounding-box and tag search."""

__version__ = "0.1.0"
