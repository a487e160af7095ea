"""Polygon Insight.

Geospatial metrics and resilient data aggregation for user-drawn polygons:
spherical area, perimeter, bounding box and centroid, plus population,
land use, climate, elevation and weather resolved through prioritised
provider chains that always end in a location-based estimate.
"""

__version__ = "0.1.0"
