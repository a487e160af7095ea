"""Pure analysis functions.

- geometry: bounding box, spherical area, great-circle perimeter,
  centroid, degeneracy check, GeoJSON conversion
- ocean: coarse land/water classifier
- estimators: location-based synthetic data for every category
- country_density: ISO country code → people per km²
"""
