"""Core utilities and shared infrastructure.

- config: Aggregator settings and provider credentials
- constants: Named constants (Earth radius, thresholds, provenance tags)
- exceptions: Custom exception hierarchy
"""
