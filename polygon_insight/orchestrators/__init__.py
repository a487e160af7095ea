"""Orchestration: per-category source chains and the concurrent aggregator."""

from polygon_insight.orchestrators.aggregator import DataAggregator, aggregate_polygon
from polygon_insight.orchestrators.chain import SourceChain, classify_failure

__all__ = ["DataAggregator", "SourceChain", "aggregate_polygon", "classify_failure"]
