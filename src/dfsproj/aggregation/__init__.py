"""Projection aggregation and slate orchestration."""

from .service import (
    MID_TIER_RATIO,
    TOP_TIER_RATIO,
    ProjectionAggregator,
    RankedProjection,
    combine_estimates,
    rank_projections,
    summarize_defaults,
)

__all__ = [
    "MID_TIER_RATIO",
    "TOP_TIER_RATIO",
    "ProjectionAggregator",
    "RankedProjection",
    "combine_estimates",
    "rank_projections",
    "summarize_defaults",
]
