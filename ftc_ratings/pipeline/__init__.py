"""Event and season ranking workflows."""

from .rankings import RankingConfig, RankingPipeline, aggregate_rankings

__all__ = ["RankingConfig", "RankingPipeline", "aggregate_rankings"]
