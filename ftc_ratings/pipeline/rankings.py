"""Event and season ranking pipeline built on the performance calculator."""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional, Sequence

from ..linalg.kernel import SingularSystemError
from ..models.match import Match
from ..models.ranking import EventRankings, TeamRanking
from ..ratings.calculator import PerformanceCalculator, calculate_np_avg
from ..ratings.design_matrix import Metric, participating_teams
from ..ratings.regularization import (
    MAX_ITERATIONS,
    MAX_LAMBDA,
    TARGET_CONDITION,
    LambdaChoice,
    LambdaStrategy,
    RegularizationPolicy,
)

logger = logging.getLogger(__name__)

_METRIC_FIELDS = {
    Metric.OPR: "opr",
    Metric.NP_OPR: "np_opr",
    Metric.CCWM: "ccwm",
    Metric.DPR: "dpr",
    Metric.NP_DPR: "np_dpr",
}
_WEIGHTED_FIELDS = ("opr", "np_opr", "ccwm", "dpr", "np_dpr", "np_avg")
# Strategy label for events solved with a configured ridge_lambda
MANUAL_LAMBDA = "manual"


@dataclass
class RankingConfig:
    """Ranking pipeline configuration knobs."""

    lambda_strategy: LambdaStrategy = LambdaStrategy.FIXED_BAND
    # None picks lambda from the strategy; 0 solves without regularization.
    ridge_lambda: Optional[float] = None
    target_condition: float = TARGET_CONDITION
    max_lambda: float = MAX_LAMBDA
    max_iterations: int = MAX_ITERATIONS
    fallback_on_singular: bool = True
    parallel: bool = False
    max_workers: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides) -> "RankingConfig":
        """Defaults overlaid with FTC_RATINGS_* environment variables, then overrides."""
        config = cls()
        strategy = os.getenv("FTC_RATINGS_LAMBDA_STRATEGY")
        if strategy:
            config.lambda_strategy = LambdaStrategy(strategy.strip().lower())
        lam = os.getenv("FTC_RATINGS_LAMBDA")
        if lam not in (None, ""):
            config.ridge_lambda = float(lam)
        parallel = os.getenv("FTC_RATINGS_PARALLEL")
        if parallel:
            config.parallel = parallel.strip().lower() in {"1", "true", "yes", "y"}
        return replace(config, **{k: v for k, v in overrides.items() if v is not None})


class RankingPipeline:
    """Computes per-event team rankings and combines them across a season."""

    def __init__(self, config: Optional[RankingConfig] = None):
        self.config = config or RankingConfig()
        self.policy = RegularizationPolicy(
            strategy=self.config.lambda_strategy,
            target_condition=self.config.target_condition,
            max_lambda=self.config.max_lambda,
            max_iterations=self.config.max_iterations,
        )

    def rank_event(self, matches: Sequence[Match], event_code: str = "") -> EventRankings:
        """
        Rank every team that played in one event.

        Args:
            matches: The event's matches
            event_code: Label carried into the result

        Returns:
            EventRankings sorted by OPR, highest first
        """
        matches = list(matches)
        if not matches:
            logger.info("No matches found for event %s", event_code or "<unnamed>")
            return EventRankings(event_code=event_code, ridge_lambda=0.0)

        teams = participating_teams(matches)
        choice: Optional[LambdaChoice] = None
        if self.config.ridge_lambda is None:
            choice = self.policy.choose_for_matches(matches, teams)
            lam = choice.value
        else:
            lam = self.config.ridge_lambda

        logger.info(
            "Calculating team rankings: event=%s matches=%d teams=%d lambda=%g",
            event_code or "<unnamed>",
            len(matches),
            len(teams),
            lam,
        )

        singular_fallback = False
        try:
            results = self._solve_all(matches, teams, lam)
        except SingularSystemError as exc:
            if lam != 0 or not self.config.fallback_on_singular:
                raise
            if choice is None:
                choice = self.policy.choose_for_matches(matches, teams)
            logger.warning(
                "Unregularized system for event %s is singular (%s); retrying with lambda=%g",
                event_code or "<unnamed>",
                exc,
                choice.value,
            )
            lam = choice.value
            singular_fallback = True
            results = self._solve_all(matches, teams, lam)

        rankings = []
        for team in teams:
            ranking = TeamRanking(
                team_id=team,
                num_matches=sum(1 for m in matches if m.alliance_of(team) is not None),
            )
            for metric, field_name in _METRIC_FIELDS.items():
                setattr(ranking, field_name, results[metric].get(team, 0.0))
            ranking.np_avg = calculate_np_avg(matches, team)
            rankings.append(ranking)
        rankings.sort(key=lambda r: r.opr, reverse=True)

        return EventRankings(
            event_code=event_code,
            ridge_lambda=lam,
            lambda_strategy=MANUAL_LAMBDA if choice is None else choice.strategy.value,
            condition_number=None if choice is None else choice.condition_number,
            lambda_converged=True if choice is None else choice.converged,
            singular_fallback=singular_fallback,
            num_matches=len(matches),
            rankings=rankings,
        )

    def rank_season(self, events: Mapping[str, Sequence[Match]]) -> List[TeamRanking]:
        """
        Rank each event separately and combine per team.

        Metrics are averaged with each event weighted by the number of
        matches the team played there.
        """
        per_event = [self.rank_event(matches, code) for code, matches in events.items()]
        return aggregate_rankings(per_event)

    def choose_lambda(self, matches: Sequence[Match]) -> LambdaChoice:
        return self.policy.choose_for_matches(matches)

    def _solve_all(self, matches, teams, lam) -> Dict[Metric, Dict[int, float]]:
        calculator = PerformanceCalculator(matches, teams, ridge_lambda=lam)
        return calculator.calculate_all(parallel=self.config.parallel, max_workers=self.config.max_workers)


def aggregate_rankings(event_rankings: Sequence[EventRankings]) -> List[TeamRanking]:
    """Combine per-event rankings into match-weighted season rankings, sorted by OPR."""
    by_team: Dict[int, List[TeamRanking]] = defaultdict(list)
    for event in event_rankings:
        for ranking in event.rankings:
            by_team[ranking.team_id].append(ranking)

    combined = []
    for team_id, rankings in by_team.items():
        total = sum(r.num_matches for r in rankings)
        result = TeamRanking(team_id=team_id, num_matches=total)
        if total > 0:
            for name in _WEIGHTED_FIELDS:
                weighted = sum(getattr(r, name) * r.num_matches for r in rankings)
                setattr(result, name, weighted / total)
        combined.append(result)

    combined.sort(key=lambda r: r.opr, reverse=True)
    return combined
