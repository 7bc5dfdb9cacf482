"""Team performance metrics (OPR, DPR, CCWM and non-penalty variants)."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence

from ..linalg.kernel import solve_least_squares, solve_least_squares_regularized
from ..models.match import Match
from .design_matrix import Metric, build_metric_matrix

logger = logging.getLogger(__name__)


def calculate_np_avg(matches: Iterable[Match], team_id: int) -> float:
    """
    Average non-penalty alliance score over a team's appearances.

    Args:
        matches: Matches to scan
        team_id: Team to average

    Returns:
        Mean of (alliance score - alliance penalties), or 0.0 with no appearances
    """
    total = 0.0
    count = 0
    for match in matches:
        alliance = match.alliance_of(team_id)
        if alliance is None:
            continue
        total += match.score_for(alliance) - match.penalties_for(alliance)
        count += 1

    if count == 0:
        return 0.0
    return total / count


class PerformanceCalculator:
    """Computes per-team regression metrics for a fixed set of matches."""

    def __init__(
        self,
        matches: Sequence[Match],
        teams: Optional[Iterable[int]] = None,
        ridge_lambda: float = 0.0,
    ):
        """
        Initialize calculator.

        Args:
            matches: Matches to rate
            teams: Candidate team universe in preferred order (None derives it)
            ridge_lambda: Ridge strength; 0 solves the plain least-squares system
        """
        if ridge_lambda < 0:
            raise ValueError(f"ridge_lambda must be non-negative, got {ridge_lambda}")
        self.matches = list(matches)
        self.teams = None if teams is None else [int(t) for t in teams]
        self.ridge_lambda = float(ridge_lambda)

    def calculate(self, metric: Metric) -> Dict[int, float]:
        """
        Solve one metric's regression.

        Returns:
            Team ID -> value for every team that played; empty when there is
            nothing to solve

        Raises:
            SingularSystemError: If the unregularized system has no unique solution
        """
        metric = Metric(metric)
        if not self.matches:
            logger.debug("No matches supplied for %s; skipping solve", metric.value)
            return {}

        design = build_metric_matrix(self.matches, self.teams, metric)
        if design.is_empty:
            logger.debug("No active teams for %s; skipping solve", metric.value)
            return {}

        if self.ridge_lambda == 0:
            x = solve_least_squares(design.a, design.b)
        else:
            x = solve_least_squares_regularized(design.a, design.b, self.ridge_lambda)
        return design.decode(x)

    def calculate_opr(self) -> Dict[int, float]:
        return self.calculate(Metric.OPR)

    def calculate_np_opr(self) -> Dict[int, float]:
        return self.calculate(Metric.NP_OPR)

    def calculate_dpr(self) -> Dict[int, float]:
        return self.calculate(Metric.DPR)

    def calculate_np_dpr(self) -> Dict[int, float]:
        return self.calculate(Metric.NP_DPR)

    def calculate_ccwm(self) -> Dict[int, float]:
        return self.calculate(Metric.CCWM)

    def calculate_np_avg(self, team_id: int, matches: Optional[Iterable[Match]] = None) -> float:
        return calculate_np_avg(self.matches if matches is None else matches, team_id)

    def calculate_all(
        self,
        parallel: bool = False,
        max_workers: Optional[int] = None,
    ) -> Dict[Metric, Dict[int, float]]:
        """
        Compute all five regression metrics.

        Each metric builds and solves its own system, so the parallel path
        shares no mutable state between workers.
        """
        metrics: List[Metric] = list(Metric)
        if not parallel:
            return {metric: self.calculate(metric) for metric in metrics}

        with ThreadPoolExecutor(max_workers=max_workers or len(metrics)) as executor:
            futures = {metric: executor.submit(self.calculate, metric) for metric in metrics}
            return {metric: future.result() for metric, future in futures.items()}
