"""Design matrix construction for alliance regressions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np

from ..models.match import Match

ScoreFunction = Callable[[Match, bool], float]


class Metric(str, Enum):
    """Regression-based team metrics."""

    OPR = "opr"
    NP_OPR = "np_opr"
    DPR = "dpr"
    NP_DPR = "np_dpr"
    CCWM = "ccwm"


def opr_score(match: Match, is_red: bool) -> float:
    return match.red_score if is_red else match.blue_score


def np_opr_score(match: Match, is_red: bool) -> float:
    if is_red:
        return match.red_score - match.red_penalties
    return match.blue_score - match.blue_penalties


def dpr_score(match: Match, is_red: bool) -> float:
    # What the opposing alliance scored
    return match.blue_score if is_red else match.red_score


def np_dpr_score(match: Match, is_red: bool) -> float:
    if is_red:
        return match.blue_score - match.blue_penalties
    return match.red_score - match.red_penalties


def ccwm_score(match: Match, is_red: bool) -> float:
    margin = match.red_score - match.blue_score
    return margin if is_red else -margin


SCORE_FUNCTIONS: Dict[Metric, ScoreFunction] = {
    Metric.OPR: opr_score,
    Metric.NP_OPR: np_opr_score,
    Metric.DPR: dpr_score,
    Metric.NP_DPR: np_dpr_score,
    Metric.CCWM: ccwm_score,
}


@dataclass(frozen=True)
class DesignMatrix:
    """Indicator matrix A, target vector b and the team owning each column."""

    a: np.ndarray
    b: np.ndarray
    active_teams: List[int]

    @property
    def num_rows(self) -> int:
        return int(self.a.shape[0])

    @property
    def num_teams(self) -> int:
        return len(self.active_teams)

    @property
    def is_empty(self) -> bool:
        return self.num_rows == 0 or self.num_teams == 0

    def column_index(self) -> Dict[int, int]:
        return {team: i for i, team in enumerate(self.active_teams)}

    def gram(self) -> np.ndarray:
        """A^T A for this design."""
        return self.a.T @ self.a

    def decode(self, x: Sequence[float]) -> Dict[int, float]:
        """Map a solution vector back onto team IDs."""
        if len(x) != self.num_teams:
            raise ValueError(f"Solution has {len(x)} entries for {self.num_teams} teams")
        return {team: float(value) for team, value in zip(self.active_teams, x)}


def participating_teams(matches: Iterable[Match]) -> List[int]:
    """Sorted distinct team IDs that appear on any alliance."""
    seen = set()
    for match in matches:
        seen.update(match.red_teams)
        seen.update(match.blue_teams)
    return sorted(seen)


def active_teams(matches: Sequence[Match], teams: Optional[Iterable[int]] = None) -> List[int]:
    """
    Teams from the candidate universe that play in at least one match.

    Args:
        matches: Matches to scan
        teams: Candidate teams in the caller's preferred order (None derives them)

    Returns:
        Active team IDs, keeping the caller's relative order
    """
    playing = set(participating_teams(matches))
    if teams is None:
        return sorted(playing)

    result = []
    seen = set()
    for team in teams:
        team = int(team)
        if team in playing and team not in seen:
            result.append(team)
            seen.add(team)
    return result


def build_design_matrix(
    matches: Sequence[Match],
    teams: Optional[Iterable[int]],
    score_fn: ScoreFunction,
) -> DesignMatrix:
    """
    Build the regression system for one metric.

    Row 2i holds the red alliance of match i and row 2i+1 the blue alliance,
    with a 1 in the column of every active team on that alliance. Teams not
    in the active set are dropped from the row.

    Args:
        matches: Matches in input order
        teams: Candidate team universe (None derives it from the matches)
        score_fn: Target value for (match, is_red)

    Returns:
        DesignMatrix with shape (2 * len(matches), len(active_teams))
    """
    columns = active_teams(matches, teams)
    index = {team: i for i, team in enumerate(columns)}

    a = np.zeros((2 * len(matches), len(columns)))
    b = np.zeros(2 * len(matches))

    for i, match in enumerate(matches):
        red_row, blue_row = 2 * i, 2 * i + 1
        for team in match.red_teams:
            if team in index:
                a[red_row, index[team]] = 1.0
        for team in match.blue_teams:
            if team in index:
                a[blue_row, index[team]] = 1.0
        b[red_row] = score_fn(match, True)
        b[blue_row] = score_fn(match, False)

    return DesignMatrix(a=a, b=b, active_teams=columns)


def build_metric_matrix(
    matches: Sequence[Match],
    teams: Optional[Iterable[int]],
    metric: Metric,
) -> DesignMatrix:
    return build_design_matrix(matches, teams, SCORE_FUNCTIONS[Metric(metric)])
