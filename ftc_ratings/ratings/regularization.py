"""
Ridge strength (lambda) selection for alliance regressions.

Strategies:
- FIXED_BAND: coarse bands keyed on match count
- CONTINUOUS: 0.5 / sqrt(matches), clamped to [0.001, 0.3]
- AUTO_TUNED: start from CONTINUOUS and double lambda until the
  regularized normal matrix reaches a target condition number
- INVERSE_TEAM_COUNT: 1 / number of teams

Small events and teams that keep sharing alliances make A^T A close to
singular. The auto-tuned strategy picks the smallest lambda (within its
doubling schedule) that brings the condition number under control.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

import numpy as np
from scipy.linalg import svdvals

from ..linalg.kernel import add_regularization
from ..models.match import Match
from .design_matrix import DesignMatrix, build_design_matrix, opr_score

logger = logging.getLogger(__name__)

TARGET_CONDITION = 1e7
MAX_LAMBDA = 10.0
MAX_ITERATIONS = 10
MIN_CONTINUOUS_LAMBDA = 0.001
MAX_CONTINUOUS_LAMBDA = 0.3


class LambdaStrategy(str, Enum):
    """Named lambda selection strategies."""

    FIXED_BAND = "fixed_band"
    CONTINUOUS = "continuous"
    AUTO_TUNED = "auto_tuned"
    INVERSE_TEAM_COUNT = "inverse_team_count"


@dataclass
class LambdaChoice:
    """Selected ridge strength and how it was reached."""

    value: float
    strategy: LambdaStrategy
    condition_number: Optional[float] = None
    iterations: int = 0
    converged: bool = True

    @property
    def ill_conditioned(self) -> bool:
        return not self.converged

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "strategy": self.strategy.value,
            "condition_number": self.condition_number,
            "iterations": self.iterations,
            "converged": self.converged,
        }


def fixed_band_lambda(match_count: int) -> float:
    if match_count < 20:
        return 0.1
    if match_count <= 60:
        return 0.01
    return 0.001


def continuous_lambda(match_count: int) -> float:
    if match_count <= 0:
        return MAX_CONTINUOUS_LAMBDA
    lam = 0.5 / math.sqrt(match_count)
    return min(max(lam, MIN_CONTINUOUS_LAMBDA), MAX_CONTINUOUS_LAMBDA)


def inverse_team_count_lambda(team_count: int) -> float:
    if team_count <= 0:
        raise ValueError("Inverse team count lambda needs at least one team")
    return 1.0 / team_count


def condition_number(m, lam: float = 0.0) -> float:
    """
    Ratio of largest to smallest singular value of m + lam * I.

    Returns inf when the smallest singular value is zero.
    """
    m = np.asarray(m, dtype=float)
    if m.size == 0:
        return 1.0
    if lam:
        m = add_regularization(m, lam)
    sigma = svdvals(m)
    sigma_min = float(sigma.min())
    if sigma_min <= 0.0:
        return math.inf
    return float(sigma.max()) / sigma_min


class RegularizationPolicy:
    """Chooses the ridge lambda for a set of matches."""

    def __init__(
        self,
        strategy: LambdaStrategy = LambdaStrategy.FIXED_BAND,
        target_condition: float = TARGET_CONDITION,
        max_lambda: float = MAX_LAMBDA,
        max_iterations: int = MAX_ITERATIONS,
    ):
        self.strategy = LambdaStrategy(strategy)
        self.target_condition = target_condition
        self.max_lambda = max_lambda
        self.max_iterations = max_iterations

    def choose_lambda(
        self,
        match_count: int,
        design_matrix: Optional[DesignMatrix] = None,
    ) -> LambdaChoice:
        """
        Pick lambda for an event.

        Args:
            match_count: Number of matches in the event
            design_matrix: All-teams design matrix (needed by AUTO_TUNED and
                INVERSE_TEAM_COUNT)

        Returns:
            LambdaChoice; for AUTO_TUNED, converged is False when the target
            condition number was not reached
        """
        if self.strategy == LambdaStrategy.FIXED_BAND:
            return LambdaChoice(fixed_band_lambda(match_count), self.strategy)
        if self.strategy == LambdaStrategy.CONTINUOUS:
            return LambdaChoice(continuous_lambda(match_count), self.strategy)

        if design_matrix is None:
            raise ValueError(f"{self.strategy.value} lambda selection requires a design matrix")

        if self.strategy == LambdaStrategy.INVERSE_TEAM_COUNT:
            return LambdaChoice(inverse_team_count_lambda(design_matrix.num_teams), self.strategy)
        return self.auto_tune(match_count, design_matrix)

    def choose_for_matches(
        self,
        matches: Sequence[Match],
        teams: Optional[Iterable[int]] = None,
    ) -> LambdaChoice:
        """Build the event-wide design matrix and pick lambda from it."""
        design = None
        if self.strategy in (LambdaStrategy.AUTO_TUNED, LambdaStrategy.INVERSE_TEAM_COUNT):
            # Only the alliance layout matters here, so any metric's targets will do.
            design = build_design_matrix(matches, teams, opr_score)
        return self.choose_lambda(len(matches), design)

    def auto_tune(self, match_count: int, design_matrix: DesignMatrix) -> LambdaChoice:
        """Double lambda from the continuous heuristic until A^T A + lambda*I is well conditioned."""
        if design_matrix.is_empty:
            return LambdaChoice(continuous_lambda(match_count), LambdaStrategy.AUTO_TUNED, 1.0, 0, True)

        gram = design_matrix.gram()
        lam = min(continuous_lambda(match_count), self.max_lambda)
        cond = math.inf
        iterations = 0

        while iterations < self.max_iterations:
            iterations += 1
            cond = condition_number(gram, lam)
            if cond <= self.target_condition:
                logger.debug("Auto-tuned lambda=%g (condition %.3g) after %d iterations", lam, cond, iterations)
                return LambdaChoice(lam, LambdaStrategy.AUTO_TUNED, cond, iterations, True)
            if lam >= self.max_lambda:
                break
            lam = min(lam * 2.0, self.max_lambda)
        else:
            cond = condition_number(gram, lam)

        converged = cond <= self.target_condition
        if not converged:
            logger.warning(
                "Lambda auto-tuning stopped at lambda=%g with condition number %.3g (target %.3g)",
                lam,
                cond,
                self.target_condition,
            )
        return LambdaChoice(lam, LambdaStrategy.AUTO_TUNED, cond, iterations, converged)


def choose_lambda(
    match_count: int,
    strategy: LambdaStrategy = LambdaStrategy.FIXED_BAND,
    design_matrix: Optional[DesignMatrix] = None,
) -> float:
    """Recommended ridge lambda for an event."""
    return RegularizationPolicy(strategy).choose_lambda(match_count, design_matrix).value
