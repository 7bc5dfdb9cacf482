"""Alliance power ratings (OPR, DPR, CCWM) for FTC match results."""

from .linalg.kernel import SingularSystemError
from .models.match import Match, MatchIntegrityError
from .ratings.calculator import PerformanceCalculator, calculate_np_avg
from .ratings.regularization import LambdaStrategy, RegularizationPolicy, choose_lambda

__all__ = [
    "Match",
    "MatchIntegrityError",
    "PerformanceCalculator",
    "calculate_np_avg",
    "LambdaStrategy",
    "RegularizationPolicy",
    "choose_lambda",
    "SingularSystemError",
]
