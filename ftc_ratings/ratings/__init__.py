"""Design matrices, lambda selection and team metric calculation."""

from .calculator import PerformanceCalculator, calculate_np_avg
from .design_matrix import DesignMatrix, Metric, build_design_matrix
from .regularization import LambdaChoice, LambdaStrategy, RegularizationPolicy, choose_lambda

__all__ = [
    "PerformanceCalculator",
    "calculate_np_avg",
    "DesignMatrix",
    "Metric",
    "build_design_matrix",
    "LambdaChoice",
    "LambdaStrategy",
    "RegularizationPolicy",
    "choose_lambda",
]
