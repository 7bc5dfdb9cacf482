"""Dense solvers for normal-equation and ridge regressions."""

from .kernel import (
    SingularSystemError,
    gaussian_eliminate,
    multiply,
    solve_least_squares,
    solve_least_squares_regularized,
    transpose,
)

__all__ = [
    "SingularSystemError",
    "gaussian_eliminate",
    "multiply",
    "solve_least_squares",
    "solve_least_squares_regularized",
    "transpose",
]
