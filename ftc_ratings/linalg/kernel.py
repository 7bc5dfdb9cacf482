"""
Dense linear algebra for alliance rating regressions.

Provides:
- transpose / multiply for small dense matrices
- gaussian_eliminate: Gauss-Jordan elimination with partial pivoting
- solve_least_squares: normal-equation solve of Ax = b
- solve_least_squares_regularized: ridge solve of (A^T A + lambda*I) x = A^T b

Design matrices here are small (tens to low hundreds of teams), so no
sparsity handling is attempted.
"""

from __future__ import annotations

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

PIVOT_EPSILON = 1e-14


class SingularSystemError(np.linalg.LinAlgError):
    """Raised when a linear system has no unique, finite solution."""

    def __init__(self, message: str, column: int = -1, pivot: float = 0.0):
        super().__init__(message)
        self.column = column
        self.pivot = pivot


def transpose(m) -> np.ndarray:
    """Return a transposed copy of a 2-D matrix."""
    m = np.asarray(m, dtype=float)
    if m.ndim != 2:
        raise ValueError(f"transpose expects a 2-D matrix, got shape {m.shape}")
    return m.T.copy()


def multiply(a, b) -> np.ndarray:
    """Multiply two dense matrices."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.ndim != 2 or b.ndim != 2:
        raise ValueError(f"multiply expects 2-D matrices, got {a.shape} and {b.shape}")
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"Cannot multiply {a.shape} by {b.shape}")
    return a @ b


def add_regularization(m, lam: float) -> np.ndarray:
    """Return m + lam * I."""
    m = np.array(m, dtype=float)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"Regularization needs a square matrix, got shape {m.shape}")
    m[np.diag_indices_from(m)] += lam
    return m


def gaussian_eliminate(a, b, eps: float = PIVOT_EPSILON) -> np.ndarray:
    """
    Solve Ax = b with Gauss-Jordan elimination and partial pivoting.

    At each pivot column the row with the largest magnitude entry at or
    below the diagonal is swapped into place before eliminating the column
    from every other row. Inputs are copied, never modified.

    Args:
        a: Square coefficient matrix, shape (n, n)
        b: Right-hand side, shape (n,)
        eps: Pivots with magnitude below this are treated as zero

    Returns:
        Solution vector x, shape (n,)

    Raises:
        SingularSystemError: If a pivot falls below eps
        ValueError: If shapes are inconsistent
    """
    a = np.array(a, dtype=float)
    b = np.array(b, dtype=float)

    n = b.shape[0] if b.ndim == 1 else -1
    if b.ndim != 1 or a.shape != (n, n):
        raise ValueError(f"Expected square ({n}, {n}) system, got A{a.shape} and b{b.shape}")

    for i in range(n):
        pivot_row = i + int(np.argmax(np.abs(a[i:, i])))
        if pivot_row != i:
            a[[i, pivot_row]] = a[[pivot_row, i]]
            b[[i, pivot_row]] = b[[pivot_row, i]]

        pivot = a[i, i]
        if abs(pivot) < eps:
            raise SingularSystemError(
                f"Singular system: pivot {pivot:.3e} in column {i} is below {eps:.0e}",
                column=i,
                pivot=float(pivot),
            )

        a[i, i:] /= pivot
        b[i] /= pivot

        factors = a[:, i].copy()
        factors[i] = 0.0
        a[:, i:] -= np.outer(factors, a[i, i:])
        b -= factors * b[i]

    return b


def _normal_equations(a, b):
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.ndim != 2 or b.ndim != 1 or a.shape[0] != b.shape[0]:
        raise ValueError(f"Design matrix {a.shape} does not match target {b.shape}")
    at = transpose(a)
    return multiply(at, a), at @ b


def _checked(x: np.ndarray) -> np.ndarray:
    if not np.all(np.isfinite(x)):
        raise SingularSystemError("Solution contains non-finite values")
    return x


def solve_least_squares(a, b) -> np.ndarray:
    """Solve min ||Ax - b||^2 through the normal equations A^T A x = A^T b."""
    ata, atb = _normal_equations(a, b)
    return _checked(gaussian_eliminate(ata, atb))


def solve_least_squares_regularized(a, b, lam: float) -> np.ndarray:
    """
    Ridge solve: minimize ||Ax - b||^2 + lam * ||x||^2.

    Adding lam to the diagonal of A^T A makes the system positive definite
    for any lam > 0, so teams that always share an alliance, or events with
    fewer matches than teams, still yield a unique solution.
    """
    if not math.isfinite(lam) or lam < 0:
        raise ValueError(f"Ridge lambda must be finite and non-negative, got {lam}")
    ata, atb = _normal_equations(a, b)
    ata = add_regularization(ata, lam)
    logger.debug("Solving %dx%d ridge system with lambda=%g", ata.shape[0], ata.shape[1], lam)
    return _checked(gaussian_eliminate(ata, atb))
