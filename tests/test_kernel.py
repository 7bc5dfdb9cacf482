"""Unit tests for the dense linear algebra kernel."""

import numpy as np
import pytest

from ftc_ratings.linalg.kernel import (
    SingularSystemError,
    add_regularization,
    gaussian_eliminate,
    multiply,
    solve_least_squares,
    solve_least_squares_regularized,
    transpose,
)


def test_transpose_and_multiply():
    m = [[1, 2, 3], [4, 5, 6]]
    t = transpose(m)
    assert t.shape == (3, 2)
    assert t[2, 0] == 3
    product = multiply(m, t)
    np.testing.assert_allclose(product, [[14, 32], [32, 77]])


def test_multiply_rejects_mismatched_shapes():
    with pytest.raises(ValueError):
        multiply([[1, 2]], [[1, 2]])


def test_gaussian_eliminate_simple_system():
    x = gaussian_eliminate([[2, 1], [1, 3]], [3, 5])
    np.testing.assert_allclose(x, [0.8, 1.4])


def test_gaussian_eliminate_needs_pivoting():
    # Zero on the leading diagonal only works with a row swap
    x = gaussian_eliminate([[0, 1], [1, 0]], [2, 3])
    np.testing.assert_allclose(x, [3, 2])


def test_gaussian_eliminate_does_not_modify_inputs():
    a = np.array([[4.0, 1.0], [2.0, 3.0]])
    b = np.array([1.0, 2.0])
    a_before, b_before = a.copy(), b.copy()
    gaussian_eliminate(a, b)
    np.testing.assert_array_equal(a, a_before)
    np.testing.assert_array_equal(b, b_before)


def test_gaussian_eliminate_singular_raises():
    with pytest.raises(SingularSystemError) as excinfo:
        gaussian_eliminate([[1, 2], [2, 4]], [1, 2])
    assert excinfo.value.column == 1
    assert abs(excinfo.value.pivot) < 1e-14


def test_singular_error_is_linalg_error():
    with pytest.raises(np.linalg.LinAlgError):
        gaussian_eliminate([[0, 0], [0, 0]], [0, 0])


def test_gaussian_eliminate_matches_numpy():
    rng = np.random.default_rng(7)
    m = rng.normal(size=(12, 12))
    a = m @ m.T + 12 * np.eye(12)
    b = rng.normal(size=12)
    np.testing.assert_allclose(gaussian_eliminate(a, b), np.linalg.solve(a, b), rtol=1e-9)


def test_gaussian_eliminate_shape_mismatch():
    with pytest.raises(ValueError):
        gaussian_eliminate([[1, 0], [0, 1]], [1, 2, 3])


def test_solve_least_squares_matches_lstsq():
    rng = np.random.default_rng(3)
    a = rng.normal(size=(30, 6))
    b = rng.normal(size=30)
    expected = np.linalg.lstsq(a, b, rcond=None)[0]
    np.testing.assert_allclose(solve_least_squares(a, b), expected, rtol=1e-8)


def test_solve_least_squares_underdetermined_raises():
    a = [[1, 1, 0, 0], [0, 0, 1, 1]]
    with pytest.raises(SingularSystemError):
        solve_least_squares(a, [50, 40])


def test_regularized_matches_closed_form_ridge():
    rng = np.random.default_rng(11)
    a = rng.integers(0, 2, size=(20, 8)).astype(float)
    b = rng.normal(50, 10, size=20)
    lam = 0.5
    expected = np.linalg.solve(a.T @ a + lam * np.eye(8), a.T @ b)
    np.testing.assert_allclose(solve_least_squares_regularized(a, b, lam), expected, rtol=1e-9)


def test_regularized_solves_rank_deficient_system():
    a = [[1, 1, 0, 0], [0, 0, 1, 1]]
    x = solve_least_squares_regularized(a, [50, 40], 0.1)
    assert np.all(np.isfinite(x))
    assert x[0] + x[1] == pytest.approx(50, abs=5)
    assert x[2] + x[3] == pytest.approx(40, abs=5)


@pytest.mark.parametrize("lam", [-0.1, float("nan"), float("inf")])
def test_regularized_rejects_bad_lambda(lam):
    with pytest.raises(ValueError):
        solve_least_squares_regularized([[1.0]], [1.0], lam)


def test_add_regularization_returns_copy():
    m = np.zeros((3, 3))
    reg = add_regularization(m, 0.25)
    np.testing.assert_allclose(np.diag(reg), [0.25, 0.25, 0.25])
    assert not m.any()


def test_design_rows_must_match_targets():
    with pytest.raises(ValueError):
        solve_least_squares([[1, 0], [0, 1]], [1, 2, 3])
