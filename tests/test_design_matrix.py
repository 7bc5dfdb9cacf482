"""Unit tests for design matrix construction."""

import numpy as np
import pytest

from ftc_ratings.models.match import Match
from ftc_ratings.ratings.design_matrix import (
    SCORE_FUNCTIONS,
    Metric,
    active_teams,
    build_design_matrix,
    build_metric_matrix,
    ccwm_score,
    opr_score,
    participating_teams,
)


@pytest.fixture
def sample_matches():
    """Three matches between six teams."""
    return [
        Match([1, 2], [3, 4], red_score=100, blue_score=80, red_penalties=10, blue_penalties=5),
        Match([5, 6], [1, 3], red_score=60, blue_score=90),
        Match([2, 4], [5, 6], red_score=75, blue_score=75, red_penalties=0, blue_penalties=15),
    ]


def test_shape_and_indicator_values(sample_matches):
    design = build_design_matrix(sample_matches, None, opr_score)
    assert design.a.shape == (6, 6)
    assert design.b.shape == (6,)
    assert set(np.unique(design.a)) <= {0.0, 1.0}
    # Every alliance row has exactly two teams
    np.testing.assert_array_equal(design.a.sum(axis=1), [2, 2, 2, 2, 2, 2])


def test_row_order_red_then_blue(sample_matches):
    design = build_design_matrix(sample_matches, None, opr_score)
    index = design.column_index()
    assert design.a[0, index[1]] == 1 and design.a[0, index[2]] == 1
    assert design.a[1, index[3]] == 1 and design.a[1, index[4]] == 1
    np.testing.assert_array_equal(design.b, [100, 80, 60, 90, 75, 75])


def test_ccwm_targets_sum_to_zero_within_match(sample_matches):
    design = build_design_matrix(sample_matches, None, ccwm_score)
    assert design.b[0] == 20
    assert design.b[1] == -20
    pairs = design.b.reshape(-1, 2).sum(axis=1)
    np.testing.assert_array_equal(pairs, np.zeros(3))


@pytest.mark.parametrize(
    "metric, red, blue",
    [
        (Metric.OPR, 100, 80),
        (Metric.NP_OPR, 90, 75),
        (Metric.DPR, 80, 100),
        (Metric.NP_DPR, 75, 90),
        (Metric.CCWM, 20, -20),
    ],
)
def test_metric_score_functions(sample_matches, metric, red, blue):
    match = sample_matches[0]
    score_fn = SCORE_FUNCTIONS[metric]
    assert score_fn(match, True) == red
    assert score_fn(match, False) == blue


def test_absent_teams_get_no_column(sample_matches):
    design = build_design_matrix(sample_matches, [99, 6, 5, 4, 3, 2, 1, 42], opr_score)
    assert design.active_teams == [6, 5, 4, 3, 2, 1]
    assert design.a.shape == (6, 6)


def test_unknown_match_team_is_dropped(sample_matches):
    design = build_design_matrix(sample_matches, [1, 2, 3], opr_score)
    assert design.active_teams == [1, 2, 3]
    assert design.a.shape == (6, 3)
    # Blue alliance of match 0 only keeps team 3
    np.testing.assert_array_equal(design.a[1], [0, 0, 1])
    # Match 2 red (2, 4) keeps only team 2
    np.testing.assert_array_equal(design.a[4], [0, 1, 0])


def test_duplicate_candidates_collapse(sample_matches):
    assert active_teams(sample_matches, [3, 3, 1, 1]) == [3, 1]


def test_participating_teams_sorted(sample_matches):
    assert participating_teams(sample_matches) == [1, 2, 3, 4, 5, 6]


def test_empty_matches_give_empty_design():
    design = build_metric_matrix([], [1, 2], Metric.OPR)
    assert design.is_empty
    assert design.a.shape == (0, 0)


def test_decode_maps_solution_to_teams(sample_matches):
    design = build_metric_matrix(sample_matches, [2, 1, 3, 4, 5, 6], Metric.OPR)
    decoded = design.decode([1, 2, 3, 4, 5, 6])
    assert decoded[2] == 1.0
    assert decoded[1] == 2.0
    with pytest.raises(ValueError):
        design.decode([1, 2])


def test_gram_is_team_pair_counts(sample_matches):
    design = build_metric_matrix(sample_matches, None, Metric.OPR)
    gram = design.gram()
    index = design.column_index()
    # Team 1 played twice, once with team 2 and once with team 3
    assert gram[index[1], index[1]] == 2
    assert gram[index[1], index[2]] == 1
    assert gram[index[1], index[3]] == 1
    assert gram[index[1], index[4]] == 0
