"""Unit tests for match and ranking records."""

import math

import pytest

from ftc_ratings.models.match import BLUE, RED, Match, MatchIntegrityError
from ftc_ratings.models.ranking import EventRankings, TeamRanking


def test_match_normalizes_fields():
    match = Match([1, 2], [3, 4], red_score=100, blue_score=80)
    assert match.red_teams == (1, 2)
    assert match.blue_teams == (3, 4)
    assert isinstance(match.red_score, float)
    assert match.red_penalties == 0.0
    assert match.teams == (1, 2, 3, 4)


def test_match_is_immutable():
    match = Match([1, 2], [3, 4], red_score=100, blue_score=80)
    with pytest.raises(AttributeError):
        match.red_score = 5


def test_team_on_both_alliances_rejected():
    with pytest.raises(MatchIntegrityError, match="both alliances"):
        Match([1, 2], [2, 3], red_score=10, blue_score=20, match_id="Q3")


def test_duplicate_team_on_alliance_rejected():
    with pytest.raises(MatchIntegrityError):
        Match([1, 1], [2, 3], red_score=10, blue_score=20)


def test_non_finite_score_rejected():
    with pytest.raises(MatchIntegrityError, match="red_score"):
        Match([1], [2], red_score=math.nan, blue_score=20)


def test_alliance_lookup():
    match = Match([1, 2], [3, 4], red_score=100, blue_score=80, red_penalties=10, blue_penalties=5)
    assert match.alliance_of(1) == RED
    assert match.alliance_of(4) == BLUE
    assert match.alliance_of(9) is None
    assert match.score_for(BLUE) == 80
    assert match.penalties_for(RED) == 10


def test_match_dict_round_trip():
    match = Match([1, 2], [3, 4], red_score=100, blue_score=80, blue_penalties=5, match_id="Q1")
    restored = Match.from_dict(match.to_dict())
    assert restored == match
    assert restored.match_id == "Q1"


def test_event_rankings_to_dict():
    event = EventRankings(
        event_code="USMIQ1",
        ridge_lambda=0.01,
        num_matches=12,
        rankings=[TeamRanking(team_id=5, num_matches=4, opr=33.5)],
    )
    data = event.to_dict()
    assert data["event_code"] == "USMIQ1"
    assert data["rankings"][0]["opr"] == 33.5
    assert event.ranking_for(5).num_matches == 4
    assert event.ranking_for(6) is None
    assert TeamRanking.from_dict(data["rankings"][0]) == event.rankings[0]
