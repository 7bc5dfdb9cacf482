"""Match model for alliance power ratings."""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

RED = "red"
BLUE = "blue"


class MatchIntegrityError(ValueError):
    """Raised when a match record has inconsistent teams or unusable scores."""


def _as_team_tuple(teams: Iterable[int], alliance: str) -> Tuple[int, ...]:
    result = tuple(int(t) for t in teams)
    if len(set(result)) != len(result):
        raise MatchIntegrityError(f"Duplicate team on {alliance} alliance: {list(result)}")
    return result


@dataclass(frozen=True)
class Match:
    """A single match between a red and a blue alliance."""

    red_teams: Tuple[int, ...]
    blue_teams: Tuple[int, ...]
    red_score: float
    blue_score: float
    red_penalties: float = 0.0
    blue_penalties: float = 0.0
    match_id: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        """Normalize and validate match data."""
        red = _as_team_tuple(self.red_teams, RED)
        blue = _as_team_tuple(self.blue_teams, BLUE)

        overlap = set(red) & set(blue)
        if overlap:
            raise MatchIntegrityError(
                f"Teams {sorted(overlap)} appear on both alliances"
                + (f" in match {self.match_id}" if self.match_id else "")
            )

        object.__setattr__(self, "red_teams", red)
        object.__setattr__(self, "blue_teams", blue)

        for name in ("red_score", "blue_score", "red_penalties", "blue_penalties"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise MatchIntegrityError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, value)

    @property
    def teams(self) -> Tuple[int, ...]:
        """All teams in the match, red alliance first."""
        return self.red_teams + self.blue_teams

    def alliance_of(self, team_id: int) -> Optional[str]:
        """Return which alliance a team played on, or None."""
        if team_id in self.red_teams:
            return RED
        if team_id in self.blue_teams:
            return BLUE
        return None

    def score_for(self, alliance: str) -> float:
        return self.red_score if alliance == RED else self.blue_score

    def penalties_for(self, alliance: str) -> float:
        return self.red_penalties if alliance == RED else self.blue_penalties

    def to_dict(self) -> dict:
        """Convert match to dictionary."""
        data = {
            "red_teams": list(self.red_teams),
            "blue_teams": list(self.blue_teams),
            "red_score": self.red_score,
            "blue_score": self.blue_score,
            "red_penalties": self.red_penalties,
            "blue_penalties": self.blue_penalties,
        }
        if self.match_id is not None:
            data["match_id"] = self.match_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Match":
        """Create match from dictionary."""
        match_id = data.get("match_id")
        return cls(
            red_teams=data["red_teams"],
            blue_teams=data["blue_teams"],
            red_score=data["red_score"],
            blue_score=data["blue_score"],
            red_penalties=data.get("red_penalties", 0.0),
            blue_penalties=data.get("blue_penalties", 0.0),
            match_id=str(match_id) if match_id is not None else None,
        )
