"""Ranking records produced by the rating pipeline."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class TeamRanking:
    """Performance metrics for one team over a set of matches."""

    team_id: int
    num_matches: int = 0
    opr: float = 0.0
    np_opr: float = 0.0
    ccwm: float = 0.0
    dpr: float = 0.0
    np_dpr: float = 0.0
    np_avg: float = 0.0

    def to_dict(self) -> dict:
        """Convert ranking to dictionary."""
        return {
            "team_id": self.team_id,
            "num_matches": self.num_matches,
            "opr": self.opr,
            "np_opr": self.np_opr,
            "ccwm": self.ccwm,
            "dpr": self.dpr,
            "np_dpr": self.np_dpr,
            "np_avg": self.np_avg,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TeamRanking":
        """Create ranking from dictionary."""
        return cls(
            team_id=int(data["team_id"]),
            num_matches=int(data.get("num_matches", 0)),
            opr=float(data.get("opr", 0.0)),
            np_opr=float(data.get("np_opr", 0.0)),
            ccwm=float(data.get("ccwm", 0.0)),
            dpr=float(data.get("dpr", 0.0)),
            np_dpr=float(data.get("np_dpr", 0.0)),
            np_avg=float(data.get("np_avg", 0.0)),
        )


@dataclass
class EventRankings:
    """Rankings for every team that played in one event."""

    event_code: str
    ridge_lambda: float
    lambda_strategy: Optional[str] = None
    condition_number: Optional[float] = None
    lambda_converged: bool = True
    singular_fallback: bool = False
    num_matches: int = 0
    rankings: List[TeamRanking] = field(default_factory=list)

    def ranking_for(self, team_id: int) -> Optional[TeamRanking]:
        return next((r for r in self.rankings if r.team_id == team_id), None)

    def to_dict(self) -> dict:
        """Convert event rankings to dictionary."""
        return {
            "event_code": self.event_code,
            "ridge_lambda": self.ridge_lambda,
            "lambda_strategy": self.lambda_strategy,
            "condition_number": self.condition_number,
            "lambda_converged": self.lambda_converged,
            "singular_fallback": self.singular_fallback,
            "num_matches": self.num_matches,
            "rankings": [r.to_dict() for r in self.rankings],
        }
