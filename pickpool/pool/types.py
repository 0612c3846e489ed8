"""
Plain data types shared by the pick'em core, and the two collaborator
interfaces (game catalog, pick store) it runs against.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, NamedTuple, Optional, Protocol, Tuple


class Pick(NamedTuple):
    game_id: str
    team: str


@dataclass(frozen=True)
class Game:
    game_id: str
    week: int
    away_team: str
    home_team: str
    spread: str = ""
    away_spread_value: float = 0.0
    kickoff: Optional[datetime] = None
    winner: str = ""
    # Set once the game is over; a tie or cancellation completes without a winner
    completed: bool = False

    @property
    def is_final(self):
        return bool(self.winner)

    @property
    def is_over(self):
        return self.completed or self.is_final

    def has_team(self, team):
        return team in (self.away_team, self.home_team)

    def to_dict(self):
        return {
            "game_id": self.game_id,
            "week": self.week,
            "away_team": self.away_team,
            "home_team": self.home_team,
            "spread": self.spread,
            "away_spread_value": self.away_spread_value,
            "kickoff": self.kickoff.isoformat() if self.kickoff else None,
            "winner": self.winner or None,
            "is_final": self.is_final,
            "completed": self.is_over,
        }


@dataclass(frozen=True)
class PickSubmission:
    username: str
    week: int
    picks: Tuple[Pick, ...]
    created_at: Optional[datetime] = None

    def __post_init__(self):
        # Accept any iterable of pairs, store as an immutable tuple of Picks
        object.__setattr__(
            self, "picks", tuple(Pick(*pick) for pick in self.picks)
        )

    @property
    def game_ids(self):
        return [pick.game_id for pick in self.picks]

    def to_dict(self):
        return {
            "username": self.username,
            "week": self.week,
            "picks": [{"game_id": p.game_id, "team": p.team} for p in self.picks],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class UserStats:
    """Running totals for one user, folded over all of their submissions."""

    total_points: int = 0
    wins: int = 0
    losses: int = 0
    parlays: int = 0

    def add_win(self):
        self.wins += 1

    def add_loss(self):
        self.losses += 1

    def close_week(self, week_wins, week_picks, picks_per_week=3, bonus=1):
        """Bank a finished week: one point per win, plus the parlay bonus."""
        points = week_wins
        if week_picks == picks_per_week and week_wins == picks_per_week:
            points += bonus
            self.parlays += 1
        self.total_points += points
        return points


@dataclass(frozen=True)
class StandingsRow:
    username: str
    total_points: int
    wins: int
    losses: int
    parlays: int
    rank: int = field(default=0, compare=False)

    def to_dict(self):
        return {
            "rank": self.rank,
            "username": self.username,
            "total_points": self.total_points,
            "wins": self.wins,
            "losses": self.losses,
            "parlays": self.parlays,
        }


class GameCatalog(Protocol):
    def get_game(self, game_id: str) -> Optional[Game]: ...

    def list_games(self, week: int) -> List[Game]: ...


class PickStore(Protocol):
    def append_submission(self, submission: PickSubmission, expected_count=None): ...

    def list_submissions(
        self, username: Optional[str] = None, week: Optional[int] = None
    ) -> List[PickSubmission]: ...
