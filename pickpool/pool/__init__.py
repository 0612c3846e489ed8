from .codec import format_picks, parse_picks
from .scoring import compute_stats, score_pick
from .standings import build_standings
from .types import Game, GameCatalog, Pick, PickStore, PickSubmission, StandingsRow, UserStats
from .validator import ValidationResult, validate_picks

__all__ = [
    "Game",
    "GameCatalog",
    "Pick",
    "PickStore",
    "PickSubmission",
    "StandingsRow",
    "UserStats",
    "ValidationResult",
    "build_standings",
    "compute_stats",
    "format_picks",
    "parse_picks",
    "score_pick",
    "validate_picks",
]
