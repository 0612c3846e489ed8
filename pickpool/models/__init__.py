from pickpool import db  # noqa: F401 - imported for model imports

from .game import Game
from .submission import Submission, SubmissionPick, WeekPickCount

__all__ = [
    "Game",
    "Submission",
    "SubmissionPick",
    "WeekPickCount",
]
