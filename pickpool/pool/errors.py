"""
Error taxonomy for pick submission and scoring.

Submission-time errors are handed back to the caller as failure responses;
scoring-time ones (GameNotFound, PendingGame) are absorbed by the engine.
"""


class PoolError(Exception):
    """Base class for all pool errors. ``message`` is safe to show users."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidRequest(PoolError):
    pass


class DuplicateGamePick(PoolError):
    def __init__(self, game_id):
        super().__init__(f"Game {game_id} has already been picked this week")
        self.game_id = game_id


class WeeklyLimitExceeded(PoolError):
    def __init__(self, current, attempted, limit=3):
        super().__init__(
            f"Weekly pick limit is {limit}: you already have {current} "
            f"and tried to add {attempted}"
        )
        self.current = current
        self.attempted = attempted
        self.limit = limit


class GameNotFound(PoolError):
    def __init__(self, game_id):
        super().__init__(f"Game {game_id} not found")
        self.game_id = game_id


class PendingGame(PoolError):
    def __init__(self, game_id):
        super().__init__(f"Game {game_id} has no result yet")
        self.game_id = game_id


class ResultAlreadyFinal(PoolError):
    def __init__(self, game_id, winner):
        super().__init__(f"Game {game_id} is already final ({winner} won)")
        self.game_id = game_id
        self.winner = winner


class ConcurrentSubmission(PoolError):
    def __init__(self, username, week):
        super().__init__(
            "Your picks for this week changed while submitting, please retry"
        )
        self.username = username
        self.week = week


class StoreUnavailable(PoolError):
    pass


class CatalogUnavailable(PoolError):
    pass
