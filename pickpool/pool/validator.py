"""
Pick validation.

A pure check of a new batch of picks against a user's prior submissions for
the same week. Nothing is written here; appending an accepted batch is the
caller's job.
"""

from typing import NamedTuple, Optional

from pickpool.pool.errors import (
    DuplicateGamePick,
    InvalidRequest,
    PoolError,
    WeeklyLimitExceeded,
)

PICKS_PER_WEEK = 3
MAX_WEEK = 18


class ValidationResult(NamedTuple):
    accepted: bool
    reason: Optional[PoolError] = None

    @property
    def message(self):
        return self.reason.message if self.reason else "Valid picks"


ACCEPT = ValidationResult(True)


def reject(reason):
    return ValidationResult(False, reason)


def picked_game_ids(submissions, username, week):
    """Game ids ``username`` has already picked in ``week`` (UserWeekState)."""
    picked = []
    for submission in submissions:
        if submission.username != username or submission.week != week:
            continue
        picked.extend(submission.game_ids)
    return picked


def validate_picks(
    existing_submissions,
    new_picks,
    username,
    week,
    picks_per_week=PICKS_PER_WEEK,
    max_week=MAX_WEEK,
):
    """
    Decide whether ``new_picks`` may be added to ``username``'s week.

    Args:
        existing_submissions: every prior PickSubmission that may concern the
            user; submissions for other users or weeks are ignored
        new_picks: sequence of (game_id, team) pairs
        username: submitting user
        week: week the picks belong to
        picks_per_week: weekly cap on accepted picks

    Returns:
        ValidationResult: ``(True, None)`` or ``(False, <PoolError>)``
    """
    if not username or not str(username).strip():
        return reject(InvalidRequest("Username is required"))
    if week is None or isinstance(week, bool) or not isinstance(week, int):
        return reject(InvalidRequest("Week is required"))
    if not 1 <= week <= max_week:
        return reject(InvalidRequest(f"Week must be between 1 and {max_week}"))

    prior = picked_game_ids(existing_submissions, username, week)
    already_picked = set(prior)

    seen = set()
    for game_id, _team in new_picks:
        if game_id in already_picked or game_id in seen:
            return reject(DuplicateGamePick(game_id))
        seen.add(game_id)

    if len(prior) + len(new_picks) > picks_per_week:
        return reject(
            WeeklyLimitExceeded(len(prior), len(new_picks), limit=picks_per_week)
        )

    return ACCEPT
