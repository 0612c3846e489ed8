"""
Scoring Engine for the pick'em pool

Folds every submission in the pick store against the game catalog into
per-user statistics. Games without a result, and picks that reference
unknown games, are skipped without failing the batch. For ranking the
totals, see build_standings() in pickpool/pool/standings.py
"""

import logging
from collections import defaultdict

from pickpool.pool.errors import GameNotFound, PendingGame
from pickpool.pool.types import UserStats
from pickpool.pool.validator import PICKS_PER_WEEK

logger = logging.getLogger(__name__)

PARLAY_BONUS = 1


def score_pick(pick, game):
    """
    Score a single pick.

    Returns:
        True for a correct pick, False for an incorrect one

    Raises:
        GameNotFound: ``game`` is None
        PendingGame: the game has no winner yet
    """
    if game is None:
        raise GameNotFound(pick.game_id)
    if not game.winner:
        raise PendingGame(pick.game_id)
    return game.winner == pick.team


def compute_stats(
    all_submissions, catalog, picks_per_week=PICKS_PER_WEEK, bonus=PARLAY_BONUS
):
    """
    Aggregate all submissions into ``{username: UserStats}``.

    Picks are grouped by (username, week): each week earns one point per
    correct pick, plus ``bonus`` when the user made exactly
    ``picks_per_week`` picks that week and all of them won. Every user who
    appears in a submission is in the result, even with nothing scored.
    """
    stats = {}
    week_wins = defaultdict(int)
    week_picks = defaultdict(int)
    seen_picks = set()
    games = {}

    for submission in all_submissions:
        user_stats = stats.setdefault(submission.username, UserStats())
        week_key = (submission.username, submission.week)
        week_picks.setdefault(week_key, 0)

        for pick in submission.picks:
            pick_key = week_key + (pick.game_id,)
            if pick_key in seen_picks:
                logger.warning(
                    f"Duplicate pick scored again: user={submission.username} "
                    f"week={submission.week} game={pick.game_id}"
                )
            seen_picks.add(pick_key)
            week_picks[week_key] += 1

            if pick.game_id not in games:
                games[pick.game_id] = catalog.get_game(pick.game_id)

            try:
                correct = score_pick(pick, games[pick.game_id])
            except GameNotFound:
                logger.debug(f"Skipping pick on unknown game {pick.game_id}")
                continue
            except PendingGame:
                continue

            if correct:
                user_stats.add_win()
                week_wins[week_key] += 1
            else:
                user_stats.add_loss()

    for (username, week), picks_made in week_picks.items():
        stats[username].close_week(
            week_wins[(username, week)],
            picks_made,
            picks_per_week=picks_per_week,
            bonus=bonus,
        )

    return stats
