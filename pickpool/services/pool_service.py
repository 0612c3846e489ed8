"""
Pick submission and standings service.

Wraps the pure validator/scoring core with the two collaborators. Each
submission runs read-history, validate, append as one critical section per
(username, week), so two concurrent batches cannot both pass the weekly cap.
"""

import logging
import threading
from typing import NamedTuple, Optional

from pickpool.pool.codec import parse_picks
from pickpool.pool.errors import (
    CatalogUnavailable,
    InvalidRequest,
    PoolError,
    StoreUnavailable,
)
from pickpool.pool.scoring import PARLAY_BONUS, compute_stats
from pickpool.pool.standings import build_standings
from pickpool.pool.types import PickSubmission
from pickpool.pool.validator import MAX_WEEK, PICKS_PER_WEEK, validate_picks

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Picks could not be saved right now, please try again later"
LOCK_STRIPES = 64


class SubmissionResponse(NamedTuple):
    success: bool
    message: str
    error: Optional[PoolError] = None

    def to_dict(self):
        return {"success": self.success, "message": self.message}


class PoolService:
    def __init__(
        self,
        catalog,
        store,
        picks_per_week=PICKS_PER_WEEK,
        parlay_bonus=PARLAY_BONUS,
        max_week=MAX_WEEK,
        verify_catalog=True,
        on_submit=None,
    ):
        self.catalog = catalog
        self.store = store
        self.picks_per_week = picks_per_week
        self.parlay_bonus = parlay_bonus
        self.max_week = max_week
        self.verify_catalog = verify_catalog
        self.on_submit = on_submit

        # Fixed stripes: (username, week) pairs hash onto a bounded set of locks
        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def _lock_for(self, username, week):
        return self._locks[hash((username, week)) % len(self._locks)]

    def submit(self, username, week, picks):
        """
        Validate and store one batch of picks.

        Args:
            username: submitting user
            week: week number
            picks: wire string ``"gameId-team,..."`` or a list of (game_id, team)

        Returns:
            SubmissionResponse; never raises for bad input or collaborator failure
        """
        try:
            submission = self._submit(username, week, picks)
        except (StoreUnavailable, CatalogUnavailable) as e:
            logger.error(f"Submission failed for {username} week {week}: {e.message}")
            return SubmissionResponse(False, UNAVAILABLE_MESSAGE, e)
        except PoolError as e:
            logger.info(f"Rejected picks for {username} week {week}: {e.message}")
            return SubmissionResponse(False, e.message, e)

        count = len(submission.picks)
        noun = "pick" if count == 1 else "picks"
        logger.info(f"Saved {count} {noun} for {username} week {week}")
        return SubmissionResponse(
            True, f"Successfully saved {count} {noun} for week {week}!"
        )

    def _submit(self, username, week, picks):
        username = (username or "").strip()
        if isinstance(picks, str) or picks is None:
            picks = parse_picks(picks)
        else:
            picks = list(picks)
        if not picks:
            raise InvalidRequest("No picks were submitted")

        with self._lock_for(username, week):
            history = self.store.list_submissions(username=username, week=week)
            result = validate_picks(
                history,
                picks,
                username,
                week,
                picks_per_week=self.picks_per_week,
                max_week=self.max_week,
            )
            if not result.accepted:
                raise result.reason

            if self.verify_catalog:
                self._check_against_catalog(picks, week)

            existing_count = sum(len(s.picks) for s in history)
            submission = self.store.append_submission(
                PickSubmission(username=username, week=week, picks=picks),
                expected_count=existing_count,
            )

        if self.on_submit:
            self.on_submit(submission)
        return submission

    def _check_against_catalog(self, picks, week):
        for game_id, team in picks:
            game = self.catalog.get_game(game_id)
            if game is None:
                raise InvalidRequest(f"Game {game_id} not found")
            if game.week != week:
                raise InvalidRequest(f"Game {game_id} is not in week {week}")
            if not game.has_team(team):
                raise InvalidRequest(f"{team} is not playing in game {game_id}")
            if game.is_over:
                raise InvalidRequest(f"Game {game_id} is already complete")

    def compute_stats(self):
        """Full recompute over a snapshot of the pick store."""
        submissions = self.store.list_submissions()
        return compute_stats(
            submissions,
            self.catalog,
            picks_per_week=self.picks_per_week,
            bonus=self.parlay_bonus,
        )

    def standings(self):
        return build_standings(self.compute_stats())

    def user_picks(self, username=None, week=None):
        return self.store.list_submissions(username=username, week=week)
