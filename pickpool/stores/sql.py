"""
Game catalog and pick store backed by Flask-SQLAlchemy.

Both hand plain records (pickpool.pool.types) to the core, never ORM objects.
Database failures surface as CatalogUnavailable / StoreUnavailable.
"""

import logging

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from pickpool import db
from pickpool.models import Game, Submission, SubmissionPick, WeekPickCount
from pickpool.pool.errors import (
    CatalogUnavailable,
    ConcurrentSubmission,
    DuplicateGamePick,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


class SqlGameCatalog:
    def get_game(self, game_id):
        try:
            game = db.session.get(Game, game_id)
        except SQLAlchemyError as e:
            logger.error(f"Catalog lookup failed for {game_id}: {e}")
            raise CatalogUnavailable("Game catalog is unavailable") from e
        return game.to_record() if game else None

    def list_games(self, week):
        try:
            games = (
                Game.query.filter_by(week=week)
                .order_by(Game.kickoff, Game.game_id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Catalog listing failed for week {week}: {e}")
            raise CatalogUnavailable("Game catalog is unavailable") from e
        return [game.to_record() for game in games]

    def upsert_game(self, record):
        """
        Insert or refresh a game from the odds feed.

        Odds and kickoff are refreshed; a winner is only ever filled in, never
        changed once set, and a completed game stays completed.
        """
        game = db.session.get(Game, record.game_id)
        if game is None:
            game = Game(
                game_id=record.game_id,
                week=record.week,
                away_team=record.away_team,
                home_team=record.home_team,
                winner="",
            )
            db.session.add(game)
        game.update_odds(record.spread, record.away_spread_value, record.kickoff)
        if record.winner and not game.winner:
            game.set_winner(record.winner)
        if record.completed:
            game.mark_completed()
        return game

    def set_winner(self, game_id, team):
        game = db.session.get(Game, game_id)
        if game is None:
            return None
        try:
            if game.set_winner(team):
                db.session.commit()
                logger.info(f"Result recorded: {game_id} won by {team}")
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to record result for {game_id}: {e}")
            raise CatalogUnavailable("Game catalog is unavailable") from e
        return game.to_record()


class SqlPickStore:
    def count_picks(self, username, week):
        return (
            db.session.query(func.count(SubmissionPick.id))
            .filter(SubmissionPick.username == username, SubmissionPick.week == week)
            .scalar()
            or 0
        )

    def append_submission(self, submission, expected_count=None):
        """
        Append a submission in one transaction.

        ``expected_count`` is the pick count the caller validated against; if
        another writer changed it meanwhile, ConcurrentSubmission is raised and
        nothing is written. Without it the current count is used.
        """
        try:
            if expected_count is None:
                expected_count = self.count_picks(submission.username, submission.week)
            self._advance_count(submission, expected_count)

            row = Submission.from_record(submission)
            db.session.add(row)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            duplicate = self._find_duplicate(submission)
            if duplicate:
                raise DuplicateGamePick(duplicate) from e
            logger.error(f"Integrity error appending submission: {e}")
            raise StoreUnavailable("Pick store rejected the submission") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to append submission for {submission.username}: {e}")
            raise StoreUnavailable("Pick store is unavailable") from e

        logger.debug(f"Stored {row}")
        return row.to_record()

    def _advance_count(self, submission, expected_count):
        """
        Compare-and-set the user's week counter inside the open transaction.

        The conditional UPDATE takes the row's write lock, so a second writer
        blocks until the first commits and then matches no row.
        """
        username, week = submission.username, submission.week
        new_total = expected_count + len(submission.picks)

        updated = db.session.execute(
            update(WeekPickCount)
            .where(
                WeekPickCount.username == username,
                WeekPickCount.week == week,
                WeekPickCount.count == expected_count,
            )
            .values(count=new_total)
        ).rowcount
        if updated:
            return

        # First submission of the week: the primary key decides the race
        if db.session.get(WeekPickCount, (username, week)) is None:
            db.session.add(WeekPickCount(username=username, week=week, count=new_total))
            try:
                db.session.flush()
                return
            except IntegrityError:
                pass

        db.session.rollback()
        raise ConcurrentSubmission(username, week)

    def _find_duplicate(self, submission):
        taken = {
            game_id
            for (game_id,) in db.session.query(SubmissionPick.game_id).filter(
                SubmissionPick.username == submission.username,
                SubmissionPick.week == submission.week,
                SubmissionPick.game_id.in_(submission.game_ids),
            )
        }
        for game_id in submission.game_ids:
            if game_id in taken:
                return game_id
        return None

    def list_submissions(self, username=None, week=None):
        """All matching submissions with their picks, loaded in one query."""
        try:
            query = Submission.query.options(joinedload(Submission.picks))
            if username is not None:
                query = query.filter(Submission.username == username)
            if week is not None:
                query = query.filter(Submission.week == week)
            rows = query.order_by(Submission.id).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to list submissions: {e}")
            raise StoreUnavailable("Pick store is unavailable") from e
        return [row.to_record() for row in rows]
