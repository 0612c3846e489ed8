from datetime import datetime, timezone

from pickpool import db
from pickpool.pool.types import Pick, PickSubmission


class Submission(db.Model):
    """One accepted batch of picks. Append-only."""

    __tablename__ = "pick_submissions"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False)
    week = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    picks = db.relationship(
        "SubmissionPick",
        backref="submission",
        order_by="SubmissionPick.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (db.Index("idx_submission_user_week", "username", "week"),)

    def __repr__(self):
        return f"<Submission {self.username} week={self.week} picks={len(self.picks)}>"

    @staticmethod
    def from_record(record):
        submission = Submission(
            username=record.username,
            week=record.week,
            created_at=record.created_at or datetime.now(timezone.utc),
        )
        for position, pick in enumerate(record.picks):
            submission.picks.append(
                SubmissionPick(
                    position=position,
                    username=record.username,
                    week=record.week,
                    game_id=pick.game_id,
                    team=pick.team,
                )
            )
        return submission

    def to_record(self):
        return PickSubmission(
            username=self.username,
            week=self.week,
            picks=tuple(Pick(p.game_id, p.team) for p in self.picks),
            created_at=self.created_at,
        )


class SubmissionPick(db.Model):
    __tablename__ = "submission_picks"

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(
        db.Integer, db.ForeignKey("pick_submissions.id"), nullable=False
    )
    position = db.Column(db.Integer, nullable=False, default=0)

    # Copied from the submission so the database can enforce one pick per game
    username = db.Column(db.String(64), nullable=False)
    week = db.Column(db.Integer, nullable=False)

    # Not a foreign key: picks on games unknown to the catalog are kept and
    # skipped at scoring time
    game_id = db.Column(db.String(20), nullable=False)
    team = db.Column(db.String(64), nullable=False)

    __table_args__ = (
        db.UniqueConstraint(
            "username", "week", "game_id", name="unique_user_week_game_pick"
        ),
        db.Index("idx_pick_game", "game_id"),
    )

    def __repr__(self):
        return f"<SubmissionPick {self.username} {self.game_id}-{self.team}>"


class WeekPickCount(db.Model):
    """
    Running pick total per user and week.

    Every append moves this row from the count the caller validated against
    to the new total in the same transaction as the insert, so concurrent
    writers on separate workers cannot both pass the weekly cap.
    """

    __tablename__ = "user_week_pick_counts"

    username = db.Column(db.String(64), primary_key=True)
    week = db.Column(db.Integer, primary_key=True)
    count = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<WeekPickCount {self.username} week={self.week} count={self.count}>"
