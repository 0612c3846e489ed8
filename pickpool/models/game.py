from datetime import datetime, timezone

from pickpool import db
from pickpool.pool.errors import ResultAlreadyFinal
from pickpool.pool.types import Game as GameRecord


class Game(db.Model):
    __tablename__ = "games"

    # "<week>-<n>", assigned by the odds sync
    game_id = db.Column(db.String(20), primary_key=True)
    week = db.Column(db.Integer, nullable=False)

    # Teams
    away_team = db.Column(db.String(64), nullable=False)
    home_team = db.Column(db.String(64), nullable=False)

    # Odds (informational only)
    spread = db.Column(db.String(64), default="")
    away_spread_value = db.Column(db.Float, default=0.0)

    kickoff = db.Column(db.DateTime)

    # Empty until the game is final, then immutable
    winner = db.Column(db.String(64), default="", nullable=False)
    # Over, with or without a winner (ties, cancellations)
    completed = db.Column(db.Boolean, default=False, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.Index("idx_game_week", "week"),
        db.CheckConstraint("home_team != away_team", name="different_teams"),
    )

    def __repr__(self):
        return f"<Game {self.game_id} {self.away_team} @ {self.home_team} Week {self.week}>"

    @property
    def is_final(self):
        return bool(self.winner)

    def set_winner(self, team):
        """Record the result. Re-setting the same winner is a no-op."""
        if team not in (self.away_team, self.home_team):
            raise ValueError(f"{team} is not playing in game {self.game_id}")
        if self.winner and self.winner != team:
            raise ResultAlreadyFinal(self.game_id, self.winner)
        changed = self.winner != team
        self.winner = team
        self.completed = True
        return changed

    def mark_completed(self):
        self.completed = True

    def update_odds(self, spread, away_spread_value, kickoff=None):
        self.spread = spread or ""
        self.away_spread_value = away_spread_value or 0.0
        if kickoff is not None:
            self.kickoff = kickoff

    def to_record(self):
        """Detach into the plain record the scoring core works with."""
        return GameRecord(
            game_id=self.game_id,
            week=self.week,
            away_team=self.away_team,
            home_team=self.home_team,
            spread=self.spread or "",
            away_spread_value=self.away_spread_value or 0.0,
            kickoff=self.kickoff,
            winner=self.winner or "",
            completed=bool(self.completed),
        )
