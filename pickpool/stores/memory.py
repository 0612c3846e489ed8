"""
In-process game catalog and pick store.

Used by tests and the CLI dry runs; also a reference for what the core expects
from any other catalog/store.
"""

import threading
from dataclasses import replace
from datetime import datetime, timezone

from pickpool.pool.errors import ConcurrentSubmission, ResultAlreadyFinal


class InMemoryGameCatalog:
    def __init__(self, games=None):
        self._lock = threading.Lock()
        self._games = {}
        for game in games or []:
            self.add_game(game)

    def add_game(self, game):
        with self._lock:
            self._games[game.game_id] = game
        return game

    def get_game(self, game_id):
        with self._lock:
            return self._games.get(game_id)

    def list_games(self, week):
        with self._lock:
            return [game for game in self._games.values() if game.week == week]

    def set_winner(self, game_id, team):
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            if not game.has_team(team):
                raise ValueError(f"{team} is not playing in game {game_id}")
            if game.winner and game.winner != team:
                raise ResultAlreadyFinal(game_id, game.winner)
            game = replace(game, winner=team, completed=True)
            self._games[game_id] = game
            return game


class InMemoryPickStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._submissions = []

    def _count_picks(self, username, week):
        return sum(
            len(s.picks)
            for s in self._submissions
            if s.username == username and s.week == week
        )

    def append_submission(self, submission, expected_count=None):
        """
        Append an accepted submission.

        When ``expected_count`` is given, the user's current pick count for
        the week must still equal it, otherwise ConcurrentSubmission is raised.
        """
        if submission.created_at is None:
            submission = replace(submission, created_at=datetime.now(timezone.utc))
        with self._lock:
            if expected_count is not None:
                current = self._count_picks(submission.username, submission.week)
                if current != expected_count:
                    raise ConcurrentSubmission(submission.username, submission.week)
            self._submissions.append(submission)
        return submission

    def list_submissions(self, username=None, week=None):
        with self._lock:
            snapshot = list(self._submissions)
        return [
            s
            for s in snapshot
            if (username is None or s.username == username)
            and (week is None or s.week == week)
        ]
