"""Tests for the Flask-SQLAlchemy catalog and pick store."""

import threading
from dataclasses import replace

import pytest
from conftest import WEEK_ONE, make_game, make_submission

from pickpool import create_app, db
from pickpool.models import Game, SubmissionPick, WeekPickCount
from pickpool.pool.errors import ConcurrentSubmission, DuplicateGamePick, ResultAlreadyFinal
from pickpool.services.pool_service import PoolService
from pickpool.stores.sql import SqlGameCatalog, SqlPickStore


class TestSqlGameCatalog:
    def test_get_game_returns_record(self, sql_catalog):
        game = sql_catalog.get_game("1-2")
        assert game.away_team == "KC"
        assert game.home_team == "LV"
        assert game.spread == "LV -3.5"
        assert game.winner == ""

    def test_get_unknown_game(self, sql_catalog):
        assert sql_catalog.get_game("9-9") is None

    def test_list_games_by_week(self, sql_catalog):
        assert [g.game_id for g in sql_catalog.list_games(2)] == ["2-1", "2-2", "2-3"]

    def test_set_winner(self, sql_catalog):
        game = sql_catalog.set_winner("1-1", "BUF")
        assert game.winner == "BUF"
        assert db.session.get(Game, "1-1").is_final

    def test_winner_cannot_change(self, sql_catalog):
        sql_catalog.set_winner("1-1", "BUF")
        with pytest.raises(ResultAlreadyFinal):
            sql_catalog.set_winner("1-1", "NYJ")
        assert sql_catalog.get_game("1-1").winner == "BUF"

    def test_set_winner_unknown_game(self, sql_catalog):
        assert sql_catalog.set_winner("9-9", "BUF") is None

    def test_upsert_refreshes_odds_but_keeps_winner(self, sql_catalog):
        sql_catalog.set_winner("1-1", "BUF")
        refreshed = replace(
            make_game("1-1", "BUF", "NYJ", winner="NYJ"),
            spread="BUF -7",
            away_spread_value=-7.0,
        )
        sql_catalog.upsert_game(refreshed)
        db.session.commit()

        game = sql_catalog.get_game("1-1")
        assert game.spread == "BUF -7"
        assert game.away_spread_value == -7.0
        assert game.winner == "BUF"


class TestSqlPickStore:
    def test_append_and_list(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-3", "DAL"), ("1-1", "BUF")))
        sql_store.append_submission(make_submission("bob", 1, ("1-1", "NYJ")))

        [alice] = sql_store.list_submissions(username="alice")
        assert alice.game_ids == ["1-3", "1-1"]
        assert alice.created_at is not None
        assert len(sql_store.list_submissions(week=1)) == 2
        assert sql_store.list_submissions(week=2) == []

    def test_duplicate_triple_rejected_by_database(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-1", "BUF")))
        with pytest.raises(DuplicateGamePick) as excinfo:
            sql_store.append_submission(make_submission("alice", 1, ("1-1", "NYJ")))
        assert excinfo.value.game_id == "1-1"
        assert SubmissionPick.query.count() == 1

    def test_same_game_different_users(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-1", "BUF")))
        sql_store.append_submission(make_submission("bob", 1, ("1-1", "BUF")))
        assert sql_store.count_picks("bob", 1) == 1

    def test_stale_expected_count(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-1", "BUF")))
        with pytest.raises(ConcurrentSubmission):
            sql_store.append_submission(
                make_submission("alice", 1, ("1-2", "KC")), expected_count=0
            )
        assert sql_store.count_picks("alice", 1) == 1

    def test_matching_expected_count(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-1", "BUF")))
        sql_store.append_submission(
            make_submission("alice", 1, ("1-2", "KC")), expected_count=1
        )
        assert sql_store.count_picks("alice", 1) == 2

    def test_counter_tracks_appends(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-1", "BUF"), ("1-2", "KC")))
        sql_store.append_submission(make_submission("alice", 1, ("1-3", "DAL")), expected_count=2)
        assert db.session.get(WeekPickCount, ("alice", 1)).count == 3

    def test_rejected_duplicate_leaves_counter(self, sql_store):
        sql_store.append_submission(make_submission("alice", 1, ("1-1", "BUF")))
        with pytest.raises(DuplicateGamePick):
            sql_store.append_submission(make_submission("alice", 1, ("1-1", "NYJ")))
        assert db.session.get(WeekPickCount, ("alice", 1)).count == 1


class TestSqlPoolService:
    def test_standings_from_database(self, app, sql_catalog):
        service = app.extensions["pool_service"]
        assert service.submit("alice", 1, "1-1-BUF,1-2-KC,1-3-DAL").success
        assert service.submit("bob", 1, "1-1-NYJ").success
        assert not service.submit("bob", 1, "1-1-BUF").success

        for game_id, winner in (("1-1", "BUF"), ("1-2", "KC"), ("1-3", "DAL")):
            sql_catalog.set_winner(game_id, winner)

        rows = service.standings()
        assert [(r.username, r.total_points, r.wins, r.losses) for r in rows] == [
            ("alice", 4, 3, 0),
            ("bob", 0, 0, 1),
        ]


class GatedPickStore(SqlPickStore):
    """Holds each reader until both have loaded the same history"""

    def __init__(self, barrier):
        self.barrier = barrier

    def list_submissions(self, username=None, week=None):
        submissions = super().list_submissions(username=username, week=week)
        self.barrier.wait(timeout=10)
        return submissions


@pytest.fixture
def file_app(tmp_path, monkeypatch):
    monkeypatch.setenv("TEST_DATABASE_URL", f"sqlite:///{tmp_path / 'pool.db'}")
    app = create_app("testing")
    with app.app_context():
        catalog = SqlGameCatalog()
        for game in WEEK_ONE:
            catalog.upsert_game(game)
        db.session.commit()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


class TestSeparateWorkers:
    def test_weekly_cap_holds_across_workers(self, file_app):
        with file_app.app_context():
            seed = PoolService(SqlGameCatalog(), SqlPickStore())
            assert seed.submit("alice", 1, "1-1-BUF,1-2-KC").success

        barrier = threading.Barrier(2)
        results = []

        def worker(picks):
            # Each worker has its own service, so its own in-process locks
            service = PoolService(SqlGameCatalog(), GatedPickStore(barrier))
            with file_app.app_context():
                results.append(service.submit("alice", 1, picks))

        threads = [threading.Thread(target=worker, args=(p,)) for p in ("1-3-DAL", "1-4-SF")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert sorted(r.success for r in results) == [False, True]
        loser = next(r for r in results if not r.success)
        assert isinstance(loser.error, ConcurrentSubmission)
        with file_app.app_context():
            assert SqlPickStore().count_picks("alice", 1) == 3
            assert db.session.get(WeekPickCount, ("alice", 1)).count == 3
