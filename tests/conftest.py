"""Shared pytest fixtures and configuration hooks."""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the project root (which holds config.py and manage.py) is importable
PROJECT_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT_STR = str(PROJECT_ROOT)
if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

# Must be set before config.py is imported
TEST_ENV_VARS = {
    "SECRET_KEY": "test-secret-key",
    "FLASK_CONFIG": "testing",
    "LOG_TO_FILE": "False",
    "SCHEDULER_ENABLED": "False",
}
for key, value in TEST_ENV_VARS.items():
    os.environ.setdefault(key, value)

from pickpool import create_app, db  # noqa: E402
from pickpool.pool.types import Game, PickSubmission  # noqa: E402
from pickpool.services.pool_service import PoolService  # noqa: E402
from pickpool.stores.memory import InMemoryGameCatalog, InMemoryPickStore  # noqa: E402


def make_game(game_id, away="AWY", home="HOM", winner=""):
    week = int(game_id.split("-")[0])
    return Game(
        game_id=game_id,
        week=week,
        away_team=away,
        home_team=home,
        spread=f"{home} -3.5",
        away_spread_value=3.5,
        kickoff=datetime(2025, 9, 7, 17, 0, tzinfo=timezone.utc),
        winner=winner,
    )


def make_submission(username, week, *picks):
    return PickSubmission(username=username, week=week, picks=picks)


WEEK_ONE = [
    make_game("1-1", "BUF", "NYJ"),
    make_game("1-2", "KC", "LV"),
    make_game("1-3", "DAL", "PHI"),
    make_game("1-4", "SF", "SEA"),
    make_game("1-5", "GB", "CHI"),
]
WEEK_TWO = [
    make_game("2-1", "NYJ", "BUF"),
    make_game("2-2", "LV", "KC"),
    make_game("2-3", "PHI", "DAL"),
]


@pytest.fixture
def catalog():
    return InMemoryGameCatalog(WEEK_ONE + WEEK_TWO)


@pytest.fixture
def store():
    return InMemoryPickStore()


@pytest.fixture
def service(catalog, store):
    return PoolService(catalog, store)


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sql_catalog(app):
    from pickpool.stores.sql import SqlGameCatalog

    catalog = SqlGameCatalog()
    for game in WEEK_ONE + WEEK_TWO:
        catalog.upsert_game(game)
    db.session.commit()
    return catalog


@pytest.fixture
def sql_store(app):
    from pickpool.stores.sql import SqlPickStore

    return SqlPickStore()
