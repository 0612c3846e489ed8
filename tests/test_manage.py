"""Tests for the management CLI."""

import pytest
from click.testing import CliRunner

import manage


@pytest.fixture
def runner(app):
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(manage.cli, list(args), catch_exceptions=False)


class TestGamesCommands:
    def test_add_and_list(self, runner):
        result = invoke(runner, "games", "add", "3-1", "3", "BUF", "MIA", "--spread", "BUF -2")
        assert "Saved game 3-1" in result.output

        result = invoke(runner, "games", "list", "3")
        assert "BUF @ MIA" in result.output
        assert "pending" in result.output

    def test_add_rejects_foreign_winner(self, runner):
        result = invoke(runner, "games", "add", "3-1", "3", "BUF", "MIA", "--winner", "KC")
        assert "KC is not playing" in result.output

    def test_week_follows_configured_max(self, app, runner):
        app.config["MAX_WEEK"] = 17
        result = runner.invoke(manage.cli, ["games", "list", "18"])
        assert result.exit_code == 2
        assert "between 1 and 17" in result.output

    def test_add_existing_id_with_other_teams(self, runner, sql_catalog):
        result = invoke(runner, "games", "add", "1-1", "1", "KC", "LV")
        assert "already exists as BUF @ NYJ" in result.output
        assert "Saved game" not in result.output
        assert sql_catalog.get_game("1-1").away_team == "BUF"

    def test_add_conflicting_winner(self, runner, sql_catalog):
        sql_catalog.set_winner("1-1", "BUF")
        result = invoke(runner, "games", "add", "1-1", "1", "BUF", "NYJ", "--winner", "NYJ")
        assert "already final (BUF won)" in result.output
        assert sql_catalog.get_game("1-1").winner == "BUF"

    def test_set_winner_once(self, runner, sql_catalog):
        assert "BUF wins" in invoke(runner, "games", "set-winner", "1-1", "BUF").output
        result = invoke(runner, "games", "set-winner", "1-1", "NYJ")
        assert "already final" in result.output

    def test_set_winner_unknown_game(self, runner, sql_catalog):
        assert "not found" in invoke(runner, "games", "set-winner", "9-9", "BUF").output


class TestPicksAndStandings:
    def test_submit_and_standings(self, runner, sql_catalog):
        result = invoke(runner, "picks", "submit", "alice", "1", "1-1-BUF,1-2-KC,1-3-DAL")
        assert "Successfully saved 3 picks" in result.output

        result = invoke(runner, "picks", "submit", "alice", "1", "1-4-SF")
        assert "Weekly pick limit" in result.output

        for game_id, team in (("1-1", "BUF"), ("1-2", "KC"), ("1-3", "DAL")):
            invoke(runner, "games", "set-winner", game_id, team)

        result = invoke(runner, "standings")
        line = [l for l in result.output.splitlines() if "alice" in l][0]
        assert line.split() == ["1", "alice", "4", "3", "0", "1"]

    def test_list_picks(self, runner, sql_catalog):
        invoke(runner, "picks", "submit", "bob", "2", "2-1-NYJ")
        result = invoke(runner, "picks", "list", "--username", "bob")
        assert "bob week 2: 2-1 NYJ" in result.output

    def test_standings_empty(self, runner):
        assert "No picks yet" in invoke(runner, "standings").output

    def test_status(self, runner, sql_catalog):
        result = invoke(runner, "status")
        assert "Database: Connected" in result.output
        assert "Games: 0/8 completed" in result.output
